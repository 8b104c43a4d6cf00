"""
Lease Schemas
Pydantic v2 models for the landlord lease endpoints.
Date/amount rules are enforced by LeaseService so they surface as 400s.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from app.models.lease import LeaseInterval, LeaseStatus, LeaseType


# ─────────────────────── Lease CRUD ───────────────────────

class LeaseCreate(BaseModel):
    unit_id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    lease_nickname: str
    lease_type: LeaseType = LeaseType.STANDARD
    status: LeaseStatus = LeaseStatus.DRAFT
    start_date: date
    end_date: Optional[date] = None
    rent_amount: float
    interval: LeaseInterval = LeaseInterval.MONTHLY
    landlord_name: Optional[str] = None
    tenant_name: Optional[str] = None
    rules: Optional[str] = None
    notes: Optional[str] = None


class LeaseUpdate(BaseModel):
    """Partial update; only fields that were sent are applied."""
    tenant_id: Optional[uuid.UUID] = None
    lease_nickname: Optional[str] = None
    lease_type: Optional[LeaseType] = None
    status: Optional[LeaseStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_amount: Optional[float] = None
    interval: Optional[LeaseInterval] = None
    landlord_name: Optional[str] = None
    tenant_name: Optional[str] = None
    rules: Optional[str] = None
    notes: Optional[str] = None


class LeaseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    unit_id: uuid.UUID
    tenant_id: Optional[uuid.UUID] = None
    lease_nickname: str
    lease_type: LeaseType
    status: LeaseStatus
    start_date: date
    end_date: Optional[date] = None
    rent_amount: float
    interval: LeaseInterval
    landlord_name: Optional[str] = None
    tenant_name: Optional[str] = None
    rules: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


# ─────────────────────── Stats ───────────────────────

class LeaseOverview(BaseModel):
    total_leases: int
    active_leases: int
    draft_leases: int
    expired_leases: int
    terminated_leases: int
    expiring_leases: int


class LeaseRevenue(BaseModel):
    total_revenue: float
    monthly_revenue: float


class LeasePaymentSummary(BaseModel):
    total_payments: int
    on_time_payments: int
    late_payments: int
    payment_reliability: int


class LeaseStats(BaseModel):
    overview: LeaseOverview
    revenue: LeaseRevenue
    payments: LeasePaymentSummary
    lease_types: Dict[str, int]
    intervals: Dict[str, int]


class AssignLeaseRequest(BaseModel):
    lease_id: uuid.UUID
