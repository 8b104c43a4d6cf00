"""
Listing Schemas
Moderation requests/responses and the tenant-facing browse shape.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from app.models.listing import ListingPaymentStatus, ListingStatus, RiskLevel
from app.models.property import UnitStatus


class ListingDecisionRequest(BaseModel):
    status: str
    admin_notes: Optional[str] = None


class ListingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    unit_id: uuid.UUID
    landlord_id: uuid.UUID
    status: ListingStatus
    attempt_count: int
    expires_at: Optional[datetime] = None
    admin_notes: List[Dict[str, Any]] = []
    amount: float
    payment_status: ListingPaymentStatus
    risk_level: RiskLevel
    fraud_risk_score: float
    created_at: datetime


class UnitOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    property_id: uuid.UUID
    label: str
    target_price: Optional[float] = None
    status: UnitStatus
    listed_at: Optional[datetime] = None


class BrowseUnitOut(UnitOut):
    property_title: str
    address: Optional[str] = None
