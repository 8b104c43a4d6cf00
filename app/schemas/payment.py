"""
Payment Request/Response Schemas
Pydantic models for payment API validation
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from app.models.payment import PaymentMethod, PaymentStatus, TimingStatus


class StatsPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


# ==================== Landlord ====================

class PaymentCreate(BaseModel):
    lease_id: uuid.UUID
    amount: float
    method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    timing_status: TimingStatus = TimingStatus.ONTIME
    is_partial: bool = False
    note: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    status: str
    note: Optional[str] = None


# ==================== Tenant ====================

class TenantPaymentCreate(BaseModel):
    amount: float
    method: Optional[PaymentMethod] = None
    note: Optional[str] = None


# ==================== Responses ====================

class PaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    lease_id: uuid.UUID
    amount: float
    method: PaymentMethod
    provider_txn_id: Optional[str] = None
    status: PaymentStatus
    timing_status: TimingStatus
    paid_at: Optional[datetime] = None
    is_partial: bool
    note: Optional[str] = None
    created_at: datetime


class PaymentSummary(BaseModel):
    total_payments: int
    paid_payments: int
    pending_payments: int
    total_amount: float
    pending_amount: float
    on_time_rate: float
    late_rate: float


class TrendPoint(BaseModel):
    month: str
    amount: float
    count: int


class PaymentStats(BaseModel):
    period: StatsPeriod
    summary: PaymentSummary
    timing: Dict[str, int]
    methods: Dict[str, int]
    trend: List[TrendPoint]
