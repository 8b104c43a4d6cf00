"""
Payment Models
Rent payments recorded against a lease
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import String, Float, DateTime, Boolean, ForeignKey, Text, Enum as SQLEnum, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base, TimestampMixin


class PaymentStatus(str, Enum):
    """Payment status enum"""
    PENDING = "PENDING"
    PAID = "PAID"


class TimingStatus(str, Enum):
    """When the payment landed relative to its due point"""
    ONTIME = "ONTIME"
    LATE = "LATE"
    ADVANCE = "ADVANCE"


class PaymentMethod(str, Enum):
    """Payment method enum"""
    CASH = "CASH"
    GCASH = "GCASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CARD = "CARD"
    PAYPAL = "PAYPAL"
    OTHER = "OTHER"


class Payment(Base, TimestampMixin):
    """Payment transaction record"""
    __tablename__ = "payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    lease_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("leases.id"), nullable=False, index=True)

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(SQLEnum(PaymentMethod), nullable=False)
    provider_txn_id: Mapped[str] = mapped_column(String(255), nullable=True)

    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True
    )
    # Fixed at creation, never recomputed
    timing_status: Mapped[TimingStatus] = mapped_column(
        SQLEnum(TimingStatus), default=TimingStatus.ONTIME, nullable=False
    )
    paid_at: Mapped[datetime] = mapped_column(DateTime, nullable=True)
    is_partial: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    note: Mapped[str] = mapped_column(Text, nullable=True)

    # Relationships
    lease = relationship("Lease", back_populates="payments")
