"""
Lease Models
Tables: leases
"""
from datetime import date
from enum import Enum
from sqlalchemy import (
    Date, Float, ForeignKey, Index, String, Text, Enum as SQLEnum, Uuid, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base, TimestampMixin


class LeaseStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    EXPIRED = "EXPIRED"
    TERMINATED = "TERMINATED"


TERMINAL_STATUSES = (LeaseStatus.EXPIRED, LeaseStatus.TERMINATED)

# Status changes accepted by an update; same-status updates are always allowed
ALLOWED_TRANSITIONS = {
    LeaseStatus.DRAFT: {LeaseStatus.ACTIVE, LeaseStatus.EXPIRED, LeaseStatus.TERMINATED},
    LeaseStatus.ACTIVE: {LeaseStatus.EXPIRED, LeaseStatus.TERMINATED},
    LeaseStatus.EXPIRED: set(),
    LeaseStatus.TERMINATED: set(),
}


class LeaseInterval(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class LeaseType(str, Enum):
    STANDARD = "STANDARD"
    SHORT_TERM = "SHORT_TERM"
    LONG_TERM = "LONG_TERM"
    FIXED_TERM = "FIXED_TERM"


class Lease(Base, TimestampMixin):
    """Binds one tenant to one unit for a rent interval."""
    __tablename__ = "leases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    unit_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("units.id"), nullable=False, index=True)
    # Null until a tenant is assigned to a draft
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=True, index=True)

    lease_nickname: Mapped[str] = mapped_column(String(255), nullable=False)
    lease_type: Mapped[LeaseType] = mapped_column(SQLEnum(LeaseType), default=LeaseType.STANDARD, nullable=False)
    status: Mapped[LeaseStatus] = mapped_column(
        SQLEnum(LeaseStatus), default=LeaseStatus.DRAFT, nullable=False, index=True
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=True)  # null = open-ended
    rent_amount: Mapped[float] = mapped_column(Float, nullable=False)
    interval: Mapped[LeaseInterval] = mapped_column(
        SQLEnum(LeaseInterval), default=LeaseInterval.MONTHLY, nullable=False
    )

    landlord_name: Mapped[str] = mapped_column(String(255), nullable=True)
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=True)
    rules: Mapped[str] = mapped_column(Text, nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=True)

    # Relationships
    unit = relationship("Unit", back_populates="leases")
    tenant = relationship("User", foreign_keys=[tenant_id])
    payments = relationship("Payment", back_populates="lease", order_by="Payment.created_at.desc()")

    __table_args__ = (
        Index(
            "uq_leases_unit_active",
            "unit_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )
