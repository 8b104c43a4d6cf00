"""
Listing Models
A listing is one moderated attempt to publish a unit for tenant browsing.
"""
import uuid
from enum import Enum as PyEnum

from sqlalchemy import (
    Column, Integer, Float, DateTime, ForeignKey, Enum, JSON, Index, Uuid, text,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


# ── Enums ──────────────────────────────────────────────────────────────────────

class ListingStatus(str, PyEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    REJECTED = "REJECTED"
    BLOCKED = "BLOCKED"
    EXPIRED = "EXPIRED"


# A unit may hold at most one listing in any of these states
IN_FLIGHT_STATUSES = (ListingStatus.PENDING, ListingStatus.APPROVED, ListingStatus.ACTIVE)


class ListingDecision(str, PyEnum):
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    BLOCKED = "BLOCKED"


class ListingPaymentStatus(str, PyEnum):
    UNPAID = "UNPAID"
    PAID = "PAID"


class RiskLevel(str, PyEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# ── Models ─────────────────────────────────────────────────────────────────────

_IN_FLIGHT_SQL = "status IN ('PENDING', 'APPROVED', 'ACTIVE')"


class Listing(Base, TimestampMixin):
    __tablename__ = "listings"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    unit_id = Column(Uuid, ForeignKey("units.id", ondelete="CASCADE"), nullable=False, index=True)
    landlord_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(
        Enum(ListingStatus, name="listingstatus"),
        nullable=False,
        default=ListingStatus.PENDING,
        index=True,
    )
    attempt_count = Column(Integer, nullable=False, default=1)
    expires_at = Column(DateTime, nullable=True)

    # Append-only moderation log: [{"date", "comment", "admin_id"}, ...]
    admin_notes = Column(JSON, nullable=False, default=list)

    # Listing fee and risk defaults
    amount = Column(Float, nullable=False, default=0.0)
    payment_status = Column(
        Enum(ListingPaymentStatus, name="listingpaymentstatus"),
        nullable=False,
        default=ListingPaymentStatus.UNPAID,
    )
    risk_level = Column(Enum(RiskLevel, name="risklevel"), nullable=False, default=RiskLevel.LOW)
    fraud_risk_score = Column(Float, nullable=False, default=0.1)

    # Relationships
    unit = relationship("Unit", back_populates="listings")
    landlord = relationship("User", foreign_keys=[landlord_id])

    __table_args__ = (
        Index("ix_listings_unit_created", "unit_id", "created_at"),
        Index(
            "uq_listings_unit_inflight",
            "unit_id",
            unique=True,
            postgresql_where=text(_IN_FLIGHT_SQL),
            sqlite_where=text(_IN_FLIGHT_SQL),
        ),
    )
