"""
Tenant Application Model
A tenant's request to lease a unit, pending landlord review.
"""
from sqlalchemy import Boolean, Float, ForeignKey, String, Text, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship
import uuid

from app.db.base import Base, TimestampMixin
from app.models.listing import RiskLevel


class TenantScreening(Base, TimestampMixin):
    __tablename__ = "tenant_screenings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    unit_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("units.id"), nullable=False, index=True)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    employment_status: Mapped[str] = mapped_column(String(50), nullable=True)
    employer_name: Mapped[str] = mapped_column(String(255), nullable=True)
    monthly_income: Mapped[float] = mapped_column(Float, nullable=True)
    is_smoker: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_pets: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    risk_level: Mapped[RiskLevel] = mapped_column(SQLEnum(RiskLevel, name="screeningrisklevel"), default=RiskLevel.LOW, nullable=False)
    ai_risk_score: Mapped[float] = mapped_column(Float, default=0.2, nullable=False)
    screening_summary: Mapped[str] = mapped_column(Text, nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    tenant = relationship("User", foreign_keys=[tenant_id])
    unit = relationship("Unit")
