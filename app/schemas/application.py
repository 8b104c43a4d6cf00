"""
Tenant Application Schemas
"""
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.models.listing import RiskLevel


class ApplicationCreate(BaseModel):
    full_name: Optional[str] = None
    employment_status: Optional[str] = None
    employer_name: Optional[str] = None
    monthly_income: Optional[float] = None
    is_smoker: bool = False
    has_pets: bool = False


class ApplicationReview(BaseModel):
    status: str
    notes: Optional[str] = None


class ApplicationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    unit_id: uuid.UUID
    full_name: str
    employment_status: Optional[str] = None
    employer_name: Optional[str] = None
    monthly_income: Optional[float] = None
    is_smoker: bool
    has_pets: bool
    risk_level: RiskLevel
    ai_risk_score: float
    screening_summary: Optional[str] = None
    is_approved: bool
    created_at: datetime
