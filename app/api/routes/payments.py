"""
Landlord Payment Routes
  GET  /api/landlord/payments
  GET  /api/landlord/payments/stats?period=week|month|quarter|year
  GET  /api/landlord/payments/lease/{lease_id}
  POST /api/landlord/payments
  PUT  /api/landlord/payments/{payment_id}/status
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_landlord
from app.models.payment import PaymentStatus
from app.models.user import User
from app.schemas.lease import LeaseOut
from app.schemas.payment import (
    PaymentCreate, PaymentOut, PaymentStats, PaymentStatusUpdate, StatsPeriod,
)
from app.services.payment_service import PaymentService

router = APIRouter(tags=["Payments"])
logger = logging.getLogger(__name__)


def _payment_out(payment) -> dict:
    return PaymentOut.model_validate(payment).model_dump(mode="json")


# ==================== READ ====================

@router.get("")
def list_payments(
    status: Optional[PaymentStatus] = None,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    payments = PaymentService(db).list_payments(current_user, status)
    return {"success": True, "total": len(payments), "payments": [_payment_out(p) for p in payments]}


@router.get("/stats")
def payment_stats(
    period: StatsPeriod = StatsPeriod.MONTH,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    stats = PaymentService(db).payment_stats(current_user, period)
    return {"success": True, "stats": PaymentStats(**stats).model_dump(mode="json")}


@router.get("/lease/{lease_id}")
def lease_payment_history(
    lease_id: UUID,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    history = PaymentService(db).lease_payment_history(lease_id, current_user)
    return {
        "success": True,
        "lease": LeaseOut.model_validate(history["lease"]).model_dump(mode="json"),
        "payments": [_payment_out(p) for p in history["payments"]],
        "total_paid": history["total_paid"],
        "total_pending": history["total_pending"],
    }


# ==================== WRITE ====================

@router.post("", status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: PaymentCreate,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    payment = PaymentService(db).record_payment(
        payload.lease_id,
        current_user,
        amount=payload.amount,
        method=payload.method,
        timing_status=payload.timing_status,
        status=payload.status,
        note=payload.note,
        is_partial=payload.is_partial,
    )
    return {"success": True, "message": "Payment recorded successfully", "payment": _payment_out(payment)}


@router.put("/{payment_id}/status")
def update_payment_status(
    payment_id: UUID,
    payload: PaymentStatusUpdate,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    payment = PaymentService(db).update_payment_status(
        payment_id, current_user, payload.status, payload.note
    )
    return {"success": True, "message": "Payment status updated successfully", "payment": _payment_out(payment)}
