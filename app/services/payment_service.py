"""
Payment Service
Records rent payments against leases and reports on them.

timing_status is supplied when the payment is recorded and is never
recomputed afterwards; status may only move PENDING -> PAID.
"""
from __future__ import annotations

import logging
import secrets
import time
import uuid
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from app.db.base import utcnow
from app.models.lease import Lease, LeaseStatus
from app.models.notification import NotificationType
from app.models.payment import Payment, PaymentMethod, PaymentStatus, TimingStatus
from app.models.property import Property, Unit
from app.models.user import User
from app.schemas.payment import StatsPeriod
from app.services.notification_service import NotificationService, payment_message

logger = logging.getLogger(__name__)


def sandbox_txn_id() -> str:
    """Provider-style reference for sandbox payments: pi_<millis>_<random>."""
    return f"pi_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


def period_start(period: StatsPeriod, now: datetime) -> datetime:
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == StatsPeriod.WEEK:
        return now - timedelta(days=7)
    if period == StatsPeriod.QUARTER:
        return midnight.replace(month=((now.month - 1) // 3) * 3 + 1, day=1)
    if period == StatsPeriod.YEAR:
        return midnight.replace(month=1, day=1)
    return midnight.replace(day=1)


class PaymentService:
    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or NotificationService(db)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _landlord_payments(self, landlord: User):
        return (
            self.db.query(Payment)
            .join(Lease, Payment.lease_id == Lease.id)
            .join(Unit, Lease.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .filter(Property.owner_id == landlord.id)
        )

    def _get_owned_lease(self, lease_id: uuid.UUID, landlord: User) -> Lease:
        lease = (
            self.db.query(Lease)
            .join(Unit, Lease.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .filter(Lease.id == lease_id, Property.owner_id == landlord.id)
            .first()
        )
        if not lease:
            raise NotFoundError("Lease not found")
        return lease

    @staticmethod
    def _check_amount(amount: float) -> None:
        if amount is None or amount <= 0:
            raise ValidationFailedError("Payment amount must be greater than 0")

    # ── Landlord ─────────────────────────────────────────────────────────────

    def record_payment(
        self,
        lease_id: uuid.UUID,
        landlord: User,
        amount: float,
        method: PaymentMethod,
        timing_status: TimingStatus = TimingStatus.ONTIME,
        status: PaymentStatus = PaymentStatus.PENDING,
        note: Optional[str] = None,
        is_partial: bool = False,
    ) -> Payment:
        lease = self._get_owned_lease(lease_id, landlord)
        self._check_amount(amount)

        payment = Payment(
            id=uuid.uuid4(),
            lease_id=lease.id,
            amount=amount,
            method=method,
            status=status,
            timing_status=timing_status,
            paid_at=utcnow() if status == PaymentStatus.PAID else None,
            is_partial=is_partial,
            note=note,
        )
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)

        logger.info(f"[payment] Recorded {payment.status.value} payment {payment.id} on lease {lease.id}")
        self.notifier.notify(landlord.id, NotificationType.PAYMENT, payment_message(payment))
        return payment

    def update_payment_status(
        self,
        payment_id: uuid.UUID,
        landlord: User,
        new_status: str,
        note: Optional[str] = None,
    ) -> Payment:
        payment = self._landlord_payments(landlord).filter(Payment.id == payment_id).first()
        if not payment:
            raise NotFoundError("Payment not found")
        try:
            new_status = PaymentStatus(new_status)
        except ValueError:
            raise ValidationFailedError("Valid status is required (PENDING, PAID)")

        old_status = payment.status
        if old_status == PaymentStatus.PAID and new_status == PaymentStatus.PENDING:
            raise ConflictError("Paid payments cannot be reverted to pending")

        payment.status = new_status
        if new_status == PaymentStatus.PAID and payment.paid_at is None:
            payment.paid_at = utcnow()
        if note is not None:
            payment.note = note
        self.db.commit()
        self.db.refresh(payment)

        if new_status != old_status:
            logger.info(f"[payment] Payment {payment.id} {old_status.value} -> {new_status.value}")
            self.notifier.notify(landlord.id, NotificationType.PAYMENT, payment_message(payment))
        return payment

    def list_payments(self, landlord: User, status: Optional[PaymentStatus] = None) -> List[Payment]:
        q = self._landlord_payments(landlord)
        if status:
            q = q.filter(Payment.status == status)
        return q.order_by(Payment.created_at.desc()).all()

    def lease_payment_history(self, lease_id: uuid.UUID, landlord: User) -> Dict[str, Any]:
        lease = self._get_owned_lease(lease_id, landlord)
        payments = (
            self.db.query(Payment)
            .filter(Payment.lease_id == lease.id)
            .order_by(Payment.created_at.desc())
            .all()
        )
        paid = [p for p in payments if p.status == PaymentStatus.PAID]
        return {
            "lease": lease,
            "payments": payments,
            "total_paid": round(sum(p.amount for p in paid), 2),
            "total_pending": round(sum(p.amount for p in payments if p.status == PaymentStatus.PENDING), 2),
        }

    def payment_stats(self, landlord: User, period: StatsPeriod = StatsPeriod.MONTH) -> Dict[str, Any]:
        now = utcnow()
        payments = (
            self._landlord_payments(landlord)
            .filter(Payment.created_at >= period_start(period, now))
            .all()
        )
        paid = [p for p in payments if p.status == PaymentStatus.PAID]
        pending = [p for p in payments if p.status == PaymentStatus.PENDING]
        timing = Counter(p.timing_status for p in paid)

        def rate(count: int) -> float:
            return round(count / len(paid) * 100, 2) if paid else 0.0

        # Six calendar months ending with the current one, bucketed by paid_at
        first_month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0) - relativedelta(months=5)
        recent_paid = (
            self._landlord_payments(landlord)
            .filter(Payment.status == PaymentStatus.PAID, Payment.paid_at >= first_month)
            .all()
        )
        trend = []
        for i in range(6):
            month_start = first_month + relativedelta(months=i)
            month_end = month_start + relativedelta(months=1)
            bucket = [p for p in recent_paid if month_start <= p.paid_at < month_end]
            trend.append({
                "month": month_start.strftime("%b %Y"),
                "amount": round(sum(p.amount for p in bucket), 2),
                "count": len(bucket),
            })

        return {
            "period": period,
            "summary": {
                "total_payments": len(payments),
                "paid_payments": len(paid),
                "pending_payments": len(pending),
                "total_amount": round(sum(p.amount for p in paid), 2),
                "pending_amount": round(sum(p.amount for p in pending), 2),
                "on_time_rate": rate(timing[TimingStatus.ONTIME]),
                "late_rate": rate(timing[TimingStatus.LATE]),
            },
            "timing": {
                "on_time": timing[TimingStatus.ONTIME],
                "late": timing[TimingStatus.LATE],
                "advance": timing[TimingStatus.ADVANCE],
            },
            "methods": dict(Counter(p.method.value for p in paid)),
            "trend": trend,
        }

    # ── Tenant ───────────────────────────────────────────────────────────────

    def _tenant_lease(self, tenant: User) -> Lease:
        lease = (
            self.db.query(Lease)
            .options(joinedload(Lease.unit).joinedload(Unit.property))
            .filter(
                Lease.tenant_id == tenant.id,
                Lease.status.in_([LeaseStatus.ACTIVE, LeaseStatus.DRAFT]),
            )
            .order_by((Lease.status == LeaseStatus.ACTIVE).desc(), Lease.created_at.desc())
            .first()
        )
        if not lease:
            raise NotFoundError("No active lease found. Please contact your landlord.")
        return lease

    def submit_tenant_payment(
        self,
        tenant: User,
        amount: float,
        method: Optional[PaymentMethod],
        note: Optional[str] = None,
    ) -> Payment:
        """Sandbox checkout: the payment is settled immediately."""
        lease = self._tenant_lease(tenant)
        self._check_amount(amount)
        if not method:
            raise ValidationFailedError("Payment method is required")

        payment = Payment(
            id=uuid.uuid4(),
            lease_id=lease.id,
            amount=amount,
            method=method,
            provider_txn_id=sandbox_txn_id(),
            status=PaymentStatus.PAID,
            timing_status=TimingStatus.ONTIME,
            paid_at=utcnow(),
            is_partial=False,
            note=note,
        )
        self.db.add(payment)
        self.db.commit()
        self.db.refresh(payment)

        logger.info(f"[payment] Tenant {tenant.id} paid {payment.amount} on lease {lease.id} ({payment.provider_txn_id})")
        landlord_id = lease.unit.property.owner_id
        unit_title = f"{lease.unit.property.title} - {lease.unit.label}"
        self.notifier.notify(
            landlord_id,
            NotificationType.PAYMENT_RECEIVED,
            f"Payment of {payment.amount:,.2f} received from {tenant.full_name} for {unit_title}",
        )
        return payment

    def tenant_payments(self, tenant: User) -> List[Payment]:
        return (
            self.db.query(Payment)
            .join(Lease, Payment.lease_id == Lease.id)
            .filter(Lease.tenant_id == tenant.id)
            .order_by(Payment.created_at.desc())
            .all()
        )
