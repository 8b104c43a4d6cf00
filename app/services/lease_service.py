"""
Lease Service
Owns the lease state machine and keeps unit occupancy in step with it.

    DRAFT ──► ACTIVE ──► EXPIRED / TERMINATED
      └──────────────────► EXPIRED / TERMINATED

Every transition that also touches the unit is written in one commit; the
uq_leases_unit_active index turns a lost race into a ConflictError.
"""
from __future__ import annotations

import logging
import uuid
from collections import Counter
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import (
    ConflictError, ForbiddenError, NotFoundError, ValidationFailedError,
)
from app.db.base import utcnow
from app.models.application import TenantScreening
from app.models.lease import (
    ALLOWED_TRANSITIONS, TERMINAL_STATUSES, Lease, LeaseInterval, LeaseStatus,
)
from app.models.notification import NotificationType
from app.models.payment import Payment, PaymentStatus, TimingStatus
from app.models.property import Property, Unit, UnitStatus
from app.models.user import User, UserRole
from app.schemas.lease import LeaseCreate, LeaseUpdate
from app.services.notification_service import NotificationService, lease_message

logger = logging.getLogger(__name__)

# Approximate months per rent interval
MONTHLY_FACTOR = {
    LeaseInterval.MONTHLY: 1.0,
    LeaseInterval.WEEKLY: 4.33,
    LeaseInterval.DAILY: 30.0,
}

ACTIVE_LEASE_CONFLICT = "Unit is already occupied by another active lease"

# NOT NULL columns; a null for one of these in an update is ignored
REQUIRED_FIELDS = ("lease_nickname", "lease_type", "start_date", "rent_amount", "interval")


def today() -> date:
    return utcnow().date()


class LeaseService:
    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or NotificationService(db)

    # ==================== Helpers ====================

    def _landlord_leases(self, landlord: User):
        return (
            self.db.query(Lease)
            .join(Unit, Lease.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .filter(Property.owner_id == landlord.id)
        )

    def _get_owned_lease(self, lease_id: uuid.UUID, landlord: User) -> Lease:
        lease = self._landlord_leases(landlord).filter(Lease.id == lease_id).first()
        if not lease:
            raise NotFoundError("Lease not found")
        return lease

    def _other_active_lease(self, unit_id: uuid.UUID, exclude_id: Optional[uuid.UUID] = None) -> Optional[Lease]:
        q = self.db.query(Lease).filter(Lease.unit_id == unit_id, Lease.status == LeaseStatus.ACTIVE)
        if exclude_id is not None:
            q = q.filter(Lease.id != exclude_id)
        return q.first()

    def _release_unit(self, unit: Unit, lease_id: uuid.UUID) -> None:
        """Unit goes back to AVAILABLE once no other ACTIVE lease holds it."""
        if unit.status == UnitStatus.OCCUPIED and not self._other_active_lease(unit.id, lease_id):
            unit.status = UnitStatus.AVAILABLE

    def _get_tenant(self, tenant_id: uuid.UUID) -> User:
        tenant = (
            self.db.query(User)
            .filter(User.id == tenant_id, User.role == UserRole.TENANT)
            .first()
        )
        if not tenant:
            raise NotFoundError("Tenant not found")
        return tenant

    @staticmethod
    def _is_placeholder(tenant: Optional[User]) -> bool:
        return tenant is not None and tenant.email == settings.DRAFT_PLACEHOLDER_EMAIL

    def _is_unassigned(self, lease: Lease) -> bool:
        if lease.tenant_id is None:
            return True
        return self._is_placeholder(lease.tenant)

    @staticmethod
    def _check_terms(start_date: date, end_date: Optional[date], rent_amount: float) -> None:
        if end_date is not None and end_date <= start_date:
            raise ValidationFailedError("End date must be after start date")
        if rent_amount is None or rent_amount <= 0:
            raise ValidationFailedError("Rent amount must be greater than 0")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            # Postgres names the index, SQLite names the indexed column
            detail = str(e.orig)
            if "uq_leases_unit_active" in detail or "leases.unit_id" in detail:
                raise ConflictError(ACTIVE_LEASE_CONFLICT)
            logger.error(f"[lease] Integrity error on commit: {detail}")
            raise

    # ==================== Create / Activate ====================

    def create_lease(self, landlord: User, payload: LeaseCreate) -> Lease:
        unit = self.db.query(Unit).options(joinedload(Unit.property)).filter(Unit.id == payload.unit_id).first()
        if not unit:
            raise NotFoundError("Unit not found")
        if unit.property.owner_id != landlord.id:
            raise ConflictError("You do not own this unit")

        tenant = self._get_tenant(payload.tenant_id) if payload.tenant_id else None

        if self._other_active_lease(unit.id):
            raise ConflictError(ACTIVE_LEASE_CONFLICT)

        if payload.start_date < today():
            raise ValidationFailedError("Start date cannot be in the past")
        self._check_terms(payload.start_date, payload.end_date, payload.rent_amount)
        if payload.status not in (LeaseStatus.DRAFT, LeaseStatus.ACTIVE):
            raise ValidationFailedError("New leases must be DRAFT or ACTIVE")
        if payload.status == LeaseStatus.ACTIVE and tenant is None:
            raise ValidationFailedError("An active lease requires a tenant")

        lease = Lease(
            id=uuid.uuid4(),
            unit_id=unit.id,
            tenant_id=tenant.id if tenant else None,
            lease_nickname=payload.lease_nickname,
            lease_type=payload.lease_type,
            status=payload.status,
            start_date=payload.start_date,
            end_date=payload.end_date,
            rent_amount=payload.rent_amount,
            interval=payload.interval,
            landlord_name=payload.landlord_name or landlord.full_name,
            tenant_name=payload.tenant_name or (tenant.full_name if tenant else None),
            rules=payload.rules,
            notes=payload.notes,
        )
        self.db.add(lease)
        if lease.status == LeaseStatus.ACTIVE:
            unit.status = UnitStatus.OCCUPIED
        self._commit()
        self.db.refresh(lease)

        logger.info(f"[lease] Lease {lease.id} created as {lease.status.value} on unit {unit.id}")
        self.notifier.notify(landlord.id, NotificationType.LEASE, lease_message(lease, "CREATED"))
        return lease

    def activate_lease(self, lease_id: uuid.UUID, landlord: User) -> Lease:
        lease = self._get_owned_lease(lease_id, landlord)
        if lease.status == LeaseStatus.ACTIVE:
            raise ConflictError("Lease is already active")
        if lease.status in TERMINAL_STATUSES:
            raise ConflictError(f"Cannot activate a {lease.status.value.lower()} lease")
        if self._other_active_lease(lease.unit_id, lease.id):
            raise ConflictError(ACTIVE_LEASE_CONFLICT)
        if self._is_unassigned(lease):
            raise ValidationFailedError("Assign a tenant before activating the lease")

        lease.status = LeaseStatus.ACTIVE
        lease.unit.status = UnitStatus.OCCUPIED
        self._commit()
        self.db.refresh(lease)

        logger.info(f"[lease] Lease {lease.id} activated")
        self.notifier.notify(landlord.id, NotificationType.LEASE, lease_message(lease, "UPDATED"))
        return lease

    # ==================== Update / Delete ====================

    def update_lease(self, lease_id: uuid.UUID, landlord: User, patch: LeaseUpdate) -> Lease:
        lease = self._get_owned_lease(lease_id, landlord)
        changes: Dict[str, Any] = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }
        old_status = lease.status
        new_status = changes.pop("status", None) or old_status

        if new_status != old_status and new_status not in ALLOWED_TRANSITIONS[old_status]:
            raise ConflictError(
                f"Cannot change lease status from {old_status.value} to {new_status.value}"
            )

        if "tenant_id" in changes:
            tenant = self._get_tenant(changes["tenant_id"]) if changes["tenant_id"] is not None else None
            if tenant is not None:
                changes.setdefault("tenant_name", tenant.full_name)
            unassigned = tenant is None or self._is_placeholder(tenant)
        else:
            unassigned = self._is_unassigned(lease)

        start = changes.get("start_date", lease.start_date)
        if start != lease.start_date and start < today():
            raise ValidationFailedError("Start date cannot be in the past")
        self._check_terms(start, changes.get("end_date", lease.end_date), changes.get("rent_amount", lease.rent_amount))

        if new_status == LeaseStatus.ACTIVE:
            if unassigned:
                raise ValidationFailedError("An active lease requires a tenant")
            if old_status != LeaseStatus.ACTIVE and self._other_active_lease(lease.unit_id, lease.id):
                raise ConflictError(ACTIVE_LEASE_CONFLICT)

        for field, value in changes.items():
            setattr(lease, field, value)

        if new_status != old_status:
            lease.status = new_status
            if new_status == LeaseStatus.ACTIVE:
                lease.unit.status = UnitStatus.OCCUPIED
            elif old_status == LeaseStatus.ACTIVE:
                self._release_unit(lease.unit, lease.id)

        self._commit()
        self.db.refresh(lease)

        logger.info(f"[lease] Lease {lease.id} updated ({old_status.value} -> {lease.status.value})")
        self.notifier.notify(landlord.id, NotificationType.LEASE, lease_message(lease, "UPDATED"))
        return lease

    def delete_lease(self, lease_id: uuid.UUID, landlord: User) -> None:
        lease = self._get_owned_lease(lease_id, landlord)
        if self.db.query(Payment.id).filter(Payment.lease_id == lease.id).first():
            raise ConflictError(
                "Cannot delete lease with existing payments. "
                "Consider updating the status to 'TERMINATED' instead."
            )

        unit = lease.unit
        if lease.status == LeaseStatus.ACTIVE:
            self._release_unit(unit, lease.id)
        self.db.delete(lease)
        self.db.commit()
        logger.info(f"[lease] Lease {lease_id} deleted")

    # ==================== Assignment ====================

    def assign_lease_to_tenant(self, application_id: uuid.UUID, lease_id: uuid.UUID, landlord: User) -> Lease:
        application = (
            self.db.query(TenantScreening)
            .options(joinedload(TenantScreening.unit).joinedload(Unit.property))
            .filter(TenantScreening.id == application_id)
            .first()
        )
        if not application:
            raise NotFoundError("Application not found")
        lease = self.db.query(Lease).options(joinedload(Lease.unit).joinedload(Unit.property)).filter(Lease.id == lease_id).first()
        if not lease:
            raise NotFoundError("Lease not found")

        if application.unit.property.owner_id != landlord.id or lease.unit.property.owner_id != landlord.id:
            raise ForbiddenError("You do not have access to this application or lease")
        if not self._is_unassigned(lease):
            raise ConflictError("This lease is already assigned to another tenant")
        if lease.unit_id != application.unit_id:
            raise ValidationFailedError("Lease unit does not match application unit")

        tenant = application.tenant
        unit_title = f"{application.unit.property.title} - {application.unit.label}"
        lease.tenant_id = tenant.id
        lease.tenant_name = tenant.full_name
        lease.notes = f"{lease.notes or ''}\nAssigned to {tenant.full_name} from approved application."
        self.db.delete(application)
        self.db.commit()
        self.db.refresh(lease)

        logger.info(f"[lease] Lease {lease.id} assigned to tenant {tenant.id}")
        self.notifier.notify(
            tenant.id,
            NotificationType.LEASE,
            f"A lease has been assigned to you for {unit_title}. Please review the lease details.",
        )
        return lease

    # ==================== Expiry ====================

    def expire_overdue_leases(self, landlord: User) -> int:
        """ACTIVE leases whose end_date has passed become EXPIRED; runs on read."""
        overdue = (
            self._landlord_leases(landlord)
            .filter(
                Lease.status == LeaseStatus.ACTIVE,
                Lease.end_date.isnot(None),
                Lease.end_date < today(),
            )
            .all()
        )
        if not overdue:
            return 0

        for lease in overdue:
            lease.status = LeaseStatus.EXPIRED
            self._release_unit(lease.unit, lease.id)
        self.db.commit()

        logger.info(f"[lease] Expired {len(overdue)} overdue leases for landlord {landlord.id}")
        for lease in overdue:
            self.notifier.notify(landlord.id, NotificationType.LEASE, lease_message(lease, "EXPIRED"))
        return len(overdue)

    # ==================== Read side ====================

    def list_leases(self, landlord: User, status: Optional[LeaseStatus] = None) -> List[Lease]:
        self.expire_overdue_leases(landlord)
        q = self._landlord_leases(landlord)
        if status:
            q = q.filter(Lease.status == status)
        return q.order_by(Lease.created_at.desc()).all()

    def get_lease(self, lease_id: uuid.UUID, landlord: User) -> Lease:
        return self._get_owned_lease(lease_id, landlord)

    def lease_stats(self, landlord: User) -> Dict[str, Any]:
        self.expire_overdue_leases(landlord)
        leases = self._landlord_leases(landlord).all()
        by_status = Counter(lease.status for lease in leases)

        now = today()
        horizon = now + timedelta(days=settings.EXPIRING_SOON_DAYS)
        expiring = sum(
            1 for lease in leases
            if lease.status == LeaseStatus.ACTIVE and lease.end_date and now < lease.end_date <= horizon
        )

        payments = [p for lease in leases for p in lease.payments]
        total_revenue = sum(p.amount for p in payments if p.status == PaymentStatus.PAID)
        monthly_revenue = sum(
            lease.rent_amount * MONTHLY_FACTOR[lease.interval]
            for lease in leases
            if lease.status == LeaseStatus.ACTIVE
        )
        on_time = sum(1 for p in payments if p.timing_status == TimingStatus.ONTIME)
        late = sum(1 for p in payments if p.timing_status == TimingStatus.LATE)
        reliability = round(on_time / len(payments) * 100) if payments else 0

        return {
            "overview": {
                "total_leases": len(leases),
                "active_leases": by_status[LeaseStatus.ACTIVE],
                "draft_leases": by_status[LeaseStatus.DRAFT],
                "expired_leases": by_status[LeaseStatus.EXPIRED],
                "terminated_leases": by_status[LeaseStatus.TERMINATED],
                "expiring_leases": expiring,
            },
            "revenue": {
                "total_revenue": round(total_revenue, 2),
                "monthly_revenue": round(monthly_revenue, 2),
            },
            "payments": {
                "total_payments": len(payments),
                "on_time_payments": on_time,
                "late_payments": late,
                "payment_reliability": reliability,
            },
            "lease_types": dict(Counter(lease.lease_type.value for lease in leases)),
            "intervals": dict(Counter(lease.interval.value for lease in leases)),
        }

    def tenant_current_lease(self, tenant: User) -> Optional[Lease]:
        """The tenant's ACTIVE lease, else a DRAFT assigned to them."""
        return (
            self.db.query(Lease)
            .options(joinedload(Lease.unit).joinedload(Unit.property))
            .filter(
                Lease.tenant_id == tenant.id,
                Lease.status.in_([LeaseStatus.ACTIVE, LeaseStatus.DRAFT]),
            )
            .order_by((Lease.status == LeaseStatus.ACTIVE).desc(), Lease.created_at.desc())
            .first()
        )
