"""
Listing Service
Decides whether a unit may be put up for listing, applies admin moderation
decisions, and keeps unit.listed_at consistent with the unit's ACTIVE listing.

Expiry is lazy: an ACTIVE listing whose expires_at has passed reads as
EXPIRED everywhere through effective_status(); no job rewrites the row.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import (
    ConflictError, ForbiddenError, NotFoundError, ValidationFailedError,
)
from app.db.base import utcnow
from app.models.listing import (
    Listing, ListingStatus, ListingDecision, ListingPaymentStatus, RiskLevel,
    IN_FLIGHT_STATUSES,
)
from app.models.notification import NotificationType
from app.models.property import Property, Unit, UnitStatus
from app.models.user import User
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def effective_status(listing: Listing, now: Optional[datetime] = None) -> ListingStatus:
    """Stored status, except an ACTIVE listing past expires_at counts as EXPIRED."""
    now = now or utcnow()
    if (
        listing.status == ListingStatus.ACTIVE
        and listing.expires_at is not None
        and listing.expires_at <= now
    ):
        return ListingStatus.EXPIRED
    return ListingStatus(listing.status)


def listing_expiry(approved_at: datetime) -> datetime:
    return approved_at + relativedelta(months=settings.LISTING_VALIDITY_MONTHS)


def _unit_title(unit: Unit) -> str:
    title = unit.property.title if unit.property else "Property"
    return f"{title} - {unit.label}"


# ── ListingService ─────────────────────────────────────────────────────────────

class ListingService:
    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or NotificationService(db)

    # ── Lookups ──────────────────────────────────────────────────────────────

    def get_latest_listing(self, unit_id: uuid.UUID) -> Optional[Listing]:
        """Most recent listing attempt for a unit."""
        return (
            self.db.query(Listing)
            .filter(Listing.unit_id == unit_id)
            .order_by(Listing.created_at.desc())
            .first()
        )

    def _get_listing_or_404(self, listing_id: uuid.UUID) -> Listing:
        listing = (
            self.db.query(Listing)
            .options(joinedload(Listing.unit).joinedload(Unit.property))
            .filter(Listing.id == listing_id)
            .first()
        )
        if not listing:
            raise NotFoundError("Listing not found")
        return listing

    def _commit_or_conflict(self, message: str) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(message)

    # ── Landlord: request ────────────────────────────────────────────────────

    def request_listing(self, property_id: uuid.UUID, unit_id: uuid.UUID, landlord: User) -> Listing:
        unit = (
            self.db.query(Unit)
            .options(joinedload(Unit.property))
            .filter(Unit.id == unit_id)
            .first()
        )
        if not unit:
            raise NotFoundError("Unit not found")
        if unit.property_id != property_id:
            raise ValidationFailedError("Unit does not belong to this property")
        if unit.property.owner_id != landlord.id:
            raise ConflictError("You do not own this property")
        if unit.status != UnitStatus.AVAILABLE:
            raise ValidationFailedError("Unit is not available for listing")

        now = utcnow()
        last_listing = self.get_latest_listing(unit.id)

        if last_listing:
            current = effective_status(last_listing, now)
            if current in IN_FLIGHT_STATUSES:
                raise ConflictError(f"Unit already has a {current.value} listing in progress")
            if current == ListingStatus.BLOCKED:
                raise ForbiddenError("Unit is blocked from being listed")

            # Lapsed ACTIVE row: settle it before the replacement is inserted
            if last_listing.status == ListingStatus.ACTIVE:
                last_listing.status = ListingStatus.EXPIRED
                unit.listed_at = None
                self.db.flush()

        listing = Listing(
            id=uuid.uuid4(),
            unit_id=unit.id,
            landlord_id=landlord.id,
            status=ListingStatus.PENDING,
            attempt_count=(last_listing.attempt_count + 1) if last_listing else 1,
            admin_notes=[],
            amount=settings.LISTING_FEE,
            payment_status=ListingPaymentStatus.UNPAID,
            risk_level=RiskLevel.LOW,
            fraud_risk_score=0.1,
        )
        self.db.add(listing)
        self._commit_or_conflict("Unit already has a listing in progress")
        self.db.refresh(listing)

        logger.info(
            f"[listing] Listing {listing.id} requested for unit {unit.id} "
            f"(attempt {listing.attempt_count})"
        )
        self.notifier.notify_admins(
            NotificationType.LISTING_REQUEST,
            f"New listing request from {landlord.full_name} for "
            f"{unit.property.title} - Unit {unit.label}",
        )
        return listing

    # ── Admin: moderation ─────────────────────────────────────────────────────

    def decide_listing(
        self,
        listing_id: uuid.UUID,
        decision: str,
        admin_notes: Optional[str],
        admin: User,
    ) -> Listing:
        try:
            decision = ListingDecision(decision)
        except ValueError:
            raise ValidationFailedError("Valid status is required (APPROVED, REJECTED, BLOCKED)")

        listing = self._get_listing_or_404(listing_id)
        if listing.status != ListingStatus.PENDING:
            raise ConflictError("Only pending listings can be updated")

        now = utcnow()
        if admin_notes:
            note = {"date": now.isoformat(), "comment": admin_notes, "admin_id": str(admin.id)}
            # Reassign so the JSON column is flagged dirty
            listing.admin_notes = [*(listing.admin_notes or []), note]

        if decision == ListingDecision.APPROVED:
            # Approval and activation are one step
            listing.status = ListingStatus.ACTIVE
            listing.expires_at = listing_expiry(now)
            listing.unit.listed_at = now
        else:
            listing.status = ListingStatus(decision.value)

        self.db.commit()
        self.db.refresh(listing)
        logger.info(f"[listing] Listing {listing.id} {decision.value.lower()} by admin {admin.id}")

        unit_title = _unit_title(listing.unit)
        if decision == ListingDecision.APPROVED:
            message = f"Your listing request for {unit_title} has been approved and is now active!"
        elif decision == ListingDecision.REJECTED:
            reason = f" Reason: {admin_notes}" if admin_notes else ""
            message = f"Your listing request for {unit_title} has been rejected.{reason}"
        else:
            message = f"Your listing request for {unit_title} has been blocked."
        self.notifier.notify(listing.landlord_id, NotificationType.LISTING, message)
        return listing

    def delete_listing(self, listing_id: uuid.UUID) -> Dict[str, Any]:
        listing = self._get_listing_or_404(listing_id)
        unit = listing.unit
        snapshot = {
            "id": str(listing.id),
            "status": listing.status.value,
            "property_title": unit.property.title if unit.property else None,
            "unit_label": unit.label,
            "landlord_name": listing.landlord.full_name if listing.landlord else None,
        }
        landlord_id = listing.landlord_id
        unit_title = _unit_title(unit)

        if listing.status == ListingStatus.ACTIVE:
            unit.listed_at = None
        self.db.delete(listing)
        self.db.commit()

        logger.info(f"[listing] Listing {snapshot['id']} deleted")
        self.notifier.notify(
            landlord_id,
            NotificationType.LISTING,
            f"Your listing request for {unit_title} has been deleted by admin.",
        )
        return snapshot

    # ── Read side ────────────────────────────────────────────────────────────

    def get_units_listing_status(self, property_id: uuid.UUID, landlord: User) -> Dict[str, List[Dict[str, Any]]]:
        """Group a property's units by the effective status of their latest listing."""
        units = (
            self.db.query(Unit)
            .join(Property, Unit.property_id == Property.id)
            .filter(Unit.property_id == property_id, Property.owner_id == landlord.id)
            .order_by(Unit.label)
            .all()
        )
        if not units:
            raise NotFoundError("No units found for this property")

        categories: Dict[str, List[Dict[str, Any]]] = {"ELIGIBLE": []}
        categories.update({s.value: [] for s in ListingStatus})

        now = utcnow()
        for unit in units:
            latest = self.get_latest_listing(unit.id)
            if latest:
                categories[effective_status(latest, now).value].append(
                    {"unit": unit, "listing": latest}
                )
            elif unit.status == UnitStatus.AVAILABLE:
                categories["ELIGIBLE"].append({"unit": unit, "listing": None})
        return categories

    def list_requests(self, status: Optional[str] = None) -> List[Listing]:
        """Moderation queue for admins, newest first."""
        q = self.db.query(Listing).options(
            joinedload(Listing.unit).joinedload(Unit.property),
            joinedload(Listing.landlord),
        )
        if status:
            try:
                wanted = ListingStatus(status.upper())
            except ValueError:
                raise ValidationFailedError(f"Unknown listing status '{status}'")
            now = utcnow()
            if wanted == ListingStatus.EXPIRED:
                q = q.filter(or_(
                    Listing.status == ListingStatus.EXPIRED,
                    (Listing.status == ListingStatus.ACTIVE) & (Listing.expires_at <= now),
                ))
            elif wanted == ListingStatus.ACTIVE:
                q = q.filter(Listing.status == ListingStatus.ACTIVE, Listing.expires_at > now)
            else:
                q = q.filter(Listing.status == wanted)
        return q.order_by(Listing.created_at.desc()).all()

    def browse_active_units(self) -> List[Unit]:
        """Units a tenant can see: AVAILABLE with an unexpired ACTIVE listing."""
        now = utcnow()
        return (
            self.db.query(Unit)
            .join(Listing, Listing.unit_id == Unit.id)
            .options(joinedload(Unit.property))
            .filter(
                Unit.status == UnitStatus.AVAILABLE,
                Listing.status == ListingStatus.ACTIVE,
                Listing.expires_at > now,
            )
            .order_by(Unit.listed_at.desc())
            .distinct()
            .all()
        )

    def is_actively_listed(self, unit_id: uuid.UUID) -> bool:
        now = utcnow()
        return (
            self.db.query(Listing.id)
            .filter(
                Listing.unit_id == unit_id,
                Listing.status == ListingStatus.ACTIVE,
                Listing.expires_at > now,
            )
            .first()
            is not None
        )
