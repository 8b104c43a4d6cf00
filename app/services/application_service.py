"""
Application Service
Tenant applications for listed units and the landlord's review of them.
An approved application waits for LeaseService.assign_lease_to_tenant;
a rejected one is deleted.
"""
from __future__ import annotations

import logging
import uuid
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import (
    ConflictError, ForbiddenError, NotFoundError, ValidationFailedError,
)
from app.models.application import TenantScreening
from app.models.lease import Lease, LeaseStatus
from app.models.notification import NotificationType
from app.models.property import Property, Unit, UnitStatus
from app.models.user import User
from app.schemas.application import ApplicationCreate
from app.services.listing_service import ListingService
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

REVIEW_DECISIONS = ("APPROVED", "REJECTED")


class ApplicationService:
    def __init__(self, db: Session, notifier: Optional[NotificationService] = None):
        self.db = db
        self.notifier = notifier or NotificationService(db)

    def submit_application(self, tenant: User, unit_id: uuid.UUID, payload: ApplicationCreate) -> TenantScreening:
        unit = self.db.query(Unit).options(joinedload(Unit.property)).filter(Unit.id == unit_id).first()
        if not unit:
            raise NotFoundError("Unit not found")
        if unit.status != UnitStatus.AVAILABLE or not ListingService(self.db, self.notifier).is_actively_listed(unit.id):
            raise ValidationFailedError("Unit is not available for applications")

        has_lease = (
            self.db.query(Lease.id)
            .filter(
                Lease.tenant_id == tenant.id,
                Lease.status.in_([LeaseStatus.ACTIVE, LeaseStatus.DRAFT]),
            )
            .first()
        )
        if has_lease:
            raise ConflictError(
                "You already have an active lease. Please contact your current landlord "
                "to terminate your existing lease before applying for a new property."
            )

        already_applied = (
            self.db.query(TenantScreening.id)
            .filter(TenantScreening.tenant_id == tenant.id, TenantScreening.unit_id == unit.id)
            .first()
        )
        if already_applied:
            raise ConflictError("You already have an application for this unit")

        application = TenantScreening(
            id=uuid.uuid4(),
            tenant_id=tenant.id,
            unit_id=unit.id,
            full_name=payload.full_name or tenant.full_name,
            employment_status=payload.employment_status,
            employer_name=payload.employer_name,
            monthly_income=payload.monthly_income,
            is_smoker=payload.is_smoker,
            has_pets=payload.has_pets,
        )
        self.db.add(application)
        self.db.commit()
        self.db.refresh(application)

        logger.info(f"[application] Tenant {tenant.id} applied for unit {unit.id}")
        self.notifier.notify(
            unit.property.owner_id,
            NotificationType.APPLICATION,
            f"New tenant application received for {unit.property.title} - Unit {unit.label}",
        )
        return application

    def review_application(
        self,
        application_id: uuid.UUID,
        landlord: User,
        status: str,
        notes: Optional[str] = None,
    ) -> Optional[TenantScreening]:
        """Returns the approved application, or None once a rejection deleted it."""
        if status not in REVIEW_DECISIONS:
            raise ValidationFailedError("Valid status is required (APPROVED or REJECTED)")

        application = (
            self.db.query(TenantScreening)
            .options(joinedload(TenantScreening.unit).joinedload(Unit.property))
            .filter(TenantScreening.id == application_id)
            .first()
        )
        if not application:
            raise NotFoundError("Application not found")
        if application.unit.property.owner_id != landlord.id:
            raise ForbiddenError("You can only review applications for your own properties")

        tenant_id = application.tenant_id
        unit_title = f"{application.unit.property.title} - {application.unit.label}"

        if status == "APPROVED":
            application.is_approved = True
            application.screening_summary = (
                f"APPROVED: {notes or 'Application approved - awaiting lease assignment'}"
            )
            self.db.commit()
            self.db.refresh(application)
            logger.info(f"[application] Application {application.id} approved")

            self.notifier.notify(
                tenant_id,
                NotificationType.APPLICATION,
                f"Congratulations! Your application for {unit_title} has been approved! "
                f"The landlord will assign you a lease soon.",
            )
            self.notifier.notify(
                landlord.id,
                NotificationType.APPLICATION,
                f"Application approved for {unit_title}. Please assign a lease to the tenant.",
            )
            return application

        self.db.delete(application)
        self.db.commit()
        logger.info(f"[application] Application {application_id} rejected and removed")

        reason = f" Reason: {notes}" if notes else ""
        self.notifier.notify(
            tenant_id,
            NotificationType.APPLICATION,
            f"Your application for {unit_title} has been rejected.{reason}",
        )
        return None

    def list_applications(self, landlord: User) -> List[TenantScreening]:
        return (
            self.db.query(TenantScreening)
            .join(Unit, TenantScreening.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .filter(Property.owner_id == landlord.id)
            .options(joinedload(TenantScreening.tenant))
            .order_by(TenantScreening.created_at.desc())
            .all()
        )

    def tenant_applications(self, tenant: User) -> List[TenantScreening]:
        return (
            self.db.query(TenantScreening)
            .filter(TenantScreening.tenant_id == tenant.id)
            .order_by(TenantScreening.created_at.desc())
            .all()
        )
