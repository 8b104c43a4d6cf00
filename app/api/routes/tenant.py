"""
Tenant Portal Routes
Browse listed units, apply and track applications, view the current lease, pay rent.
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_tenant
from app.models.user import User
from app.schemas.application import ApplicationCreate, ApplicationOut
from app.schemas.lease import LeaseOut
from app.schemas.listing import BrowseUnitOut
from app.schemas.payment import PaymentOut, TenantPaymentCreate
from app.services.application_service import ApplicationService
from app.services.lease_service import LeaseService
from app.services.listing_service import ListingService
from app.services.payment_service import PaymentService

router = APIRouter(tags=["Tenant Portal"])
logger = logging.getLogger(__name__)


@router.get("/browse")
def browse_units(
    current_user: User = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    units = ListingService(db).browse_active_units()
    return {
        "success": True,
        "total": len(units),
        "units": [
            BrowseUnitOut(
                id=u.id,
                property_id=u.property_id,
                label=u.label,
                target_price=u.target_price,
                status=u.status,
                listed_at=u.listed_at,
                property_title=u.property.title,
                address=u.property.address,
            ).model_dump(mode="json")
            for u in units
        ],
    }


@router.post("/units/{unit_id}/apply", status_code=status.HTTP_201_CREATED)
def apply_for_unit(
    unit_id: UUID,
    payload: ApplicationCreate,
    current_user: User = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    application = ApplicationService(db).submit_application(current_user, unit_id, payload)
    return {
        "success": True,
        "message": "Application submitted successfully",
        "application": ApplicationOut.model_validate(application).model_dump(mode="json"),
    }


@router.get("/applications")
def get_my_applications(
    current_user: User = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    applications = ApplicationService(db).tenant_applications(current_user)
    return {
        "success": True,
        "applications": [
            ApplicationOut.model_validate(a).model_dump(mode="json") for a in applications
        ],
    }


@router.get("/lease")
def get_my_lease(
    current_user: User = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    lease = LeaseService(db).tenant_current_lease(current_user)
    if not lease:
        return {"success": True, "lease": None, "message": "No active lease found"}
    return {"success": True, "lease": LeaseOut.model_validate(lease).model_dump(mode="json")}


@router.get("/payments")
def get_my_payments(
    current_user: User = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    payments = PaymentService(db).tenant_payments(current_user)
    return {
        "success": True,
        "payments": [PaymentOut.model_validate(p).model_dump(mode="json") for p in payments],
    }


@router.post("/payments", status_code=status.HTTP_201_CREATED)
def submit_payment(
    payload: TenantPaymentCreate,
    current_user: User = Depends(require_tenant),
    db: Session = Depends(get_db),
):
    payment = PaymentService(db).submit_tenant_payment(
        current_user, payload.amount, payload.method, payload.note
    )
    return {
        "success": True,
        "message": "Payment processed successfully",
        "payment": PaymentOut.model_validate(payment).model_dump(mode="json"),
    }
