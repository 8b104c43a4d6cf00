"""
Landlord Application Routes
  GET   /api/landlord/applications
  PATCH /api/landlord/applications/{application_id}
  POST  /api/landlord/applications/{application_id}/assign-lease
"""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_landlord
from app.models.user import User
from app.schemas.application import ApplicationOut, ApplicationReview
from app.schemas.lease import AssignLeaseRequest, LeaseOut
from app.services.application_service import ApplicationService
from app.services.lease_service import LeaseService

router = APIRouter(tags=["Applications"])


@router.get("")
def list_applications(
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    applications = ApplicationService(db).list_applications(current_user)
    return {
        "success": True,
        "total": len(applications),
        "applications": [
            {
                **ApplicationOut.model_validate(a).model_dump(mode="json"),
                "tenant_email": a.tenant.email if a.tenant else None,
            }
            for a in applications
        ],
    }


@router.patch("/{application_id}")
def review_application(
    application_id: UUID,
    review: ApplicationReview,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    application = ApplicationService(db).review_application(
        application_id, current_user, review.status, review.notes
    )
    if application is None:
        return {"success": True, "message": "Application rejected successfully"}
    return {
        "success": True,
        "message": "Application approved successfully. Please assign a lease to the tenant.",
        "application": ApplicationOut.model_validate(application).model_dump(mode="json"),
    }


@router.post("/{application_id}/assign-lease")
def assign_lease(
    application_id: UUID,
    payload: AssignLeaseRequest,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    lease = LeaseService(db).assign_lease_to_tenant(application_id, payload.lease_id, current_user)
    return {
        "success": True,
        "message": "Lease assigned successfully",
        "lease": LeaseOut.model_validate(lease).model_dump(mode="json"),
    }
