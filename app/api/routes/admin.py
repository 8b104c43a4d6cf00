"""
Admin Portal Routes - Listing moderation
  GET    /api/admin/property-requests
  PATCH  /api/admin/property-requests/{listing_id}
  DELETE /api/admin/property-requests/{listing_id}
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_admin
from app.models.user import User
from app.schemas.listing import ListingDecisionRequest, ListingOut
from app.services.listing_service import ListingService, effective_status

router = APIRouter(tags=["admin"])


# ==================== PROPERTY REQUESTS ====================

@router.get("/property-requests")
def get_property_requests(
    status: Optional[str] = None,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Moderation queue, newest first; ?status= filters by effective status."""
    listings = ListingService(db).list_requests(status)

    request_list = []
    for listing in listings:
        item = ListingOut.model_validate(listing).model_dump(mode="json")
        item["status"] = effective_status(listing).value
        item["property_title"] = listing.unit.property.title if listing.unit.property else None
        item["unit_label"] = listing.unit.label
        item["landlord_name"] = listing.landlord.full_name if listing.landlord else None
        request_list.append(item)

    return {
        "success": True,
        "total": len(request_list),
        "requests": request_list,
    }


@router.patch("/property-requests/{listing_id}")
def update_property_request(
    listing_id: UUID,
    decision: ListingDecisionRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    listing = ListingService(db).decide_listing(
        listing_id, decision.status, decision.admin_notes, current_user
    )
    return {
        "success": True,
        "message": f"Listing {decision.status.lower()} successfully",
        "listing": ListingOut.model_validate(listing).model_dump(mode="json"),
    }


@router.delete("/property-requests/{listing_id}")
def delete_property_request(
    listing_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    deleted = ListingService(db).delete_listing(listing_id)
    return {
        "success": True,
        "message": "Listing deleted successfully",
        "deleted": deleted,
    }
