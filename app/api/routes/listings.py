"""
Landlord Listing Routes
  POST /api/landlord/properties/{property_id}/units/{unit_id}/request-listing
  GET  /api/landlord/properties/{property_id}/units/listing-status
"""
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_landlord
from app.models.user import User
from app.schemas.listing import ListingOut, UnitOut
from app.services.listing_service import ListingService, effective_status

router = APIRouter(tags=["Listings"])
logger = logging.getLogger(__name__)


@router.post(
    "/properties/{property_id}/units/{unit_id}/request-listing",
    status_code=status.HTTP_201_CREATED,
)
def request_listing(
    property_id: UUID,
    unit_id: UUID,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    """Submit a unit for admin review."""
    listing = ListingService(db).request_listing(property_id, unit_id, current_user)
    return {
        "success": True,
        "message": "Listing request submitted successfully",
        "listing": ListingOut.model_validate(listing).model_dump(mode="json"),
    }


@router.get("/properties/{property_id}/units/listing-status")
def get_units_listing_status(
    property_id: UUID,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    categories = ListingService(db).get_units_listing_status(property_id, current_user)
    return {
        "success": True,
        "categories": {
            name: [
                {
                    "unit": UnitOut.model_validate(entry["unit"]).model_dump(mode="json"),
                    "listing": _listing_item(entry["listing"]) if entry["listing"] else None,
                }
                for entry in entries
            ]
            for name, entries in categories.items()
        },
    }


def _listing_item(listing) -> dict:
    item = ListingOut.model_validate(listing).model_dump(mode="json")
    item["status"] = effective_status(listing).value
    return item
