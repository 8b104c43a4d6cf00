"""
Landlord Lease Routes

  GET    /api/landlord/leases                – list leases (expires overdue ones first)
  GET    /api/landlord/leases/stats          – counts, revenue, reliability
  GET    /api/landlord/leases/{id}           – lease detail
  POST   /api/landlord/leases                – create DRAFT or ACTIVE lease
  PATCH  /api/landlord/leases/{id}/activate  – DRAFT -> ACTIVE
  PUT    /api/landlord/leases/{id}           – partial update / status change
  DELETE /api/landlord/leases/{id}           – delete a lease without payments
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_landlord
from app.models.lease import Lease, LeaseStatus
from app.models.user import User
from app.schemas.lease import LeaseCreate, LeaseOut, LeaseStats, LeaseUpdate
from app.services.lease_service import LeaseService

router = APIRouter(tags=["Leases"])
logger = logging.getLogger(__name__)


def _lease_to_out(lease: Lease) -> dict:
    data = LeaseOut.model_validate(lease).model_dump(mode="json")
    data["unit_label"] = lease.unit.label if lease.unit else None
    data["property_title"] = lease.unit.property.title if lease.unit and lease.unit.property else None
    return data


# ═══════════════════════ READ ═══════════════════════

@router.get("")
def list_leases(
    status: Optional[LeaseStatus] = None,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    leases = LeaseService(db).list_leases(current_user, status)
    return {"success": True, "total": len(leases), "leases": [_lease_to_out(l) for l in leases]}


@router.get("/stats")
def lease_stats(
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    stats = LeaseService(db).lease_stats(current_user)
    return {"success": True, "stats": LeaseStats(**stats).model_dump()}


@router.get("/{lease_id}")
def get_lease(
    lease_id: UUID,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    lease = LeaseService(db).get_lease(lease_id, current_user)
    return {"success": True, "lease": _lease_to_out(lease)}


# ═══════════════════════ WRITE ═══════════════════════

@router.post("", status_code=status.HTTP_201_CREATED)
def create_lease(
    payload: LeaseCreate,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    lease = LeaseService(db).create_lease(current_user, payload)
    return {"success": True, "message": "Lease created successfully", "lease": _lease_to_out(lease)}


@router.patch("/{lease_id}/activate")
def activate_lease(
    lease_id: UUID,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    lease = LeaseService(db).activate_lease(lease_id, current_user)
    return {"success": True, "message": "Lease activated successfully", "lease": _lease_to_out(lease)}


@router.put("/{lease_id}")
def update_lease(
    lease_id: UUID,
    payload: LeaseUpdate,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    lease = LeaseService(db).update_lease(lease_id, current_user, payload)
    return {"success": True, "message": "Lease updated successfully", "lease": _lease_to_out(lease)}


@router.delete("/{lease_id}")
def delete_lease(
    lease_id: UUID,
    current_user: User = Depends(require_landlord),
    db: Session = Depends(get_db),
):
    LeaseService(db).delete_lease(lease_id, current_user)
    return {"success": True, "message": "Lease deleted successfully"}
