from datetime import timedelta

import pytest

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from app.db.base import utcnow
from app.models.listing import Listing, ListingStatus
from app.models.notification import Notification, NotificationType
from app.models.property import UnitStatus
from app.models.user import UserRole
from app.services.listing_service import ListingService, effective_status, listing_expiry


@pytest.fixture
def service(db):
    return ListingService(db)


# ── request_listing ───────────────────────────────────────────────────────────

def test_first_request_creates_pending_listing_and_notifies_admins(db, service, landlord, admin, make_unit):
    unit = make_unit(landlord)

    listing = service.request_listing(unit.property_id, unit.id, landlord)

    assert listing.status == ListingStatus.PENDING
    assert listing.attempt_count == 1
    assert listing.amount == 1000.0
    assert listing.fraud_risk_score == 0.1
    notes = db.query(Notification).filter(Notification.user_id == admin.id).all()
    assert len(notes) == 1
    assert notes[0].type == NotificationType.LISTING_REQUEST


def test_request_rejects_second_in_flight_listing(service, landlord, make_unit):
    unit = make_unit(landlord)
    service.request_listing(unit.property_id, unit.id, landlord)

    with pytest.raises(ConflictError, match="PENDING listing in progress"):
        service.request_listing(unit.property_id, unit.id, landlord)


def test_request_by_non_owner_is_conflict(service, landlord, make_user, make_unit):
    other = make_user(UserRole.LANDLORD)
    unit = make_unit(landlord)

    with pytest.raises(ConflictError):
        service.request_listing(unit.property_id, unit.id, other)


def test_request_for_occupied_unit_is_rejected(service, landlord, make_unit):
    unit = make_unit(landlord, status=UnitStatus.OCCUPIED)

    with pytest.raises(ValidationFailedError, match="not available for listing"):
        service.request_listing(unit.property_id, unit.id, landlord)


def test_request_for_unknown_unit(service, landlord, make_unit):
    unit = make_unit(landlord)
    with pytest.raises(NotFoundError):
        service.request_listing(unit.property_id, unit.property_id, landlord)


def test_resubmission_after_rejection_increments_attempt(db, service, landlord, admin, make_unit):
    unit = make_unit(landlord)
    first = service.request_listing(unit.property_id, unit.id, landlord)
    service.decide_listing(first.id, "REJECTED", "Blurry photos", admin)

    second = service.request_listing(unit.property_id, unit.id, landlord)

    assert second.status == ListingStatus.PENDING
    assert second.attempt_count == 2


def test_blocked_unit_cannot_be_resubmitted(service, landlord, admin, make_unit):
    unit = make_unit(landlord)
    first = service.request_listing(unit.property_id, unit.id, landlord)
    service.decide_listing(first.id, "BLOCKED", None, admin)

    with pytest.raises(ForbiddenError, match="blocked"):
        service.request_listing(unit.property_id, unit.id, landlord)


def test_lapsed_active_listing_is_reconciled_on_resubmission(db, service, landlord, make_unit, make_active_listing):
    unit = make_unit(landlord)
    stale = make_active_listing(unit, landlord, expires_in_days=-1)

    fresh = service.request_listing(unit.property_id, unit.id, landlord)

    db.refresh(stale)
    db.refresh(unit)
    assert stale.status == ListingStatus.EXPIRED
    assert unit.listed_at is None
    assert fresh.status == ListingStatus.PENDING
    assert fresh.attempt_count == 2


def test_unexpired_active_listing_blocks_new_request(service, landlord, make_unit, make_active_listing):
    unit = make_unit(landlord)
    make_active_listing(unit, landlord, expires_in_days=5)

    with pytest.raises(ConflictError, match="ACTIVE listing in progress"):
        service.request_listing(unit.property_id, unit.id, landlord)


# ── decide_listing ────────────────────────────────────────────────────────────

def test_approval_activates_listing_and_marks_unit_listed(db, service, landlord, admin, make_unit):
    unit = make_unit(landlord)
    listing = service.request_listing(unit.property_id, unit.id, landlord)

    approved = service.decide_listing(listing.id, "APPROVED", "Looks good", admin)

    db.refresh(unit)
    assert approved.status == ListingStatus.ACTIVE
    assert unit.listed_at is not None
    assert approved.expires_at == listing_expiry(unit.listed_at)
    assert approved.admin_notes[-1]["comment"] == "Looks good"
    assert approved.admin_notes[-1]["admin_id"] == str(admin.id)
    landlord_notes = db.query(Notification).filter(Notification.user_id == landlord.id).all()
    assert any("approved and is now active" in n.message for n in landlord_notes)


def test_only_pending_listings_can_be_decided(service, landlord, admin, make_unit):
    unit = make_unit(landlord)
    listing = service.request_listing(unit.property_id, unit.id, landlord)
    service.decide_listing(listing.id, "APPROVED", None, admin)

    with pytest.raises(ConflictError, match="Only pending listings"):
        service.decide_listing(listing.id, "REJECTED", None, admin)


def test_unknown_decision_is_validation_error(service, landlord, admin, make_unit):
    unit = make_unit(landlord)
    listing = service.request_listing(unit.property_id, unit.id, landlord)

    with pytest.raises(ValidationFailedError):
        service.decide_listing(listing.id, "EXPIRED", None, admin)


def test_rejection_message_carries_reason(db, service, landlord, admin, make_unit):
    unit = make_unit(landlord)
    listing = service.request_listing(unit.property_id, unit.id, landlord)
    service.decide_listing(listing.id, "REJECTED", "Missing address", admin)

    note = (
        db.query(Notification)
        .filter(Notification.user_id == landlord.id, Notification.type == NotificationType.LISTING)
        .one()
    )
    assert "Reason: Missing address" in note.message


def test_listing_expiry_clamps_to_month_end():
    approved_at = utcnow().replace(year=2025, month=11, day=30, hour=12)
    assert listing_expiry(approved_at).date().isoformat() == "2026-02-28"


# ── delete / effective status ────────────────────────────────────────────────

def test_deleting_active_listing_clears_listed_at(db, service, landlord, make_unit, make_active_listing):
    unit = make_unit(landlord)
    listing = make_active_listing(unit, landlord)

    deleted = service.delete_listing(listing.id)

    db.refresh(unit)
    assert deleted["status"] == "ACTIVE"
    assert unit.listed_at is None
    assert db.query(Listing).count() == 0


def test_effective_status_reads_expired_after_deadline(landlord, make_unit, make_active_listing):
    unit = make_unit(landlord)
    listing = make_active_listing(unit, landlord, expires_in_days=1)

    assert effective_status(listing) == ListingStatus.ACTIVE
    assert effective_status(listing, utcnow() + timedelta(days=2)) == ListingStatus.EXPIRED


def test_units_listing_status_groups_by_latest_listing(db, service, landlord, make_unit, make_active_listing):
    eligible = make_unit(landlord, label="A1")
    prop = eligible.property
    active = make_unit(landlord, label="A2", prop=prop)
    lapsed = make_unit(landlord, label="A3", prop=prop)
    make_active_listing(active, landlord)
    make_active_listing(lapsed, landlord, expires_in_days=-3)

    categories = service.get_units_listing_status(prop.id, landlord)

    assert [e["unit"].label for e in categories["ELIGIBLE"]] == ["A1"]
    assert [e["unit"].label for e in categories["ACTIVE"]] == ["A2"]
    assert [e["unit"].label for e in categories["EXPIRED"]] == ["A3"]


def test_browse_only_shows_unexpired_active_listings(service, landlord, make_unit, make_active_listing):
    shown = make_unit(landlord, label="A1")
    hidden = make_unit(landlord, label="A2", prop=shown.property)
    make_active_listing(shown, landlord)
    make_active_listing(hidden, landlord, expires_in_days=-1)

    units = service.browse_active_units()

    assert [u.id for u in units] == [shown.id]


def test_in_flight_index_rejects_duplicate_rows(db, landlord, make_unit):
    from sqlalchemy.exc import IntegrityError

    unit = make_unit(landlord)
    db.add_all([
        Listing(unit_id=unit.id, landlord_id=landlord.id, status=ListingStatus.PENDING, admin_notes=[]),
        Listing(unit_id=unit.id, landlord_id=landlord.id, status=ListingStatus.PENDING, admin_notes=[]),
    ])
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
