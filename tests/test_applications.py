import pytest

from app.core.exceptions import ConflictError, ForbiddenError, ValidationFailedError
from app.models.application import TenantScreening
from app.models.lease import LeaseStatus
from app.models.notification import Notification
from app.models.user import UserRole
from app.schemas.application import ApplicationCreate
from app.services.application_service import ApplicationService


@pytest.fixture
def service(db):
    return ApplicationService(db)


@pytest.fixture
def listed_unit(landlord, make_unit, make_active_listing):
    unit = make_unit(landlord)
    make_active_listing(unit, landlord)
    return unit


def test_submit_application_notifies_landlord(db, service, landlord, tenant, listed_unit):
    application = service.submit_application(tenant, listed_unit.id, ApplicationCreate(monthly_income=50000))

    assert application.full_name == tenant.full_name
    assert application.is_approved is False
    note = db.query(Notification).filter(Notification.user_id == landlord.id).one()
    assert "New tenant application" in note.message


def test_cannot_apply_to_unlisted_unit(service, landlord, tenant, make_unit):
    unit = make_unit(landlord)
    with pytest.raises(ValidationFailedError):
        service.submit_application(tenant, unit.id, ApplicationCreate())


def test_cannot_apply_to_expired_listing(service, landlord, tenant, make_unit, make_active_listing):
    unit = make_unit(landlord)
    make_active_listing(unit, landlord, expires_in_days=-1)
    with pytest.raises(ValidationFailedError):
        service.submit_application(tenant, unit.id, ApplicationCreate())


def test_duplicate_application_is_conflict(service, tenant, listed_unit):
    service.submit_application(tenant, listed_unit.id, ApplicationCreate())
    with pytest.raises(ConflictError, match="already have an application"):
        service.submit_application(tenant, listed_unit.id, ApplicationCreate())


def test_tenant_with_lease_cannot_apply(service, landlord, tenant, listed_unit, make_unit, make_lease):
    make_lease(make_unit(landlord, label="B1", prop=listed_unit.property), tenant, status=LeaseStatus.DRAFT)
    with pytest.raises(ConflictError, match="active lease"):
        service.submit_application(tenant, listed_unit.id, ApplicationCreate())


def test_approve_application(service, landlord, tenant, listed_unit):
    application = service.submit_application(tenant, listed_unit.id, ApplicationCreate())

    approved = service.review_application(application.id, landlord, "APPROVED", "Great references")

    assert approved.is_approved is True
    assert approved.screening_summary == "APPROVED: Great references"


def test_reject_application_deletes_it(db, service, landlord, tenant, listed_unit):
    application = service.submit_application(tenant, listed_unit.id, ApplicationCreate())

    assert service.review_application(application.id, landlord, "REJECTED", "Income too low") is None
    assert db.query(TenantScreening).count() == 0
    note = db.query(Notification).filter(Notification.user_id == tenant.id).one()
    assert "Reason: Income too low" in note.message


def test_review_by_other_landlord_is_forbidden(service, make_user, tenant, listed_unit):
    application = service.submit_application(tenant, listed_unit.id, ApplicationCreate())
    with pytest.raises(ForbiddenError):
        service.review_application(application.id, make_user(UserRole.LANDLORD), "APPROVED")


def test_review_rejects_unknown_status(service, landlord, tenant, listed_unit):
    application = service.submit_application(tenant, listed_unit.id, ApplicationCreate())
    with pytest.raises(ValidationFailedError):
        service.review_application(application.id, landlord, "MAYBE")
