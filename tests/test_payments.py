import re

import pytest

from app.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from app.models.lease import LeaseStatus
from app.models.notification import Notification, NotificationType
from app.models.payment import PaymentMethod, PaymentStatus, TimingStatus
from app.models.user import UserRole
from app.schemas.payment import StatsPeriod
from app.services.payment_service import PaymentService, sandbox_txn_id


@pytest.fixture
def service(db):
    return PaymentService(db)


@pytest.fixture
def active_lease(landlord, tenant, make_unit, make_lease):
    return make_lease(make_unit(landlord), tenant, status=LeaseStatus.ACTIVE)


def test_record_pending_payment(service, landlord, active_lease):
    payment = service.record_payment(active_lease.id, landlord, 15000.0, PaymentMethod.CASH)

    assert payment.status == PaymentStatus.PENDING
    assert payment.timing_status == TimingStatus.ONTIME
    assert payment.paid_at is None


def test_record_paid_payment_sets_paid_at(db, service, landlord, active_lease):
    payment = service.record_payment(
        active_lease.id, landlord, 15000.0, PaymentMethod.GCASH,
        timing_status=TimingStatus.LATE, status=PaymentStatus.PAID,
    )

    assert payment.paid_at is not None
    note = db.query(Notification).filter(Notification.user_id == landlord.id).one()
    assert note.type == NotificationType.PAYMENT
    assert note.message.startswith("Late payment of 15,000.00")


def test_record_payment_on_foreign_lease_is_not_found(service, make_user, active_lease):
    other = make_user(UserRole.LANDLORD)
    with pytest.raises(NotFoundError):
        service.record_payment(active_lease.id, other, 100.0, PaymentMethod.CASH)


def test_record_payment_rejects_non_positive_amount(service, landlord, active_lease):
    with pytest.raises(ValidationFailedError):
        service.record_payment(active_lease.id, landlord, 0, PaymentMethod.CASH)


def test_pending_to_paid_sets_paid_at_and_keeps_timing(service, landlord, active_lease):
    payment = service.record_payment(
        active_lease.id, landlord, 500.0, PaymentMethod.CASH, timing_status=TimingStatus.ADVANCE
    )

    updated = service.update_payment_status(payment.id, landlord, "PAID")

    assert updated.status == PaymentStatus.PAID
    assert updated.paid_at is not None
    assert updated.timing_status == TimingStatus.ADVANCE


def test_paid_payment_cannot_revert(service, landlord, active_lease):
    payment = service.record_payment(
        active_lease.id, landlord, 500.0, PaymentMethod.CASH, status=PaymentStatus.PAID
    )

    with pytest.raises(ConflictError, match="cannot be reverted"):
        service.update_payment_status(payment.id, landlord, "PENDING")


def test_unknown_payment_status_is_validation_error(service, landlord, active_lease):
    payment = service.record_payment(active_lease.id, landlord, 500.0, PaymentMethod.CASH)

    with pytest.raises(ValidationFailedError):
        service.update_payment_status(payment.id, landlord, "REFUNDED")


def test_tenant_sandbox_payment_is_settled(db, service, landlord, tenant, active_lease):
    payment = service.submit_tenant_payment(tenant, 15000.0, PaymentMethod.CARD, "March rent")

    assert payment.status == PaymentStatus.PAID
    assert payment.timing_status == TimingStatus.ONTIME
    assert payment.is_partial is False
    assert payment.paid_at is not None
    assert re.fullmatch(r"pi_\d+_[0-9a-f]+", payment.provider_txn_id)
    note = db.query(Notification).filter(Notification.user_id == landlord.id).one()
    assert note.type == NotificationType.PAYMENT_RECEIVED


def test_tenant_without_lease_cannot_pay(service, tenant):
    with pytest.raises(NotFoundError, match="No active lease"):
        service.submit_tenant_payment(tenant, 100.0, PaymentMethod.CARD)


def test_tenant_payment_requires_method(service, tenant, active_lease):
    with pytest.raises(ValidationFailedError, match="method"):
        service.submit_tenant_payment(tenant, 100.0, None)


def test_sandbox_txn_ids_are_unique():
    assert sandbox_txn_id() != sandbox_txn_id()


def test_payment_stats(service, landlord, active_lease):
    service.record_payment(active_lease.id, landlord, 1000.0, PaymentMethod.CASH, status=PaymentStatus.PAID)
    service.record_payment(
        active_lease.id, landlord, 1000.0, PaymentMethod.GCASH,
        status=PaymentStatus.PAID, timing_status=TimingStatus.LATE,
    )
    service.record_payment(active_lease.id, landlord, 400.0, PaymentMethod.CASH)

    stats = service.payment_stats(landlord, StatsPeriod.YEAR)

    summary = stats["summary"]
    assert summary["total_payments"] == 3
    assert summary["paid_payments"] == 2
    assert summary["pending_amount"] == 400.0
    assert summary["on_time_rate"] == 50.0
    assert summary["late_rate"] == 50.0
    assert stats["methods"] == {"CASH": 1, "GCASH": 1}
    assert len(stats["trend"]) == 6
    assert stats["trend"][-1]["amount"] == 2000.0
