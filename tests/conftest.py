import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TESTING"] = "true"

import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.core.security import create_access_token
from app.database import get_db
from app.db.base import Base, utcnow
from app.main import app
from app.models.lease import Lease, LeaseInterval, LeaseStatus
from app.models.listing import Listing, ListingStatus
from app.models.property import Property, Unit, UnitStatus
from app.models.user import User, UserRole

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ==================== Factories ====================

@pytest.fixture
def make_user(db):
    def _make(role=UserRole.LANDLORD, email=None, first_name="Test", last_name=None, is_disabled=False):
        user = User(
            id=uuid.uuid4(),
            role=role,
            email=email or f"{role.value.lower()}-{uuid.uuid4().hex[:8]}@example.com",
            first_name=first_name,
            last_name=last_name or role.value.title(),
            is_disabled=is_disabled,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def landlord(make_user):
    return make_user(UserRole.LANDLORD, first_name="Lara")


@pytest.fixture
def tenant(make_user):
    return make_user(UserRole.TENANT, first_name="Tom")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN, first_name="Ada")


@pytest.fixture
def make_unit(db):
    def _make(owner, label="A1", status=UnitStatus.AVAILABLE, prop=None):
        if prop is None:
            prop = Property(id=uuid.uuid4(), owner_id=owner.id, title="Maple Court", address="1 Maple St")
            db.add(prop)
        unit = Unit(id=uuid.uuid4(), property_id=prop.id, label=label, target_price=15000.0, status=status)
        db.add(unit)
        db.commit()
        db.refresh(unit)
        return unit
    return _make


@pytest.fixture
def make_lease(db):
    """Insert a lease row directly, bypassing the service's date checks."""
    def _make(unit, tenant=None, status=LeaseStatus.DRAFT, start_offset=0, end_offset=365,
              rent=15000.0, interval=LeaseInterval.MONTHLY):
        today = utcnow().date()
        lease = Lease(
            id=uuid.uuid4(),
            unit_id=unit.id,
            tenant_id=tenant.id if tenant else None,
            lease_nickname=f"Lease {unit.label}",
            status=status,
            start_date=today + timedelta(days=start_offset),
            end_date=today + timedelta(days=end_offset) if end_offset is not None else None,
            rent_amount=rent,
            interval=interval,
        )
        db.add(lease)
        if status == LeaseStatus.ACTIVE:
            unit.status = UnitStatus.OCCUPIED
        db.commit()
        db.refresh(lease)
        return lease
    return _make


@pytest.fixture
def make_active_listing(db):
    def _make(unit, landlord, expires_in_days=30):
        now = utcnow()
        listing = Listing(
            id=uuid.uuid4(),
            unit_id=unit.id,
            landlord_id=landlord.id,
            status=ListingStatus.ACTIVE,
            attempt_count=1,
            admin_notes=[],
            amount=1000.0,
            expires_at=now + timedelta(days=expires_in_days),
        )
        unit.listed_at = now
        db.add(listing)
        db.commit()
        db.refresh(listing)
        return listing
    return _make


def auth_headers(user) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers():
    return auth_headers
