from datetime import timedelta

from app.db.base import utcnow
from app.models.lease import LeaseStatus
from app.models.user import UserRole


def test_root_and_health(client):
    assert client.get("/").json()["success"] is True
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "connected"


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/landlord/leases")
    assert response.status_code == 401


def test_wrong_role_is_forbidden(client, tenant, headers):
    response = client.get("/api/landlord/leases", headers=headers(tenant))
    assert response.status_code == 403


def test_disabled_user_is_forbidden(client, make_user, headers):
    user = make_user(UserRole.LANDLORD, is_disabled=True)
    response = client.get("/api/landlord/leases", headers=headers(user))
    assert response.status_code == 403


def test_domain_errors_use_failure_envelope(client, landlord, tenant, headers, make_unit, make_lease):
    unit = make_unit(landlord)
    lease = make_lease(unit, tenant, status=LeaseStatus.ACTIVE)

    response = client.patch(f"/api/landlord/leases/{lease.id}/activate", headers=headers(landlord))

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Lease is already active"}


def test_body_validation_keeps_422(client, landlord, headers):
    response = client.post("/api/landlord/leases", json={"lease_nickname": "x"}, headers=headers(landlord))
    assert response.status_code == 422
    assert response.json()["success"] is False


def test_listing_request_conflict_over_http(client, landlord, headers, make_unit):
    unit = make_unit(landlord)
    url = f"/api/landlord/properties/{unit.property_id}/units/{unit.id}/request-listing"

    assert client.post(url, headers=headers(landlord)).status_code == 201
    second = client.post(url, headers=headers(landlord))

    assert second.status_code == 409
    assert "listing in progress" in second.json()["message"]


def test_full_rent_lifecycle(client, landlord, tenant, admin, headers, make_unit):
    unit = make_unit(landlord)
    landlord_h, tenant_h, admin_h = headers(landlord), headers(tenant), headers(admin)

    # Landlord requests a listing, admin approves it
    listing = client.post(
        f"/api/landlord/properties/{unit.property_id}/units/{unit.id}/request-listing",
        headers=landlord_h,
    ).json()["listing"]
    queue = client.get("/api/admin/property-requests?status=PENDING", headers=admin_h).json()
    assert [r["id"] for r in queue["requests"]] == [listing["id"]]

    decided = client.patch(
        f"/api/admin/property-requests/{listing['id']}",
        json={"status": "APPROVED", "admin_notes": "ok"},
        headers=admin_h,
    )
    assert decided.status_code == 200
    assert decided.json()["listing"]["status"] == "ACTIVE"

    # Tenant finds the unit and applies
    browse = client.get("/api/tenant/browse", headers=tenant_h).json()
    assert [u["id"] for u in browse["units"]] == [str(unit.id)]
    application = client.post(
        f"/api/tenant/units/{unit.id}/apply",
        json={"employment_status": "EMPLOYED", "monthly_income": 60000},
        headers=tenant_h,
    ).json()["application"]

    # Landlord approves, drafts a lease, assigns and activates it
    assert client.patch(
        f"/api/landlord/applications/{application['id']}",
        json={"status": "APPROVED"},
        headers=landlord_h,
    ).status_code == 200

    today = utcnow().date()
    draft = client.post(
        "/api/landlord/leases",
        json={
            "unit_id": str(unit.id),
            "lease_nickname": "A1 - 12 months",
            "start_date": today.isoformat(),
            "end_date": (today + timedelta(days=365)).isoformat(),
            "rent_amount": 15000,
        },
        headers=landlord_h,
    )
    assert draft.status_code == 201
    lease_id = draft.json()["lease"]["id"]

    assigned = client.post(
        f"/api/landlord/applications/{application['id']}/assign-lease",
        json={"lease_id": lease_id},
        headers=landlord_h,
    )
    assert assigned.json()["lease"]["tenant_id"] == str(tenant.id)

    activated = client.patch(f"/api/landlord/leases/{lease_id}/activate", headers=landlord_h)
    assert activated.json()["lease"]["status"] == "ACTIVE"

    # Unit is occupied now, so it drops out of browse
    assert client.get("/api/tenant/browse", headers=tenant_h).json()["units"] == []

    # Tenant pays through the sandbox checkout
    assert client.get("/api/tenant/lease", headers=tenant_h).json()["lease"]["id"] == lease_id
    paid = client.post(
        "/api/tenant/payments",
        json={"amount": 15000, "method": "CARD"},
        headers=tenant_h,
    )
    assert paid.status_code == 201
    assert paid.json()["payment"]["status"] == "PAID"

    stats = client.get("/api/landlord/leases/stats", headers=landlord_h).json()["stats"]
    assert stats["overview"]["active_leases"] == 1
    assert stats["revenue"]["total_revenue"] == 15000.0

    history = client.get(f"/api/landlord/payments/lease/{lease_id}", headers=landlord_h).json()
    assert history["total_paid"] == 15000.0

    # A lease with payments can only be terminated
    deleted = client.delete(f"/api/landlord/leases/{lease_id}", headers=landlord_h)
    assert deleted.status_code == 409
    terminated = client.put(
        f"/api/landlord/leases/{lease_id}",
        json={"status": "TERMINATED"},
        headers=landlord_h,
    )
    assert terminated.json()["lease"]["status"] == "TERMINATED"

    notifications = client.get("/api/notifications", headers=tenant_h).json()["notifications"]
    assert any("assigned to you" in n["message"] for n in notifications)


def test_mark_notification_read(client, landlord, admin, headers, make_unit):
    unit = make_unit(landlord)
    client.post(
        f"/api/landlord/properties/{unit.property_id}/units/{unit.id}/request-listing",
        headers=headers(landlord),
    )
    notes = client.get("/api/notifications?unread_only=true", headers=headers(admin)).json()["notifications"]
    assert len(notes) == 1

    read = client.patch(f"/api/notifications/{notes[0]['id']}/read", headers=headers(admin))

    assert read.json()["notification"]["status"] == "READ"
    assert client.get("/api/notifications?unread_only=true", headers=headers(admin)).json()["notifications"] == []


def test_lease_update_with_null_fields_over_http(client, landlord, tenant, headers, make_unit, make_lease):
    lease = make_lease(make_unit(landlord), tenant)

    response = client.put(
        f"/api/landlord/leases/{lease.id}",
        json={"start_date": None, "interval": None, "notes": "keys returned"},
        headers=headers(landlord),
    )

    assert response.status_code == 200
    body = response.json()["lease"]
    assert body["start_date"] == lease.start_date.isoformat()
    assert body["interval"] == "MONTHLY"
    assert body["notes"] == "keys returned"


def test_tenant_lists_own_applications(client, landlord, tenant, make_user, headers, make_unit, make_active_listing):
    unit = make_unit(landlord)
    make_active_listing(unit, landlord)
    client.post(f"/api/tenant/units/{unit.id}/apply", json={}, headers=headers(tenant))

    mine = client.get("/api/tenant/applications", headers=headers(tenant)).json()["applications"]
    other = client.get("/api/tenant/applications", headers=headers(make_user(UserRole.TENANT))).json()

    assert [a["unit_id"] for a in mine] == [str(unit.id)]
    assert other["applications"] == []


def test_listing_status_reports_lapsed_listing_as_expired(client, landlord, headers, make_unit, make_active_listing):
    unit = make_unit(landlord)
    make_active_listing(unit, landlord, expires_in_days=-1)

    response = client.get(
        f"/api/landlord/properties/{unit.property_id}/units/listing-status",
        headers=headers(landlord),
    )

    expired = response.json()["categories"]["EXPIRED"]
    assert [e["unit"]["id"] for e in expired] == [str(unit.id)]
    assert expired[0]["listing"]["status"] == "EXPIRED"
