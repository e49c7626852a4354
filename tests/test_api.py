# tests/test_api.py
from conftest import applicant_payload, auth_headers
from enums.user_role import UserRole


def _submit(client, user, unit, **overrides):
    return client.post(
        "/rental-requests",
        json=applicant_payload(unit.id, **overrides),
        headers=auth_headers(user),
    )


def test_signup_signin_and_me(client):
    r = client.post(
        "/auth/signup",
        json={"name": "Nok", "email": "nok@example.com", "password": "secret123"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["status"] == "success"
    assert body["data"]["user"]["role"] == "USER"

    r = client.post("/auth/signup", json={"name": "Nok", "email": "nok@example.com", "password": "secret123"})
    assert r.status_code == 409

    r = client.post("/auth/signin", json={"email": "nok@example.com", "password": "wrong-password"})
    assert r.status_code == 401

    r = client.post("/auth/signin", json={"email": "nok@example.com", "password": "secret123"})
    assert r.status_code == 200
    token = r.json()["data"]["access_token"]

    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    assert r.json()["data"]["email"] == "nok@example.com"


def test_units_admin_only_create(client, make_user, admin):
    unit = {"room_number": "301", "floor": 3, "unit_type": "studio", "rent_amount": "5200.00"}

    r = client.post("/units", json=unit, headers=auth_headers(make_user()))
    assert r.status_code == 403

    r = client.post("/units", json=unit, headers=auth_headers(admin))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["status"] == "AVAILABLE"
    assert data["unit_code"] == f"UNIT-{data['id']:04d}"

    r = client.post("/units", json=unit, headers=auth_headers(admin))
    assert r.status_code == 409

    r = client.get("/units/available", headers=auth_headers(admin))
    assert [u["room_number"] for u in r.json()["data"]] == ["301"]


def test_full_approval_flow(client, make_user, make_unit, admin):
    user = make_user()
    unit = make_unit()

    r = client.get("/rental-requests/me/latest", headers=auth_headers(user))
    assert r.json()["data"]["can_create_new_request"] is True

    r = _submit(client, user, unit)
    assert r.status_code == 201
    request_id = r.json()["data"]["id"]
    assert r.json()["data"]["status"] == "PENDING"
    assert r.json()["data"]["reference"] == f"RR-{request_id:06d}"

    r = client.get("/rental-requests/me/latest", headers=auth_headers(user))
    latest = r.json()["data"]
    assert latest["is_pending"] is True
    assert latest["can_create_new_request"] is False

    r = _submit(client, user, unit)
    assert r.status_code == 409
    assert r.json()["error"] == "PENDING_EXISTS"

    r = client.get("/rental-requests/pending", headers=auth_headers(admin))
    assert [p["id"] for p in r.json()["data"]] == [request_id]

    r = client.post(
        f"/rental-requests/{request_id}/approve",
        json={"start_date": "2025-01-01", "end_date": "2025-12-31"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["lease"]["unit_id"] == unit.id
    assert data["lease"]["status"] == "ACTIVE"
    assert data["request"]["status"] == "APPROVED"
    assert data["request"]["resulting_lease_id"] == data["lease_id"]

    r = client.post(
        f"/rental-requests/{request_id}/approve",
        json={"start_date": "2025-01-01"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 409
    assert r.json()["error"] == "ALREADY_DECIDED"

    r = client.get("/auth/me", headers=auth_headers(user))
    assert r.json()["data"]["role"] == UserRole.VILLAGER.value

    r = _submit(client, user, make_unit())
    assert r.json()["error"] == "ALREADY_VILLAGER"

    r = client.get("/leases/me", headers=auth_headers(user))
    assert len(r.json()["data"]) == 1


def test_rejection_flow(client, make_user, make_unit, admin):
    user = make_user()
    unit = make_unit()
    request_id = _submit(client, user, unit).json()["data"]["id"]

    r = client.post(
        f"/rental-requests/{request_id}/reject",
        json={"reason": "   "},
        headers=auth_headers(admin),
    )
    assert r.status_code == 409
    assert r.json()["error"] == "EMPTY_REJECTION_REASON"

    r = client.post(
        f"/rental-requests/{request_id}/reject",
        json={"reason": "incomplete documents"},
        headers=auth_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["data"]["state"] == "REJECTED_UNACKNOWLEDGED"

    r = _submit(client, user, unit)
    assert r.json()["error"] == "UNACKNOWLEDGED_REJECTION"

    r = client.post(f"/rental-requests/{request_id}/acknowledge", headers=auth_headers(make_user()))
    assert r.status_code == 403
    assert r.json()["error"] == "NOT_REQUEST_OWNER"

    for _ in range(2):
        r = client.post(f"/rental-requests/{request_id}/acknowledge", headers=auth_headers(user))
        assert r.status_code == 200
        assert r.json()["data"]["can_create_new_request"] is True

    r = _submit(client, user, unit)
    assert r.status_code == 201
    assert r.json()["data"]["id"] != request_id


def test_request_visibility(client, make_user, make_unit, admin):
    owner = make_user()
    request_id = _submit(client, owner, make_unit()).json()["data"]["id"]

    assert client.get(f"/rental-requests/{request_id}", headers=auth_headers(owner)).status_code == 200
    assert client.get(f"/rental-requests/{request_id}", headers=auth_headers(admin)).status_code == 200
    assert client.get(f"/rental-requests/{request_id}", headers=auth_headers(make_user())).status_code == 403
    assert client.get("/rental-requests", headers=auth_headers(owner)).status_code == 403

    r = client.get("/rental-requests/999999", headers=auth_headers(admin))
    assert r.status_code == 404
    assert r.json()["error"] == "REQUEST_NOT_FOUND"


def test_submit_unknown_unit_is_404(client, make_user):
    r = client.post(
        "/rental-requests",
        json=applicant_payload(999999),
        headers=auth_headers(make_user()),
    )
    assert r.status_code == 404
    assert r.json()["error"] == "UNIT_NOT_FOUND"


def test_admin_submit_is_409(client, make_unit, admin):
    r = _submit(client, admin, make_unit())
    assert r.status_code == 409
    assert r.json()["error"] == "NOT_APPLICANT"

    r = client.get("/rental-requests/me/latest", headers=auth_headers(admin))
    assert r.json()["data"]["can_create_new_request"] is False


def test_submit_validation(client, make_user, make_unit):
    r = _submit(client, make_user(), make_unit(), lease_duration_months=0)
    assert r.status_code == 422


def test_terminate_lease_unlocks_booking(client, make_user, make_unit, admin):
    user = make_user()
    request_id = _submit(client, user, make_unit()).json()["data"]["id"]
    lease_id = client.post(
        f"/rental-requests/{request_id}/approve",
        json={"start_date": "2025-01-01", "end_date": "2025-12-31"},
        headers=auth_headers(admin),
    ).json()["data"]["lease_id"]

    r = client.post(f"/leases/{lease_id}/terminate", json={"checkout_date": "2025-03-31"}, headers=auth_headers(user))
    assert r.status_code == 403

    r = client.post(f"/leases/{lease_id}/terminate", json={"checkout_date": "2025-03-31"}, headers=auth_headers(admin))
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "TERMINATED"
    assert r.json()["data"]["end_date"] == "2025-03-31"

    r = client.post(f"/leases/{lease_id}/terminate", headers=auth_headers(admin))
    assert r.status_code == 409
    assert r.json()["error"] == "LEASE_NOT_ACTIVE"

    latest = client.get("/rental-requests/me/latest", headers=auth_headers(user)).json()["data"]
    assert latest["is_approved"] is True
    assert latest["can_create_new_request"] is True


def test_requires_authentication(client):
    assert client.get("/rental-requests/me/latest").status_code == 401
