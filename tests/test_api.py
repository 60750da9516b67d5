from models import db
from models.user import User

from conftest import csrf, login


def test_health(app):
    resp = app.test_client().get("/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_register_login_me_logout(app):
    client = app.test_client()
    resp = client.post("/auth/register", json={
        "email": "New.Student@Campus.edu",
        "password": "long-enough-1",
        "full_name": "New Student",
    })
    assert resp.status_code == 201

    login(client, "new.student@campus.edu", "long-enough-1")
    me = client.get("/auth/me").get_json()
    assert me["email"] == "new.student@campus.edu"
    assert me["role"] == "user"
    assert me["full_name"] == "New Student"

    assert client.post("/auth/logout", headers=csrf(client)).status_code == 200
    assert client.get("/auth/me").status_code == 401


def test_register_rejects_bad_input_and_duplicates(app, people):
    client = app.test_client()
    assert client.post("/auth/register", json={"email": "nope", "password": "long-enough-1"}).status_code == 400
    resp = client.post("/auth/register", json={"email": "x@campus.edu", "password": "short"})
    assert resp.status_code == 400
    assert resp.get_json()["details"]
    dup = client.post("/auth/register", json={"email": "student@campus.edu", "password": "long-enough-1"})
    assert dup.status_code == 409


def test_bad_credentials(app, people):
    resp = app.test_client().post("/auth/login", json={"email": "student@campus.edu", "password": "wrong-password"})
    assert resp.status_code == 401


def test_unauthenticated_requests_are_rejected(app, slot_id):
    client = app.test_client()
    assert client.get("/slots").status_code == 401
    assert client.get("/dashboard").status_code == 401
    assert client.post("/bookings", json={"slot_id": slot_id}).status_code == 401


def test_state_changes_require_csrf_token(user_client, slot_id):
    resp = user_client.post("/bookings", json={"slot_id": slot_id})
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "CSRF validation failed"


def test_booking_flow_over_http(app, user_client, staff_client, admin_client, slot_id):
    resp = user_client.post("/bookings", json={"slot_id": slot_id}, headers=csrf(user_client))
    assert resp.status_code == 201, resp.get_json()
    booking = resp.get_json()["booking"]
    assert booking["status"] == "booked"
    assert booking["slot"]["slot_number"] == "A1"
    booking_id = booking["id"]

    slots = user_client.get("/slots").get_json()
    assert slots[0]["status"] == "booked"
    assert user_client.get("/bookings/active").get_json()["booking"]["id"] == booking_id

    resp = staff_client.post(f"/bookings/{booking_id}/check-in", headers=csrf(staff_client))
    assert resp.status_code == 200
    assert resp.get_json()["booking"]["status"] == "checked_in"
    assert user_client.get("/slots").get_json()[0]["status"] == "occupied"

    resp = staff_client.post(f"/bookings/{booking_id}/check-out", headers=csrf(staff_client))
    assert resp.status_code == 200
    done = resp.get_json()["booking"]
    assert done["status"] == "completed"
    # checked out within the same hour: minimum one hour at $2.00
    assert done["total_amount"] == "2.00"
    assert user_client.get("/slots").get_json()[0]["status"] == "available"
    assert user_client.get("/bookings/active").get_json()["booking"] is None

    dash = admin_client.get("/dashboard").get_json()
    assert dash["role"] == "admin"
    assert dash["revenue"] == "2.00"
    assert "revenue" not in user_client.get("/dashboard").get_json()


def test_second_booking_conflicts(app, user_client, admin_client, slot_id):
    admin_client.post("/settings/slots", json={"slot_number": "A2", "zone": "A", "price_per_hour": "2.00"},
                      headers=csrf(admin_client))

    first = user_client.post("/bookings", json={"slot_id": slot_id}, headers=csrf(user_client))
    assert first.status_code == 201
    second = user_client.post("/bookings", json={"slot_id": slot_id + 1}, headers=csrf(user_client))
    assert second.status_code == 409
    assert "active booking" in second.get_json()["error"]


def test_taken_slot_conflicts(user_client, other_client, slot_id):
    assert user_client.post("/bookings", json={"slot_id": slot_id}, headers=csrf(user_client)).status_code == 201
    resp = other_client.post("/bookings", json={"slot_id": slot_id}, headers=csrf(other_client))
    assert resp.status_code == 409


def test_booking_requires_integer_slot_id(user_client):
    resp = user_client.post("/bookings", json={"slot_id": "A1"}, headers=csrf(user_client))
    assert resp.status_code == 400


def test_role_gates(user_client, staff_client, admin_client, slot_id):
    booking_id = user_client.post(
        "/bookings", json={"slot_id": slot_id}, headers=csrf(user_client)
    ).get_json()["booking"]["id"]

    assert staff_client.post("/bookings", json={"slot_id": slot_id}, headers=csrf(staff_client)).status_code == 403
    assert user_client.post(f"/bookings/{booking_id}/check-in", headers=csrf(user_client)).status_code == 403
    assert staff_client.post(f"/bookings/{booking_id}/cancel", headers=csrf(staff_client)).status_code == 403
    assert staff_client.get("/settings/slots").status_code == 403
    assert staff_client.get("/users").status_code == 403
    assert user_client.get("/audit-logs").status_code == 403
    assert admin_client.get("/audit-logs").status_code == 200


def test_cancel_over_http(user_client, other_client, staff_client, slot_id):
    booking_id = user_client.post(
        "/bookings", json={"slot_id": slot_id}, headers=csrf(user_client)
    ).get_json()["booking"]["id"]

    assert other_client.post(f"/bookings/{booking_id}/cancel", headers=csrf(other_client)).status_code == 404

    staff_client.post(f"/bookings/{booking_id}/check-in", headers=csrf(staff_client))
    resp = user_client.post(f"/bookings/{booking_id}/cancel", headers=csrf(user_client))
    assert resp.status_code == 409
    assert user_client.get("/bookings").get_json()[0]["status"] == "checked_in"


def test_bookings_list_scoped(user_client, other_client, staff_client, admin_client, slot_id):
    admin_client.post("/settings/slots", json={"slot_number": "A2", "zone": "A", "price_per_hour": "2.00"},
                      headers=csrf(admin_client))
    user_client.post("/bookings", json={"slot_id": slot_id}, headers=csrf(user_client))
    other_client.post("/bookings", json={"slot_id": slot_id + 1}, headers=csrf(other_client))

    assert len(user_client.get("/bookings").get_json()) == 1
    assert len(staff_client.get("/bookings").get_json()) == 2
    assert staff_client.get("/bookings?status=completed").get_json() == []
    assert staff_client.get("/bookings?status=bogus").status_code == 400


def test_settings_slots(admin_client, slot_id):
    resp = admin_client.post(
        "/settings/slots",
        json={"slot_number": "D1", "zone": "d", "price_per_hour": 1.5},
        headers=csrf(admin_client),
    )
    assert resp.status_code == 201
    assert resp.get_json()["slot"] == {
        "id": slot_id + 1,
        "slot_number": "D1",
        "zone": "D",
        "price_per_hour": "1.50",
        "status": "available",
    }

    bad = admin_client.post("/settings/slots", json={"slot_number": "D2", "zone": "D", "price_per_hour": -3},
                            headers=csrf(admin_client))
    assert bad.status_code == 400

    resp = admin_client.patch(f"/settings/slots/{slot_id}/price", json={"price_per_hour": "3.00"},
                              headers=csrf(admin_client))
    assert resp.status_code == 200
    assert resp.get_json()["slot"]["price_per_hour"] == "3.00"

    missing = admin_client.patch("/settings/slots/999/price", json={"price_per_hour": "3.00"},
                                 headers=csrf(admin_client))
    assert missing.status_code == 404

    zones = admin_client.get("/slots/zones").get_json()
    assert [z["zone"] for z in zones] == ["A", "D"]
    assert [s["slot_number"] for s in admin_client.get("/slots?zone=D").get_json()] == ["D1"]


def test_users_page_and_role_change(app, admin_client, people):
    rows = admin_client.get("/users").get_json()
    assert {r["email"] for r in rows} == {
        "student@campus.edu", "other@campus.edu", "guard@campus.edu", "admin@campus.edu",
    }

    resp = admin_client.post(f"/users/{people['user']}/role", json={"role": "parking_staff"},
                             headers=csrf(admin_client))
    assert resp.status_code == 200
    assert resp.get_json()["user"]["role"] == "parking_staff"
    with app.app_context():
        assert db.session.get(User, people["user"]).role == "parking_staff"

    bad = admin_client.post(f"/users/{people['user']}/role", json={"role": "owner"}, headers=csrf(admin_client))
    assert bad.status_code == 400

    last = admin_client.post(f"/users/{people['admin']}/role", json={"role": "user"}, headers=csrf(admin_client))
    assert last.status_code == 409


def test_role_change_applies_to_next_request(app, user_client, admin_client, people, slot_id):
    admin_client.post(f"/users/{people['user']}/role", json={"role": "parking_staff"}, headers=csrf(admin_client))
    resp = user_client.post("/bookings", json={"slot_id": slot_id}, headers=csrf(user_client))
    assert resp.status_code == 403


def test_oversized_price_is_a_client_error(admin_client, slot_id):
    resp = admin_client.post("/settings/slots", json={"slot_number": "Z1", "zone": "Z", "price_per_hour": "1e30"},
                             headers=csrf(admin_client))
    assert resp.status_code == 400
    assert "price_per_hour" in resp.get_json()["error"]

    resp = admin_client.patch(f"/settings/slots/{slot_id}/price", json={"price_per_hour": "1e30"},
                              headers=csrf(admin_client))
    assert resp.status_code == 400


def test_audit_log_history_of_one_booking(user_client, staff_client, admin_client, people, slot_id):
    booking_id = user_client.post(
        "/bookings", json={"slot_id": slot_id}, headers=csrf(user_client)
    ).get_json()["booking"]["id"]
    staff_client.post(f"/bookings/{booking_id}/check-in", headers=csrf(staff_client))

    rows = admin_client.get(f"/audit-logs?entity=booking&entity_id={booking_id}").get_json()
    assert [(r["action"], r["actor_id"], r["actor_role"]) for r in rows] == [
        ("BOOKING_CHECK_IN", people["staff"], "parking_staff"),
        ("BOOKING_CREATE", people["user"], "user"),
    ]
    assert rows[1]["details"] == {"slot_id": slot_id}

    mine = admin_client.get(f"/audit-logs?actor_id={people['user']}&action=booking_create").get_json()
    assert [r["entity_id"] for r in mine] == [booking_id]
