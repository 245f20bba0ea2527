"""
API tests: authentication, session context and the HTTP error mapping.
"""
from datetime import datetime

from sqlalchemy.exc import OperationalError

from app.core.database import get_db
from app.core.errors import StoreUnavailable
from app.models.user_db.user_db import UserRole
from main import app


class UnreachableSession:
    """Session stand-in whose every query times out."""

    def query(self, *args, **kwargs):
        raise OperationalError("SELECT users", {}, Exception("connection timed out"))

    def rollback(self):
        pass

    def close(self):
        pass


class TestAuth:

    def test_register_login_and_me(self, client):
        payload = {
            "email": "ana@example.com",
            "username": "ana",
            "name": "Ana",
            "password": "a-long-password",
        }
        registered = client.post("/users/register", json=payload)
        assert registered.status_code == 200
        assert registered.json()["is_verified"] is False
        assert registered.json()["role"] == "recycler"

        login = client.post("/auth/login", json={"email": "ana@example.com", "password": "a-long-password"})
        assert login.status_code == 200
        token = login.json()["token"]

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json() == {
            "user_id": registered.json()["id"],
            "email": "ana@example.com",
            "role": "recycler",
            "is_verified": False,
        }

    def test_duplicate_email(self, client, make_user):
        user = make_user()
        response = client.post("/users/register", json={
            "email": user.email, "username": "someone-else", "name": "X", "password": "a-long-password",
        })
        assert response.status_code == 400

    def test_wrong_password(self, client, make_user):
        user = make_user()
        response = client.post("/auth/login", json={"email": user.email, "password": "nope"})
        assert response.status_code == 401

    def test_requests_need_a_bearer_token(self, client):
        assert client.get("/events").status_code == 401
        bad = client.get("/events", headers={"Authorization": "Bearer not-a-token"})
        assert bad.status_code == 401

    def test_change_password(self, client, make_user, auth_headers, password):
        user = make_user()
        response = client.put(
            f"/users/{user.id}/password",
            json={"current_password": password, "new_password": "brand-new-password"},
            headers=auth_headers(user),
        )
        assert response.status_code == 200

        login = client.post("/auth/login", json={"email": user.email, "password": "brand-new-password"})
        assert login.status_code == 200

    def test_change_password_needs_current_password(self, client, make_user, auth_headers):
        user = make_user()
        response = client.put(
            f"/users/{user.id}/password",
            json={"current_password": "wrong-password", "new_password": "brand-new-password"},
            headers=auth_headers(user),
        )
        assert response.status_code == 400


class TestUsers:

    def test_admin_approves_verification(self, client, make_user, auth_headers):
        admin = make_user(role=UserRole.admin)
        recycler = make_user(verified=False)

        status = client.get(f"/users/{recycler.id}/verification", headers=auth_headers(recycler))
        assert status.json() == {"user_id": recycler.id, "verified": False}

        denied = client.put(f"/users/{recycler.id}/approve-verification", headers=auth_headers(recycler))
        assert denied.status_code == 403

        approved = client.put(f"/users/{recycler.id}/approve-verification", headers=auth_headers(admin))
        assert approved.status_code == 200
        assert approved.json() == {"user_id": recycler.id, "verified": True}

    def test_profile_is_private(self, client, make_user, auth_headers):
        recycler, other = make_user(), make_user()
        assert client.get(f"/users/{recycler.id}", headers=auth_headers(recycler)).status_code == 200
        assert client.get(f"/users/{recycler.id}", headers=auth_headers(other)).status_code == 403

    def test_update_profile(self, client, make_user, auth_headers):
        recycler = make_user()
        response = client.put(
            f"/users/{recycler.id}",
            json={"bio": "Glass collector", "avatar": "https://cdn.example.com/a.png"},
            headers=auth_headers(recycler),
        )
        assert response.status_code == 200
        assert response.json()["bio"] == "Glass collector"
        assert response.json()["avatar"] == "https://cdn.example.com/a.png"

    def test_update_profile_can_clear_optional_fields(self, client, make_user, auth_headers):
        recycler = make_user()
        headers = auth_headers(recycler)
        client.put(f"/users/{recycler.id}", json={"bio": "Glass collector", "avatar": "https://cdn.example.com/a.png"}, headers=headers)

        response = client.put(f"/users/{recycler.id}", json={"bio": None, "name": None}, headers=headers)

        assert response.status_code == 200
        assert response.json()["bio"] is None
        assert response.json()["avatar"] == "https://cdn.example.com/a.png"
        assert response.json()["name"] == recycler.name

    def test_admin_lists_users_by_page(self, client, make_user, auth_headers):
        admin = make_user(role=UserRole.admin)
        make_user()
        make_user()

        page = client.get("/users/", params={"page": 1, "size": 2}, headers=auth_headers(admin)).json()

        assert page["total"] == 3
        assert len(page["items"]) == 2
        assert page["has_next"] is True
        assert page["has_prev"] is False


class TestEvents:

    def test_join_flow(self, client, make_user, make_event, auth_headers):
        recycler = make_user()
        first = make_event(start_time=datetime(2024, 2, 1, 9, 0))
        second = make_event(start_time=datetime(2024, 3, 1, 9, 0))
        headers = auth_headers(recycler)

        eligible = client.get("/events", headers=headers)
        assert [e["id"] for e in eligible.json()] == [first.id, second.id]

        joined = client.post(f"/events/{first.id}/join", headers=headers)
        assert joined.status_code == 201
        assert joined.json()["status"] == "joined"

        again = client.post(f"/events/{first.id}/join", headers=headers)
        assert again.status_code == 409
        assert again.json()["code"] == "already_joined"

        assert [e["id"] for e in client.get("/events", headers=headers).json()] == [second.id]
        assert [e["id"] for e in client.get("/events/joined", headers=headers).json()] == [first.id]

        history = client.get(f"/events/{first.id}/participation", headers=headers).json()
        assert history["status"] == "joined"
        assert [t["to_status"] for t in history["transitions"]] == ["joined"]

    def test_unverified_join(self, client, make_user, make_event, auth_headers):
        recycler = make_user(verified=False)
        event = make_event()

        response = client.post(f"/events/{event.id}/join", headers=auth_headers(recycler))

        assert response.status_code == 403
        assert response.json()["code"] == "not_verified"

    def test_cancel_then_cancel_again(self, client, make_user, make_event, auth_headers):
        recycler = make_user()
        event = make_event()
        headers = auth_headers(recycler)
        client.post(f"/events/{event.id}/join", headers=headers)

        assert client.post(f"/events/{event.id}/cancel", headers=headers).json()["status"] == "cancelled"
        again = client.post(f"/events/{event.id}/cancel", headers=headers)
        assert again.status_code == 409
        assert again.json()["code"] == "invalid_transition"

    def test_check_in_is_admin_only(self, client, make_user, make_event, auth_headers):
        admin = make_user(role=UserRole.admin)
        recycler = make_user()
        event = make_event()
        client.post(f"/events/{event.id}/join", headers=auth_headers(recycler))

        denied = client.post(f"/events/{event.id}/check-in/{recycler.id}", headers=auth_headers(recycler))
        assert denied.status_code == 403

        confirmed = client.post(f"/events/{event.id}/check-in/{recycler.id}", headers=auth_headers(admin))
        assert confirmed.status_code == 200
        assert confirmed.json()["status"] == "attended"

    def test_admin_creates_event(self, client, make_user, auth_headers):
        admin = make_user(role=UserRole.admin)
        payload = {"address": "5 Harbour Road", "start_time": "2024-05-01T09:00:00", "weight_capacity": 250}

        assert client.post("/events", json=payload, headers=auth_headers(make_user())).status_code == 403

        created = client.post("/events", json=payload, headers=auth_headers(admin))
        assert created.status_code == 201
        detail = client.get(f"/events/{created.json()['id']}", headers=auth_headers(admin)).json()
        assert detail["weight_capacity"] == 250
        assert detail["committed_weight"] == 0
        assert detail["remaining_capacity"] == 250

    def test_capacity_beyond_storage_is_rejected(self, client, make_user, auth_headers):
        admin = make_user(role=UserRole.admin)
        for capacity in (10_000_000, "12.0005"):
            payload = {"address": "5 Harbour Road", "start_time": "2024-05-01T09:00:00", "weight_capacity": capacity}
            assert client.post("/events", json=payload, headers=auth_headers(admin)).status_code == 422

    def test_unknown_event(self, client, make_user, auth_headers):
        response = client.post("/events/404/join", headers=auth_headers(make_user()))
        assert response.status_code == 404
        assert response.json()["code"] == "event_not_found"

    def test_listing_for_another_recycler_needs_admin(self, client, make_user, make_event, auth_headers):
        admin = make_user(role=UserRole.admin)
        recycler, other = make_user(), make_user()
        make_event()

        assert client.get("/events", params={"recyclerId": other.id}, headers=auth_headers(recycler)).status_code == 403
        assert client.get("/events", params={"recyclerId": other.id}, headers=auth_headers(admin)).status_code == 200


class TestMaterialLogsAndEarnings:

    def test_record_and_read_back(self, client, make_user, make_event, auth_headers):
        recycler = make_user()
        event = make_event(capacity=100)
        headers = auth_headers(recycler)
        client.post(f"/events/{event.id}/join", headers=headers)

        created = client.post("/material-logs", json={"eventId": event.id, "weight": 40}, headers=headers)
        assert created.status_code == 201
        assert created.json()["earnings"] == 4.0
        assert created.json()["weight"] == 40

        over = client.post("/material-logs", json={"eventId": event.id, "weight": 70}, headers=headers)
        assert over.status_code == 409
        assert over.json()["code"] == "capacity_exceeded"

        today = created.json()["created_at"][:10]
        logs = client.get("/material-logs", params={"from": today, "to": today}, headers=headers).json()
        assert [log["id"] for log in logs] == [created.json()["id"]]

        earnings = client.get("/earnings", params={"from": today, "to": today}, headers=headers)
        assert earnings.json() == [{"date": today, "earnings": 4.0}]

    def test_invalid_weight(self, client, make_user, auth_headers):
        response = client.post("/material-logs", json={"weight": 0}, headers=auth_headers(make_user()))
        assert response.status_code == 422
        assert response.json()["code"] == "invalid_weight"

    def test_earnings_series_shape(self, client, make_user, make_log, auth_headers):
        recycler = make_user()
        make_log(recycler, datetime(2024, 1, 2, 9, 0), "5.00")
        make_log(recycler, datetime(2024, 1, 2, 12, 0), "3.00")
        make_log(recycler, datetime(2024, 1, 5, 12, 0), "2.00")

        response = client.get(
            "/earnings",
            params={"recyclerId": recycler.id, "from": "2024-01-01", "to": "2024-01-07"},
            headers=auth_headers(recycler),
        )

        assert response.status_code == 200
        assert response.json() == [
            {"date": "2024-01-02", "earnings": 8.0},
            {"date": "2024-01-05", "earnings": 2.0},
        ]

        summary = client.get(
            "/earnings/summary", params={"from": "2024-01-01", "to": "2024-01-07"}, headers=auth_headers(recycler)
        ).json()
        assert summary["total_earnings"] == 10.0
        assert summary["active_days"] == 2

    def test_oversized_weight(self, client, make_user, auth_headers):
        response = client.post("/material-logs", json={"weight": 1e8}, headers=auth_headers(make_user()))
        assert response.status_code == 422
        assert response.json()["code"] == "invalid_weight"

    def test_reversed_range(self, client, make_user, auth_headers):
        response = client.get(
            "/earnings", params={"from": "2024-01-07", "to": "2024-01-01"}, headers=auth_headers(make_user())
        )
        assert response.status_code == 422
        assert response.json()["code"] == "invalid_range"

    def test_store_unavailable_maps_to_503(self, client, make_user, auth_headers, monkeypatch):
        def unavailable(*args, **kwargs):
            raise StoreUnavailable()

        monkeypatch.setattr("app.routes.earnings.earnings_routers.daily_earnings", unavailable)

        response = client.get(
            "/earnings", params={"from": "2024-01-01", "to": "2024-01-07"}, headers=auth_headers(make_user())
        )
        assert response.status_code == 503
        assert response.json()["code"] == "store_unavailable"

    def test_store_unavailable_during_authentication(self, client, make_user, auth_headers):
        headers = auth_headers(make_user())

        def unreachable_db():
            yield UnreachableSession()

        app.dependency_overrides[get_db] = unreachable_db
        try:
            response = client.get("/earnings", params={"from": "2024-01-01", "to": "2024-01-07"}, headers=headers)
        finally:
            app.dependency_overrides.pop(get_db, None)

        assert response.status_code == 503
        assert response.json()["code"] == "store_unavailable"
