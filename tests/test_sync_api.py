"""HTTP tests for /api/sync and the health endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock

from lifesync.services.catalog import DEFAULT_AREAS
from lifesync.services.sync_service import ENTITY_KINDS, PersistenceError, SyncService
from tests.conftest import make_token


class TestAuthentication:
    async def test_missing_token_is_401(self, client):
        response = await client.get("/api/sync")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    async def test_garbage_token_is_401(self, client):
        response = await client.get("/api/sync", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid Token"}

    async def test_wrong_secret_is_401(self, client, user_id):
        token = make_token(user_id, secret="some-other-secret")
        response = await client.get("/api/sync", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_expired_token_is_401(self, client, user_id):
        token = make_token(user_id, expires_in=-60)
        response = await client.post(
            "/api/sync",
            json={"commandType": "ADD_NOTE", "payload": {"id": "n1", "title": "x"}},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401

    async def test_cookie_session_is_accepted(self, client, user_id, fake_settings):
        client.cookies.set(fake_settings.access_token_cookie, make_token(user_id))
        response = await client.get("/api/sync")
        assert response.status_code == 200


class TestFetch:
    async def test_first_fetch_returns_seeded_snapshot(self, client, auth_headers):
        response = await client.get("/api/sync", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert set(body) == set(ENTITY_KINDS)
        assert len(body["areas"]) == len(DEFAULT_AREAS)
        assert all("iconName" in area for area in body["areas"])
        assert body["metricDefinitions"]

    async def test_persistence_error_is_500(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(
            SyncService,
            "fetch_all_and_heal",
            AsyncMock(side_effect=PersistenceError("database is locked")),
        )
        response = await client.get("/api/sync", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}


class TestCommands:
    async def test_command_roundtrip(self, client, auth_headers):
        await client.get("/api/sync", headers=auth_headers)
        response = await client.post(
            "/api/sync",
            json={"commandType": "ADD_NOTE", "payload": {"id": "n1", "title": "Groceries"}},
            headers={**auth_headers, "Idempotency-Key": "ADD_NOTE:n1"},
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

        snapshot = (await client.get("/api/sync", headers=auth_headers)).json()
        assert [n["title"] for n in snapshot["notes"]] == ["Groceries"]

    async def test_command_for_unknown_user_fails(self, client, auth_headers):
        # No user row yet: the insert violates the owner foreign key
        response = await client.post(
            "/api/sync",
            json={"commandType": "ADD_NOTE", "payload": {"id": "n1", "title": "x"}},
            headers=auth_headers,
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Sync failed"}

    async def test_unknown_command_is_accepted(self, client, auth_headers):
        response = await client.post(
            "/api/sync",
            json={"commandType": "ADD_ROUTINE", "payload": {"id": "r1"}},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}

    async def test_payload_without_id_is_400(self, client, auth_headers):
        await client.get("/api/sync", headers=auth_headers)
        response = await client.post(
            "/api/sync",
            json={"commandType": "DELETE_GOAL", "payload": {}},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "error" in response.json()

    async def test_missing_command_type_is_422(self, client, auth_headers):
        response = await client.post("/api/sync", json={"payload": {}}, headers=auth_headers)
        assert response.status_code == 422

    async def test_persistence_error_is_500(self, client, auth_headers, monkeypatch):
        monkeypatch.setattr(
            SyncService,
            "apply_command",
            AsyncMock(side_effect=PersistenceError("disk full")),
        )
        response = await client.post(
            "/api/sync",
            json={"commandType": "ADD_NOTE", "payload": {"id": "n1", "title": "x"}},
            headers=auth_headers,
        )
        assert response.status_code == 500
        assert response.json() == {"error": "Sync failed"}


class TestHealth:
    async def test_liveness(self, client):
        response = await client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_readiness_without_engine_is_503(self, client, monkeypatch):
        import lifesync.database as database

        monkeypatch.setattr(database, "_engine", None)
        response = await client.get("/health/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"

    async def test_response_carries_request_id(self, client):
        response = await client.get("/health/live")
        assert response.headers["x-request-id"].startswith("req_")


async def test_cors_preflight_allows_idempotency_key(client):
    response = await client.options(
        "/api/sync",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Idempotency-Key",
        },
    )
    assert response.status_code == 200
    assert "idempotency-key" in response.headers["access-control-allow-headers"].lower()
