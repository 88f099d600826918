"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================
Health, session resolution, the admin gate and the ``{"error": ...}``
envelope for every failure path.
"""

from __future__ import annotations

import jwt
import pytest
from sqlalchemy.orm import Session

from conftest import ADMIN_DISCORD_ID, auth, make_session_token
from lightbearer.api.auth import upsert_discord_user
from lightbearer.api.deps import JWT_ALGORITHM
from lightbearer.database.models import User


# ===========================================================================
# Health endpoint
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# Admin gate — every catalog mutation and admin route answers 401
# ===========================================================================
class TestAdminAuthGuards:
    ADMIN_GET_ENDPOINTS = [
        "/api/admin/tasks",
        "/api/admin/api-keys",
    ]

    ADMIN_POST_ENDPOINTS = [
        "/api/weapons",
        "/api/mods",
        "/api/perks",
        "/api/traits",
        "/api/catalysts",
        "/api/mod-attributes",
        "/api/characters",
        "/api/admin/tasks",
        "/api/admin/tasks/seed-defaults",
        "/api/admin/api-keys",
    ]

    @pytest.mark.parametrize("endpoint", ADMIN_GET_ENDPOINTS)
    def test_get_rejects_no_auth(self, client, endpoint):
        resp = client.get(endpoint)
        assert resp.status_code == 401
        assert resp.json() == {"error": "Unauthorized"}

    @pytest.mark.parametrize("endpoint", ADMIN_POST_ENDPOINTS)
    def test_post_rejects_no_auth(self, client, endpoint):
        assert client.post(endpoint, json={}).status_code == 401

    @pytest.mark.parametrize("endpoint", ADMIN_GET_ENDPOINTS)
    def test_get_rejects_invalid_token(self, client, endpoint):
        resp = client.get(endpoint, headers={"Authorization": "Bearer invalid"})
        assert resp.status_code == 401

    @pytest.mark.parametrize("endpoint", ADMIN_POST_ENDPOINTS)
    def test_post_rejects_non_admin(self, client, member_headers, endpoint):
        assert client.post(endpoint, json={}, headers=member_headers).status_code == 401

    def test_admin_passes_gate(self, client, admin_headers):
        assert client.get("/api/admin/tasks", headers=admin_headers).status_code == 200


class TestAdminCheck:
    def test_anonymous_is_not_admin(self, client):
        assert client.get("/api/admin/check").json() == {"isAdmin": False}

    def test_member_is_not_admin(self, client, member_headers):
        assert client.get("/api/admin/check", headers=member_headers).json() == {"isAdmin": False}

    def test_admin_is_admin(self, client, admin_headers):
        assert client.get("/api/admin/check", headers=admin_headers).json() == {"isAdmin": True}


# ===========================================================================
# Sessions
# ===========================================================================
class TestSessions:
    def test_expired_token_is_anonymous(self, client, user_id):
        from lightbearer.api import deps

        token = jwt.encode(
            {"sub": user_id, "exp": 0}, deps.JWT_SECRET, algorithm=JWT_ALGORITHM
        )
        assert client.get("/api/auth/me", headers=auth(token)).status_code == 401

    def test_wrong_secret_is_anonymous(self, client, user_id):
        token = jwt.encode({"sub": user_id}, "x" * 64, algorithm=JWT_ALGORITHM)
        assert client.get("/api/auth/me", headers=auth(token)).status_code == 401

    def test_cookie_session(self, client, user_id):
        client.cookies.set("lb_session", make_session_token(user_id))
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json()["id"] == user_id

    def test_me_reports_admin(self, client, admin_id, admin_headers):
        body = client.get("/api/auth/me", headers=admin_headers).json()
        assert body["id"] == admin_id
        assert body["name"] == "Admin"
        assert body["discordId"] == ADMIN_DISCORD_ID
        assert body["isAdmin"] is True

    def test_logout_clears_cookie(self, client):
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        assert "lb_session" in resp.headers.get("set-cookie", "")


class TestDiscordUpsert:
    def test_creates_then_refreshes(self, db_engine):
        info = {"id": "555", "username": "guardian", "global_name": "Guardian", "avatar": "abc"}
        first = upsert_discord_user(db_engine, info)
        assert first.name == "Guardian"
        assert first.image.endswith("/avatars/555/abc.png")

        second = upsert_discord_user(db_engine, {**info, "global_name": None, "avatar": None})
        assert second.id == first.id
        assert second.name == "guardian"
        assert second.image is None

        with Session(db_engine) as session:
            assert session.query(User).count() == 1


# ===========================================================================
# Error envelope
# ===========================================================================
class TestErrorEnvelope:
    def test_not_found_service_error(self, client):
        resp = client.get("/api/news/missing")
        assert resp.status_code == 404
        assert resp.json() == {"error": "News post not found"}

    def test_request_validation_is_400(self, client):
        resp = client.get("/api/weapons?page=0")
        assert resp.status_code == 400
        assert set(resp.json()) == {"error"}

    def test_unknown_route_is_json_404(self, client):
        resp = client.get("/api/does-not-exist")
        assert resp.status_code == 404
        assert "error" in resp.json()

    def test_news_create_defaults_to_article(self, client, member_headers):
        resp = client.post(
            "/api/news", json={"title": "Hi", "content": "There"}, headers=member_headers
        )
        assert resp.status_code == 200
        assert resp.json()["type"] == "ARTICLE"

    def test_news_invalid_type_is_400(self, client, member_headers):
        resp = client.post(
            "/api/news",
            json={"title": "Hi", "content": "There", "type": "PODCAST"},
            headers=member_headers,
        )
        assert resp.status_code == 400
