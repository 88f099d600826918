"""
tests/test_achievements.py — Badge Catalogue & Grants
======================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from lightbearer.database.models import UserAchievement
from lightbearer.services import achievement_service
from lightbearer.services.errors import NotFoundError, ValidationError


def _create(engine, key: str, name: str | None = None) -> str:
    return achievement_service.create_achievement(
        engine, {"key": key, "name": name or key.title(), "description": f"Earned {key}"}
    )["id"]


def _earned(engine, user_id: str) -> int:
    with Session(engine) as session:
        return session.scalar(
            select(func.count()).select_from(UserAchievement)
            .where(UserAchievement.user_id == user_id)
        )


class TestCatalogue:
    def test_listed_by_name(self, db_engine):
        _create(db_engine, "raider", "Raider")
        _create(db_engine, "angler", "Angler")
        assert [a["name"] for a in achievement_service.list_achievements(db_engine)] == [
            "Angler",
            "Raider",
        ]

    @pytest.mark.parametrize("missing", ["key", "name", "description"])
    def test_required_fields(self, db_engine, missing):
        payload = {"key": "k", "name": "N", "description": "D"}
        payload[missing] = ""
        with pytest.raises(ValidationError, match="required"):
            achievement_service.create_achievement(db_engine, payload)

    def test_duplicate_key_is_400(self, db_engine):
        _create(db_engine, "raider")
        with pytest.raises(ValidationError, match="already exists"):
            _create(db_engine, "raider")


class TestGrants:
    def test_grant_once(self, db_engine, user_id, admin_id):
        achievement_id = _create(db_engine, "raider")
        granted = achievement_service.grant_achievement(
            db_engine, user_id, achievement_id, granted_by=admin_id
        )
        assert granted["achievement"]["key"] == "raider"
        assert granted["user"]["id"] == user_id
        assert granted["grantedBy"] == admin_id

        with pytest.raises(ValidationError, match="already has"):
            achievement_service.grant_achievement(db_engine, user_id, achievement_id)
        assert _earned(db_engine, user_id) == 1

    def test_missing_ids_are_400(self, db_engine, user_id):
        with pytest.raises(ValidationError):
            achievement_service.grant_achievement(db_engine, user_id, None)

    def test_unknown_user_or_badge_is_404(self, db_engine, user_id):
        achievement_id = _create(db_engine, "raider")
        with pytest.raises(NotFoundError, match="User"):
            achievement_service.grant_achievement(db_engine, "nobody", achievement_id)
        with pytest.raises(NotFoundError, match="Achievement"):
            achievement_service.grant_achievement(db_engine, user_id, "missing")

    def test_member_list_newest_first(self, db_engine, user_id, other_user_id):
        first = _create(db_engine, "first")
        second = _create(db_engine, "second")
        achievement_service.grant_achievement(db_engine, user_id, first)
        achievement_service.grant_achievement(db_engine, user_id, second)
        achievement_service.grant_achievement(db_engine, other_user_id, first)

        earlier = datetime.now(UTC) - timedelta(days=1)
        with Session(db_engine) as session:
            session.execute(
                update(UserAchievement)
                .where(UserAchievement.achievement_id == first)
                .values(earned_at=earlier)
            )
            session.commit()

        mine = achievement_service.list_user_achievements(db_engine, user_id)
        assert [e["achievement"]["key"] for e in mine] == ["second", "first"]


class TestAchievementRoutes:
    def test_admin_only_catalogue(self, client, member_headers, admin_headers):
        body = {"key": "raider", "name": "Raider", "description": "Cleared a raid"}
        assert client.post("/api/admin/achievements", json=body, headers=member_headers).status_code == 401
        assert client.get("/api/admin/achievements", headers=member_headers).status_code == 401

        resp = client.post("/api/admin/achievements", json=body, headers=admin_headers)
        assert resp.status_code == 201
        assert [a["key"] for a in client.get("/api/admin/achievements", headers=admin_headers).json()] == [
            "raider"
        ]

    def test_grant_and_read_own(self, client, user_id, member_headers, admin_headers):
        achievement_id = client.post(
            "/api/admin/achievements",
            json={"key": "angler", "name": "Angler", "description": "Caught a fish"},
            headers=admin_headers,
        ).json()["id"]

        grant = {"userId": user_id, "achievementId": achievement_id}
        assert client.post("/api/admin/grant-achievement", json=grant, headers=member_headers).status_code == 401
        assert client.post("/api/admin/grant-achievement", json=grant, headers=admin_headers).status_code == 200

        again = client.post("/api/admin/grant-achievement", json=grant, headers=admin_headers)
        assert again.status_code == 400
        assert again.json() == {"error": "User already has this achievement"}

        (earned,) = client.get("/api/achievements", headers=member_headers).json()
        assert earned["achievement"]["key"] == "angler"

    def test_own_list_requires_session(self, client):
        assert client.get("/api/achievements").status_code == 401
