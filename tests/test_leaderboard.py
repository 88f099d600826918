"""
tests/test_leaderboard.py — API Keys & Leaderboard Ingestion
=============================================================
Ingestion validates in a fixed order: required fields → API key →
activity type → ranking type → entries.  A rejected submission never
leaves a snapshot behind.
"""

from __future__ import annotations

import re

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lightbearer.database.models import ApiKey, LeaderboardEntry, LeaderboardSnapshot
from lightbearer.services import api_key_service, leaderboard_service
from lightbearer.services.errors import NotFoundError, UnauthorizedError, ValidationError

ENTRIES = [
    {"rank": 2, "playerName": "Saint", "score": 9100, "clan": "Iron"},
    {"rank": 1, "playerName": "Osiris", "score": 9900, "additionalData": {"power": 1810}},
]


@pytest.fixture
def api_key(db_engine) -> str:
    return api_key_service.create_key(db_engine, "capture-tool")["key"]


def _snapshots(engine) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count(LeaderboardSnapshot.id)))


def _submit(engine, key, **overrides):
    kwargs = {
        "api_key": key,
        "activity_type": "power",
        "ranking_type": "server",
        "entries": ENTRIES,
        "region": "EU",
    }
    kwargs.update(overrides)
    return leaderboard_service.ingest(engine, **kwargs)


class TestApiKeys:
    def test_key_format(self):
        assert re.fullmatch(r"lb_[0-9a-f]{64}", api_key_service.generate_key())

    def test_keys_are_unique(self):
        assert api_key_service.generate_key() != api_key_service.generate_key()

    def test_name_required(self, db_engine):
        with pytest.raises(ValidationError):
            api_key_service.create_key(db_engine, "")

    def test_revoke_and_delete(self, db_engine, api_key):
        key_id = api_key_service.list_keys(db_engine)[0]["id"]
        assert api_key_service.set_key_active(db_engine, key_id, False)["isActive"] is False
        assert api_key_service.delete_key(db_engine, key_id) == {"success": True}
        assert api_key_service.list_keys(db_engine) == []


class TestIngest:
    def test_success_path(self, db_engine, api_key):
        result = _submit(db_engine, api_key)
        assert result["success"] is True
        assert result["entriesProcessed"] == 2

        with Session(db_engine) as session:
            assert session.scalar(select(func.count(LeaderboardEntry.id))) == 2
            key = session.scalars(select(ApiKey)).one()
            assert key.last_used_at is not None

    def test_every_submission_is_a_new_snapshot(self, db_engine, api_key):
        _submit(db_engine, api_key)
        _submit(db_engine, api_key)
        assert _snapshots(db_engine) == 2

    def test_unknown_key_is_401(self, db_engine, api_key):
        with pytest.raises(UnauthorizedError):
            _submit(db_engine, "lb_" + "0" * 64)
        assert _snapshots(db_engine) == 0

    def test_inactive_key_is_401(self, db_engine, api_key):
        key_id = api_key_service.list_keys(db_engine)[0]["id"]
        api_key_service.set_key_active(db_engine, key_id, False)
        with pytest.raises(UnauthorizedError):
            _submit(db_engine, api_key)
        assert _snapshots(db_engine) == 0

    def test_empty_entries_is_400(self, db_engine, api_key):
        with pytest.raises(ValidationError, match="non-empty"):
            _submit(db_engine, api_key, entries=[])
        assert _snapshots(db_engine) == 0

    def test_missing_fields_checked_before_key(self, db_engine):
        with pytest.raises(ValidationError, match="Missing required fields"):
            _submit(db_engine, "not-a-key", activity_type=None)

    def test_key_checked_before_activity(self, db_engine):
        with pytest.raises(UnauthorizedError):
            _submit(db_engine, "not-a-key", activity_type="bogus")

    def test_unknown_activity(self, db_engine, api_key):
        with pytest.raises(ValidationError, match="Invalid activity type"):
            _submit(db_engine, api_key, activity_type="crucible")

    def test_unknown_ranking_type(self, db_engine, api_key):
        with pytest.raises(ValidationError, match="Invalid ranking type"):
            _submit(db_engine, api_key, ranking_type="global")

    def test_malformed_entry(self, db_engine, api_key):
        with pytest.raises(ValidationError):
            _submit(db_engine, api_key, entries=[{"rank": "first", "playerName": "X", "score": 1}])
        assert _snapshots(db_engine) == 0

    @pytest.mark.parametrize(
        "entry",
        [
            {"rank": True, "playerName": "X", "score": 1},
            {"rank": 1, "playerName": "X", "score": False},
        ],
    )
    def test_booleans_are_not_numbers(self, db_engine, api_key, entry):
        with pytest.raises(ValidationError, match="integer rank"):
            _submit(db_engine, api_key, entries=[entry])
        assert _snapshots(db_engine) == 0


class TestLatestSnapshot:
    def test_entries_ordered_by_rank(self, db_engine, api_key):
        _submit(db_engine, api_key, captured_at="2026-01-01T00:00:00+00:00")
        latest = leaderboard_service.latest_snapshot(db_engine, activity_type="power")
        assert [e["playerName"] for e in latest["entries"]] == ["Osiris", "Saint"]
        assert latest["entries"][0]["additionalData"] == {"power": 1810}

    def test_newest_capture_wins(self, db_engine, api_key):
        _submit(db_engine, api_key, captured_at="2026-01-01T00:00:00+00:00")
        newer = _submit(
            db_engine, api_key, captured_at="2026-02-01T00:00:00+00:00",
            entries=[{"rank": 1, "playerName": "Cayde", "score": 1}],
        )
        latest = leaderboard_service.latest_snapshot(db_engine, activity_type="power")
        assert latest["id"] == newer["snapshotId"]

    def test_none_is_404(self, db_engine):
        with pytest.raises(NotFoundError):
            leaderboard_service.latest_snapshot(db_engine, activity_type="fishing")


class TestLeaderboardRoutes:
    def test_update_round_trip(self, client, api_key):
        resp = client.post(
            "/api/leaderboard/update",
            json={
                "apiKey": api_key,
                "activityType": "fishing",
                "rankingType": "regional",
                "subRegion": "EU-West",
                "entries": ENTRIES,
            },
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "Leaderboard updated successfully"

        resp = client.get("/api/leaderboard?activityType=fishing&rankingType=regional")
        assert resp.status_code == 200
        assert resp.json()["subRegion"] == "EU-West"

    def test_bad_key_is_401_json(self, client):
        resp = client.post(
            "/api/leaderboard/update",
            json={"apiKey": "nope", "activityType": "power", "rankingType": "server", "entries": ENTRIES},
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid or inactive API key"}

    def test_admin_key_management(self, client, admin_headers, member_headers):
        assert client.get("/api/admin/api-keys", headers=member_headers).status_code == 401

        resp = client.post("/api/admin/api-keys", json={"name": "tool"}, headers=admin_headers)
        assert resp.status_code == 201
        created = resp.json()
        assert created["key"].startswith("lb_")

        resp = client.patch(
            "/api/admin/api-keys", json={"id": created["id"], "isActive": False}, headers=admin_headers
        )
        assert resp.json()["isActive"] is False

        resp = client.delete(f"/api/admin/api-keys?id={created['id']}", headers=admin_headers)
        assert resp.json() == {"success": True}
