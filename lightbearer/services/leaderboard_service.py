"""
lightbearer.services.leaderboard_service — Snapshot ingestion
==============================================================

An external capture tool posts whole leaderboards.  Every accepted
submission becomes a brand-new :class:`LeaderboardSnapshot` with its
entries; nothing is de-duplicated or overwritten.

Validation runs in a fixed order so the status code tells the tool what
went wrong first:

1. required fields present                          → 400
2. API key known and active                         → 401
   (``last_used_at`` is stamped here and committed)
3. activity type in the allow-list                  → 400
4. ranking type ``server`` / ``regional``           → 400
5. entries non-empty and well-formed                → 400
6. snapshot + entries inserted in one transaction
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.constants import LEADERBOARD_ACTIVITIES, RANKING_TYPES
from lightbearer.database.engine import get_session
from lightbearer.database.models import LeaderboardEntry, LeaderboardSnapshot
from lightbearer.services import api_key_service
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.serialize import iso

logger = logging.getLogger(__name__)


def _parse_captured_at(value: str | None) -> datetime:
    if not value:
        return datetime.now(UTC)
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid capturedAt timestamp '{value}'")


def _entry_rows(entries: list[dict[str, Any]]) -> list[LeaderboardEntry]:
    rows = []
    for index, entry in enumerate(entries):
        rank, player, score = entry.get("rank"), entry.get("playerName"), entry.get("score")
        if (
            isinstance(rank, bool) or not isinstance(rank, int)
            or not player
            or isinstance(score, bool) or not isinstance(score, (int, float))
        ):
            raise ValidationError(
                f"Entry {index} must have an integer rank, a playerName and a numeric score"
            )
        rows.append(LeaderboardEntry(
            rank=rank,
            player_name=player,
            score=score,
            clan=entry.get("clan") or None,
            additional_data=entry.get("additionalData") or None,
        ))
    return rows


def ingest(
    engine: Engine,
    *,
    api_key: str | None,
    activity_type: str | None,
    ranking_type: str | None,
    entries: list[dict[str, Any]] | None,
    character: str | None = None,
    region: str | None = None,
    sub_region: str | None = None,
    captured_at: str | None = None,
) -> dict:
    """Validate and store one leaderboard submission."""
    if not api_key or not activity_type or not ranking_type or entries is None:
        raise ValidationError(
            "Missing required fields: apiKey, activityType, rankingType, entries"
        )

    key_id = api_key_service.authenticate(engine, api_key)

    if activity_type not in LEADERBOARD_ACTIVITIES:
        raise ValidationError(
            f"Invalid activity type. Must be one of: {', '.join(LEADERBOARD_ACTIVITIES)}"
        )
    if ranking_type not in RANKING_TYPES:
        raise ValidationError('Invalid ranking type. Must be "server" or "regional"')
    if not entries:
        raise ValidationError("Entries must be a non-empty array")

    rows = _entry_rows(entries)
    captured = _parse_captured_at(captured_at)

    with get_session(engine) as session:
        snapshot = LeaderboardSnapshot(
            activity_type=activity_type,
            ranking_type=ranking_type,
            character=character or None,
            region=region or None,
            sub_region=sub_region or None,
            captured_at=captured,
            entry_count=len(rows),
            entries=rows,
        )
        session.add(snapshot)
        session.flush()
        snapshot_id = snapshot.id

    logger.info(
        "Leaderboard snapshot %s ingested: %s/%s, %d entries (key %s)",
        snapshot_id, activity_type, ranking_type, len(rows), key_id,
    )
    return {
        "success": True,
        "snapshotId": snapshot_id,
        "entriesProcessed": len(rows),
        "message": "Leaderboard updated successfully",
    }


def latest_snapshot(
    engine: Engine,
    *,
    activity_type: str,
    ranking_type: str = "server",
    character: str | None = None,
    region: str | None = None,
) -> dict:
    """Most recently captured snapshot matching the filters, entries by rank."""
    filters = [
        LeaderboardSnapshot.activity_type == activity_type,
        LeaderboardSnapshot.ranking_type == ranking_type,
    ]
    if character:
        filters.append(LeaderboardSnapshot.character == character)
    if region:
        filters.append(LeaderboardSnapshot.region == region)
    stmt = (
        select(LeaderboardSnapshot)
        .where(*filters)
        .options(selectinload(LeaderboardSnapshot.entries))
        .order_by(LeaderboardSnapshot.captured_at.desc(), LeaderboardSnapshot.created_at.desc())
        .limit(1)
    )

    with Session(engine) as session:
        snapshot = session.scalars(stmt).first()
        if snapshot is None:
            raise NotFoundError("No leaderboard snapshot found")
        return {
            "id": snapshot.id,
            "activityType": snapshot.activity_type,
            "rankingType": snapshot.ranking_type,
            "character": snapshot.character,
            "region": snapshot.region,
            "subRegion": snapshot.sub_region,
            "capturedAt": iso(snapshot.captured_at),
            "entryCount": snapshot.entry_count,
            "entries": [
                {
                    "rank": e.rank,
                    "playerName": e.player_name,
                    "score": e.score,
                    "clan": e.clan,
                    "additionalData": e.additional_data,
                }
                for e in snapshot.entries
            ],
        }
