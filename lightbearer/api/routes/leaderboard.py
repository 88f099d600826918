"""
lightbearer.api.routes.leaderboard — Leaderboard ingestion and reads
=====================================================================

``POST /leaderboard/update`` is called by the external capture tool, which
authenticates with an API key in the body rather than a session.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Engine

from lightbearer.api.deps import get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import leaderboard_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


class LeaderboardSubmission(CamelModel):
    api_key: str | None = None
    activity_type: str | None = None
    ranking_type: str | None = None
    character: str | None = None
    region: str | None = None
    sub_region: str | None = None
    # Kept as raw camelCase dicts; the service reads rank/playerName/score/...
    entries: list[dict[str, Any]] | None = None
    captured_at: str | None = None


@router.post("/update")
def update_leaderboard(
    body: LeaderboardSubmission,
    engine: Annotated[Engine, Depends(get_engine)],
):
    return leaderboard_service.ingest(
        engine,
        api_key=body.api_key,
        activity_type=body.activity_type,
        ranking_type=body.ranking_type,
        entries=body.entries,
        character=body.character,
        region=body.region,
        sub_region=body.sub_region,
        captured_at=body.captured_at,
    )


@router.get("")
def get_leaderboard(
    engine: Annotated[Engine, Depends(get_engine)],
    activity_type: Annotated[str, Query(alias="activityType")],
    ranking_type: Annotated[str, Query(alias="rankingType")] = "server",
    character: str | None = None,
    region: str | None = None,
):
    return leaderboard_service.latest_snapshot(
        engine,
        activity_type=activity_type,
        ranking_type=ranking_type,
        character=character,
        region=region,
    )
