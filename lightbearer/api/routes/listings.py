"""
lightbearer.api.routes.listings — LFG board and clan recruitment
=================================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_user, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import listing_service

router = APIRouter(tags=["listings"])


class LFGIn(CamelModel):
    activity: str | None = None
    description: str | None = None
    player_count: int | None = None
    region: str | None = None
    expires_in_minutes: int | None = None


class ClanIn(CamelModel):
    clan_name: str | None = None
    description: str | None = None
    requirements: str | None = None
    contact_info: str | None = None


class ActiveToggle(CamelModel):
    id: str | None = None
    active: bool | None = None


# ---------------------------------------------------------------------------
# LFG
# ---------------------------------------------------------------------------
@router.get("/lfg")
def list_lfg(engine: Annotated[Engine, Depends(get_engine)], active: str | None = None):
    return listing_service.list_lfg(engine, active_only=active != "false")


@router.post("/lfg")
def create_lfg(
    body: LFGIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return listing_service.create_lfg(
        engine,
        user.id,
        activity=body.activity,
        description=body.description,
        player_count=body.player_count,
        region=body.region,
        expires_in_minutes=body.expires_in_minutes,
    )


@router.patch("/lfg")
def toggle_lfg(
    body: ActiveToggle,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return listing_service.set_lfg_active(engine, body.id, user.id, body.active)


# ---------------------------------------------------------------------------
# Clans
# ---------------------------------------------------------------------------
@router.get("/clans")
def list_clans(engine: Annotated[Engine, Depends(get_engine)], active: str | None = None):
    return listing_service.list_clans(engine, active_only=active != "false")


@router.post("/clans")
def create_clan(
    body: ClanIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return listing_service.create_clan(
        engine,
        user.id,
        clan_name=body.clan_name,
        description=body.description,
        contact_info=body.contact_info,
        requirements=body.requirements,
    )


@router.patch("/clans")
def toggle_clan(
    body: ActiveToggle,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return listing_service.set_clan_active(engine, body.id, user.id, body.active)
