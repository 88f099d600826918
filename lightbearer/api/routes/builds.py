"""
lightbearer.api.routes.builds — Player builds and build votes
==============================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_user, get_engine, get_optional_user
from lightbearer.api.schemas import CamelModel
from lightbearer.services import build_service, vote_service

router = APIRouter(prefix="/builds", tags=["builds"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ComponentIn(CamelModel):
    name: str | None = None
    description: str | None = None
    effect: str | None = None


class ArtifactAttributeIn(CamelModel):
    name: str | None = None
    description: str | None = None


class ArtifactIn(CamelModel):
    slot: int | None = None
    artifact_name: str | None = None
    rarity: str | None = None
    power: int | None = None
    gear_level: int | None = None
    enhancement_level: int | None = None
    attributes: list[ArtifactAttributeIn] = Field(default_factory=list)


class BuildWeaponIn(CamelModel):
    # Catalog id or slug, resolved when the build is read
    weapon_id: int | str | None = None
    slot: str | None = None
    custom_name: str | None = None
    gear_level: int | None = None
    enhancement_level: int | None = None
    traits: list[ComponentIn] = Field(default_factory=list)
    perks: list[ComponentIn] = Field(default_factory=list)
    catalysts: list[ComponentIn] = Field(default_factory=list)
    mods: list[ComponentIn] = Field(default_factory=list)


class BuildIn(CamelModel):
    title: str | None = None
    description: str | None = None
    character_id: str | None = None
    content: str | None = None
    is_public: bool | None = None
    artifacts: list[ArtifactIn] = Field(default_factory=list)
    primary_weapon: BuildWeaponIn | None = None
    power_weapon: BuildWeaponIn | None = None


class VoteIn(CamelModel):
    build_id: str
    value: int = 1


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("")
def list_builds(
    engine: Annotated[Engine, Depends(get_engine)],
    viewer: Annotated[Principal | None, Depends(get_optional_user)],
    character_id: Annotated[str | None, Query(alias="characterId")] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "upvotes",
):
    return build_service.list_builds(
        engine,
        viewer_id=viewer.id if viewer else None,
        character_id=character_id,
        user_id=user_id,
        sort_by=sort_by,
    )


@router.post("")
def create_build(
    body: BuildIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return build_service.create_build(engine, user.id, body.model_dump())


@router.post("/upvote")
def upvote_build(
    body: VoteIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return vote_service.vote_build(engine, user.id, body.build_id, body.value)


@router.get("/{build_id}")
def get_build(
    build_id: str,
    engine: Annotated[Engine, Depends(get_engine)],
    viewer: Annotated[Principal | None, Depends(get_optional_user)],
):
    return build_service.get_build(engine, build_id, viewer_id=viewer.id if viewer else None)


@router.put("/{build_id}")
def update_build(
    build_id: str,
    body: BuildIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return {"build": build_service.update_build(engine, build_id, user.id, body.model_dump())}


@router.delete("/{build_id}")
def delete_build(
    build_id: str,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    build_service.delete_build(engine, build_id, user.id)
    return {"success": True}
