"""
lightbearer.api.routes.achievements — Badges, awards and profile cosmetics
============================================================================

Members read their own badges and edit their own profile; the badge
catalogue, grants and name-effect overrides are admin-only.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_admin, get_current_user, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import achievement_service, profile_service

router = APIRouter(tags=["achievements"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class AchievementIn(CamelModel):
    key: str | None = None
    name: str | None = None
    description: str | None = None
    icon: str | None = None


class GrantIn(CamelModel):
    user_id: str | None = None
    achievement_id: str | None = None


class ProfileIn(CamelModel):
    display_title: str | None = None
    name_effect: str | None = None
    custom_color: str | None = None


class UserEffectsIn(CamelModel):
    user_id: str | None = None
    name_effect: str | None = None
    custom_color: str | None = None


# ---------------------------------------------------------------------------
# Member routes
# ---------------------------------------------------------------------------
@router.get("/achievements")
def my_achievements(
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return achievement_service.list_user_achievements(engine, user.id)


@router.get("/profile")
def get_profile(
    engine: Annotated[Engine, Depends(get_engine)],
    user_id: Annotated[str | None, Query(alias="userId")] = None,
):
    return profile_service.get_profile(engine, user_id)


@router.patch("/profile")
def update_profile(
    body: ProfileIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return profile_service.update_own_profile(
        engine, user.id, body.model_dump(exclude_unset=True)
    )


# ---------------------------------------------------------------------------
# Admin routes
# ---------------------------------------------------------------------------
@router.get("/admin/achievements", tags=["admin"])
def list_achievements(
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return achievement_service.list_achievements(engine)


@router.post("/admin/achievements", status_code=201, tags=["admin"])
def create_achievement(
    body: AchievementIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return achievement_service.create_achievement(engine, body.model_dump())


@router.post("/admin/grant-achievement", tags=["admin"])
def grant_achievement(
    body: GrantIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return achievement_service.grant_achievement(
        engine, body.user_id, body.achievement_id, granted_by=admin.id
    )


@router.post("/admin/user-effects", tags=["admin"])
def set_user_effects(
    body: UserEffectsIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    changes = body.model_dump(exclude_unset=True)
    return profile_service.set_user_effects(engine, changes.pop("user_id", None), changes)
