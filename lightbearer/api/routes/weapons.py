"""
lightbearer.api.routes.weapons — Weapon catalog (reads public, writes admin)
=============================================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_admin, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import weapon_service

router = APIRouter(prefix="/weapons", tags=["weapons"])


class WeaponIn(CamelModel):
    name: str | None = None
    rarity: int | None = None
    weapon_type: str | None = None
    slot: str | None = None
    base_power: int | None = None
    combat_style: str | None = None
    element: str | None = None
    image_url: str | None = None

    dps: float | None = None
    precision_bonus: float | None = None
    magazine_cap: int | None = None
    rate_of_fire: int | None = None
    max_ammo: int | None = None
    damage: float | None = None
    reload_speed: float | None = None
    stability: int | None = None
    handling: int | None = None
    range: int | None = None

    intrinsic_trait_id: int | None = None
    origin_trait_id: int | None = None
    perk1_id: int | None = None
    perk2_id: int | None = None
    catalyst_id: int | None = None
    mod_ids: list[int] = Field(default_factory=list)
    compatible_character_ids: list[str] = Field(default_factory=list)


@router.get("")
def list_weapons(
    engine: Annotated[Engine, Depends(get_engine)],
    type: str | None = None,
    element: str | None = None,
    slot: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
):
    return weapon_service.list_weapons(
        engine, weapon_type=type, element=element, slot=slot, page=page, limit=limit
    )


@router.get("/slug/{slug}")
def get_weapon_by_slug(slug: str, engine: Annotated[Engine, Depends(get_engine)]):
    return weapon_service.get_weapon_by_slug(engine, slug)


@router.get("/{weapon_id}")
def get_weapon(weapon_id: int, engine: Annotated[Engine, Depends(get_engine)]):
    return weapon_service.get_weapon(engine, weapon_id)


@router.post("", status_code=201)
def create_weapon(
    body: WeaponIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return weapon_service.create_weapon(engine, body.model_dump())


@router.put("/{weapon_id}")
def update_weapon(
    weapon_id: int,
    body: WeaponIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return weapon_service.update_weapon(engine, weapon_id, body.model_dump())


@router.delete("/{weapon_id}")
def delete_weapon(
    weapon_id: int,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return weapon_service.delete_weapon(engine, weapon_id)
