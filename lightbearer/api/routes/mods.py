"""
lightbearer.api.routes.mods — Weapon mod catalog
=================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_admin, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import mod_service

router = APIRouter(prefix="/mods", tags=["mods"])


class ModIn(CamelModel):
    name: str | None = None
    category: str | None = None
    rarity_id: int | None = None
    description: str | None = None
    combat_style: str | None = None
    unlocks_perk_upgrade: bool = False
    perk_upgrade_description: str | None = None
    icon_url: str | None = None
    main_attribute_ids: list[int] = Field(default_factory=list)
    random_attribute_ids: list[int] = Field(default_factory=list)
    upgradable_perk_ids: list[int] = Field(default_factory=list)
    # perk id (as JSON object key) → upgrade text
    perk_upgrade_descriptions: dict[str, str] = Field(default_factory=dict)


@router.get("")
def list_mods(
    engine: Annotated[Engine, Depends(get_engine)],
    category: str | None = None,
    combat_style: Annotated[str | None, Query(alias="combatStyle")] = None,
):
    return {"mods": mod_service.list_mods(engine, category=category, combat_style=combat_style)}


@router.get("/{mod_id}")
def get_mod(mod_id: int, engine: Annotated[Engine, Depends(get_engine)]):
    return {"mod": mod_service.get_mod(engine, mod_id)}


@router.post("", status_code=201)
def create_mod(
    body: ModIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return mod_service.create_mod(engine, body.model_dump())


@router.delete("/{mod_id}")
def delete_mod(
    mod_id: int,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return mod_service.delete_mod(engine, mod_id)
