"""
lightbearer.services.mod_service — Weapon mod catalog
======================================================

Mods are listed through one fixed, eager-loaded view (rarity, main
attributes, random attribute pool, upgradable perks).  Optional filters
are composed onto it as ``WHERE`` clauses:

* ``category``     → ``category = :category``
* ``combat_style`` → ``combat_style = :style OR combat_style IS NULL``
  (style-agnostic mods fit every weapon)

Results are ordered by mod name.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, or_, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.constants import COMBAT_STYLES, MOD_CATEGORIES
from lightbearer.database.engine import get_session
from lightbearer.database.models import (
    ModAttribute,
    ModPerkUpgrade,
    ModRarity,
    WeaponMod,
    WeaponPerk,
)
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.serialize import iso

logger = logging.getLogger(__name__)


def rarity_dict(rarity: ModRarity) -> dict:
    return {
        "id": rarity.id,
        "name": rarity.name,
        "mainAttributeCount": rarity.main_attribute_count,
        "randomAttributeCount": rarity.random_attribute_count,
        "colorCode": rarity.color_code,
    }


def _attribute_summary(attr: ModAttribute) -> dict:
    return {
        "id": attr.id,
        "name": attr.name,
        "minStatBonus": attr.min_stat_bonus,
        "maxStatBonus": attr.max_stat_bonus,
    }


def mod_dict(mod: WeaponMod) -> dict:
    return {
        "id": mod.id,
        "name": mod.name,
        "category": mod.category,
        "rarityId": mod.rarity_id,
        "rarity": rarity_dict(mod.rarity) if mod.rarity else None,
        "description": mod.description,
        "combatStyle": mod.combat_style,
        "unlocksPerkUpgrade": mod.unlocks_perk_upgrade,
        "perkUpgradeDescription": mod.perk_upgrade_description,
        "iconUrl": mod.icon_url,
        "mainAttributes": [_attribute_summary(a) for a in mod.main_attributes],
        "randomAttributes": [_attribute_summary(a) for a in mod.random_attributes],
        "upgradablePerks": [
            {
                "id": up.perk.id,
                "name": up.perk.name,
                "upgradeDescription": up.upgrade_description,
            }
            for up in sorted(mod.perk_upgrades, key=lambda u: u.perk.name)
        ],
        "createdAt": iso(mod.created_at),
    }


def _mod_view():
    return select(WeaponMod).options(
        selectinload(WeaponMod.rarity),
        selectinload(WeaponMod.main_attributes),
        selectinload(WeaponMod.random_attributes),
        selectinload(WeaponMod.perk_upgrades).selectinload(ModPerkUpgrade.perk),
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_mods(
    engine: Engine, *, category: str | None = None, combat_style: str | None = None
) -> list[dict]:
    stmt = _mod_view()
    if category:
        stmt = stmt.where(WeaponMod.category == category)
    if combat_style:
        stmt = stmt.where(
            or_(WeaponMod.combat_style == combat_style, WeaponMod.combat_style.is_(None))
        )
    stmt = stmt.order_by(WeaponMod.name.asc(), WeaponMod.id.asc())

    with Session(engine) as session:
        return [mod_dict(m) for m in session.scalars(stmt).all()]


def get_mod(engine: Engine, mod_id: int) -> dict:
    with Session(engine) as session:
        mod = session.scalars(_mod_view().where(WeaponMod.id == mod_id)).one_or_none()
        if mod is None:
            raise NotFoundError("Mod not found")
        return mod_dict(mod)


# ---------------------------------------------------------------------------
# Writes (admin only)
# ---------------------------------------------------------------------------
def _attributes(session: Session, ids: list[int] | None) -> list[ModAttribute]:
    rows = []
    for attr_id in dict.fromkeys(ids or ()):
        attr = session.get(ModAttribute, attr_id)
        if attr is None:
            raise ValidationError(f"Unknown mod attribute {attr_id}")
        rows.append(attr)
    return rows


def create_mod(engine: Engine, payload: dict[str, Any]) -> dict:
    """Insert a mod and its attribute/perk junction rows in one transaction."""
    if not payload.get("name") or not payload.get("category"):
        raise ValidationError("Name and category are required")
    if payload["category"] not in MOD_CATEGORIES:
        raise ValidationError(f"Category must be one of {list(MOD_CATEGORIES)}")
    combat_style = payload.get("combat_style") or None
    if combat_style is not None and combat_style not in COMBAT_STYLES:
        raise ValidationError(f"Invalid combat style '{combat_style}'")

    descriptions: dict[str, str] = payload.get("perk_upgrade_descriptions") or {}

    with get_session(engine) as session:
        rarity_id = payload.get("rarity_id") or None
        if rarity_id is not None and session.get(ModRarity, rarity_id) is None:
            raise ValidationError(f"Unknown mod rarity {rarity_id}")

        upgrades = []
        for perk_id in dict.fromkeys(payload.get("upgradable_perk_ids") or ()):
            if session.get(WeaponPerk, perk_id) is None:
                raise ValidationError(f"Unknown perk {perk_id}")
            upgrades.append(ModPerkUpgrade(
                perk_id=perk_id,
                upgrade_description=descriptions.get(str(perk_id), ""),
            ))

        mod = WeaponMod(
            name=payload["name"],
            category=payload["category"],
            rarity_id=rarity_id,
            description=payload.get("description"),
            combat_style=combat_style,
            unlocks_perk_upgrade=bool(payload.get("unlocks_perk_upgrade")),
            perk_upgrade_description=payload.get("perk_upgrade_description"),
            icon_url=payload.get("icon_url"),
            main_attributes=_attributes(session, payload.get("main_attribute_ids")),
            random_attributes=_attributes(session, payload.get("random_attribute_ids")),
            perk_upgrades=upgrades,
        )
        session.add(mod)
        session.flush()
        mod_id = mod.id

    logger.info("Mod %d created (%s)", mod_id, payload["name"])
    return {"message": "Mod created successfully", "id": mod_id}


def delete_mod(engine: Engine, mod_id: int) -> dict:
    with get_session(engine) as session:
        mod = session.get(WeaponMod, mod_id)
        if mod is None:
            raise NotFoundError("Mod not found")
        session.delete(mod)
    return {"message": "Mod deleted successfully"}
