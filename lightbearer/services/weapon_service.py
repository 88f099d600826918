"""
lightbearer.services.weapon_service — Weapon catalog
=====================================================

A weapon row plus five link tables, always written together:

* ``weapon_traits``            slot 1 = intrinsic, slot 2 = origin
* ``weapon_perk_assignments``  slots 3 and 4
* ``weapon_catalysts``         only for 6-star (Exotic) weapons
* ``weapon_mod_assignments``   any number of catalog mods
* ``weapon_character_compatibility``

Create and update run in one transaction; update drops every link and
re-inserts from the payload.  The slug is derived from the weapon type
and name (``"hand-cannon--the-last-word"``) and must be unique.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.constants import (
    COMBAT_STYLES,
    ELEMENTS,
    EXOTIC_WEAPON_RARITY,
    INTRINSIC_TRAIT_SLOT,
    MAX_WEAPON_RARITY,
    MIN_WEAPON_RARITY,
    ORIGIN_TRAIT_SLOT,
    PERK_SLOTS,
    WEAPON_RARITY_LABELS,
    WEAPON_SLOTS,
    WEAPON_TYPES,
    weapon_slug,
)
from lightbearer.database.engine import get_session
from lightbearer.database.models import (
    Catalyst,
    Character,
    Trait,
    Weapon,
    WeaponCatalyst,
    WeaponCharacter,
    WeaponMod,
    WeaponModAssignment,
    WeaponPerk,
    WeaponPerkAssignment,
    WeaponTrait,
)
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.serialize import iso

logger = logging.getLogger(__name__)

# Scalar payload key → column attribute
_SCALAR_FIELDS: tuple[str, ...] = (
    "name",
    "rarity",
    "weapon_type",
    "base_power",
    "combat_style",
    "element",
    "slot",
    "image_url",
    "dps",
    "precision_bonus",
    "magazine_cap",
    "rate_of_fire",
    "max_ammo",
    "damage",
    "reload_speed",
    "stability",
    "handling",
    "range",
)

_STAT_FIELDS: tuple[tuple[str, str], ...] = (
    ("dps", "dps"),
    ("precision_bonus", "precisionBonus"),
    ("magazine_cap", "magazineCap"),
    ("rate_of_fire", "rateOfFire"),
    ("max_ammo", "maxAmmo"),
    ("damage", "damage"),
    ("reload_speed", "reloadSpeed"),
    ("stability", "stability"),
    ("handling", "handling"),
    ("range", "range"),
)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def _component_dict(row) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "description": row.description,
        "effect": row.effect,
        "iconUrl": row.icon_url,
    }


def weapon_dict(weapon: Weapon) -> dict:
    data = {
        "id": weapon.id,
        "name": weapon.name,
        "slug": weapon.slug,
        "rarity": weapon.rarity,
        "rarityLabel": WEAPON_RARITY_LABELS.get(weapon.rarity),
        "weaponType": weapon.weapon_type,
        "basePower": weapon.base_power,
        "combatStyle": weapon.combat_style,
        "element": weapon.element,
        "slot": weapon.slot,
        "imageUrl": weapon.image_url,
    }
    for attr, key in _STAT_FIELDS:
        data[key] = getattr(weapon, attr)
    data["createdAt"] = iso(weapon.created_at)
    data["updatedAt"] = iso(weapon.updated_at)

    data["traits"] = [
        {"slot": link.slot, "type": link.trait.type, **_component_dict(link.trait)}
        for link in weapon.traits
    ]
    data["perks"] = [
        {"slot": link.slot, **_component_dict(link.perk)}
        for link in weapon.perk_assignments
    ]
    data["catalyst"] = next(
        (
            {**_component_dict(link.catalyst),
             "requirementDescription": link.catalyst.requirement_description}
            for link in weapon.catalyst_links
        ),
        None,
    )
    data["mods"] = [
        {"id": link.mod.id, "name": link.mod.name, "category": link.mod.category}
        for link in weapon.mod_links
    ]
    data["compatibleCharacters"] = [
        {"id": link.character.id, "name": link.character.name,
         "imageUrl": link.character.image_url}
        for link in weapon.character_links
    ]
    return data


def _with_links(stmt):
    return stmt.options(
        selectinload(Weapon.traits).selectinload(WeaponTrait.trait),
        selectinload(Weapon.perk_assignments).selectinload(WeaponPerkAssignment.perk),
        selectinload(Weapon.catalyst_links).selectinload(WeaponCatalyst.catalyst),
        selectinload(Weapon.mod_links).selectinload(WeaponModAssignment.mod),
        selectinload(Weapon.character_links).selectinload(WeaponCharacter.character),
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def _validate(payload: dict[str, Any]) -> None:
    missing = [
        key for key in ("name", "rarity", "weapon_type", "slot")
        if payload.get(key) in (None, "")
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    rarity = payload["rarity"]
    if not MIN_WEAPON_RARITY <= rarity <= MAX_WEAPON_RARITY:
        raise ValidationError(
            f"Rarity must be between {MIN_WEAPON_RARITY} and {MAX_WEAPON_RARITY}"
        )
    if payload["weapon_type"] not in WEAPON_TYPES:
        raise ValidationError(f"Invalid weapon type '{payload['weapon_type']}'")
    if payload["slot"] not in WEAPON_SLOTS:
        raise ValidationError(f"Slot must be one of {list(WEAPON_SLOTS)}")
    if payload.get("element") and payload["element"] not in ELEMENTS:
        raise ValidationError(f"Invalid element '{payload['element']}'")
    if payload.get("combat_style") and payload["combat_style"] not in COMBAT_STYLES:
        raise ValidationError(f"Invalid combat style '{payload['combat_style']}'")


def _require(session: Session, model, pk, label: str):
    row = session.get(model, pk)
    if row is None:
        raise ValidationError(f"Unknown {label} {pk}")
    return row


def _check_slug(session: Session, slug: str, exclude_id: int | None = None) -> None:
    stmt = select(Weapon.id).where(Weapon.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(Weapon.id != exclude_id)
    if session.scalar(stmt) is not None:
        raise ValidationError(f"A weapon with slug '{slug}' already exists")


def _apply(session: Session, weapon: Weapon, payload: dict[str, Any]) -> None:
    """Copy scalar fields onto *weapon* and rebuild every link collection."""
    for field in _SCALAR_FIELDS:
        value = payload.get(field)
        setattr(weapon, field, value if value != "" else None)
    weapon.slug = weapon_slug(payload["name"], payload["weapon_type"])

    traits = []
    for slot, key in ((INTRINSIC_TRAIT_SLOT, "intrinsic_trait_id"),
                      (ORIGIN_TRAIT_SLOT, "origin_trait_id")):
        if payload.get(key):
            _require(session, Trait, payload[key], "trait")
            traits.append(WeaponTrait(slot=slot, trait_id=payload[key]))
    weapon.traits = traits

    perks = []
    for slot, key in zip(PERK_SLOTS, ("perk1_id", "perk2_id")):
        if payload.get(key):
            _require(session, WeaponPerk, payload[key], "perk")
            perks.append(WeaponPerkAssignment(slot=slot, perk_id=payload[key]))
    weapon.perk_assignments = perks

    catalysts = []
    if payload.get("catalyst_id") and payload["rarity"] >= EXOTIC_WEAPON_RARITY:
        _require(session, Catalyst, payload["catalyst_id"], "catalyst")
        catalysts.append(WeaponCatalyst(catalyst_id=payload["catalyst_id"]))
    weapon.catalyst_links = catalysts

    mod_links = []
    for mod_id in dict.fromkeys(payload.get("mod_ids") or ()):
        _require(session, WeaponMod, mod_id, "mod")
        mod_links.append(WeaponModAssignment(mod_id=mod_id))
    weapon.mod_links = mod_links

    character_links = []
    for character_id in dict.fromkeys(payload.get("compatible_character_ids") or ()):
        _require(session, Character, character_id, "character")
        character_links.append(WeaponCharacter(character_id=character_id))
    weapon.character_links = character_links


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_weapons(
    engine: Engine,
    *,
    weapon_type: str | None = None,
    element: str | None = None,
    slot: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> dict:
    """One page of weapons, newest first, plus the filtered total."""
    page = max(page, 1)
    limit = max(min(limit, 100), 1)

    filters = []
    if weapon_type:
        filters.append(Weapon.weapon_type == weapon_type)
    if element:
        filters.append(Weapon.element == element)
    if slot:
        filters.append(Weapon.slot == slot)

    stmt = (
        _with_links(select(Weapon).where(*filters))
        .order_by(Weapon.created_at.desc(), Weapon.id.desc())
        .limit(limit)
        .offset((page - 1) * limit)
    )
    with Session(engine) as session:
        total = session.scalar(select(func.count(Weapon.id)).where(*filters))
        data = [weapon_dict(w) for w in session.scalars(stmt).all()]

    return {"data": data, "pagination": {"page": page, "limit": limit, "total": total}}


def get_weapon(engine: Engine, weapon_id: int) -> dict:
    with Session(engine) as session:
        weapon = session.scalars(
            _with_links(select(Weapon).where(Weapon.id == weapon_id))
        ).one_or_none()
        if weapon is None:
            raise NotFoundError("Weapon not found")
        return weapon_dict(weapon)


def get_weapon_by_slug(engine: Engine, slug: str) -> dict:
    with Session(engine) as session:
        weapon = session.scalars(
            _with_links(select(Weapon).where(Weapon.slug == slug))
        ).one_or_none()
        if weapon is None:
            raise NotFoundError("Weapon not found")
        return weapon_dict(weapon)


# ---------------------------------------------------------------------------
# Writes (admin only)
# ---------------------------------------------------------------------------
def create_weapon(engine: Engine, payload: dict[str, Any]) -> dict:
    _validate(payload)
    with get_session(engine) as session:
        _check_slug(session, weapon_slug(payload["name"], payload["weapon_type"]))
        weapon = Weapon()
        _apply(session, weapon, payload)
        session.add(weapon)
        session.flush()
        weapon_id, slug = weapon.id, weapon.slug

    logger.info("Weapon %d created (%s)", weapon_id, slug)
    return {"message": "Weapon created successfully", "id": weapon_id, "slug": slug}


def update_weapon(engine: Engine, weapon_id: int, payload: dict[str, Any]) -> dict:
    _validate(payload)
    with get_session(engine) as session:
        weapon = session.get(Weapon, weapon_id)
        if weapon is None:
            raise NotFoundError("Weapon not found")
        _check_slug(
            session, weapon_slug(payload["name"], payload["weapon_type"]), weapon_id
        )
        # Old link rows must be deleted before the replacements are inserted
        weapon.traits = []
        weapon.perk_assignments = []
        weapon.catalyst_links = []
        weapon.mod_links = []
        weapon.character_links = []
        session.flush()

        _apply(session, weapon, payload)
        session.flush()
        slug = weapon.slug

    return {"message": "Weapon updated successfully", "id": weapon_id, "slug": slug}


def delete_weapon(engine: Engine, weapon_id: int) -> dict:
    with get_session(engine) as session:
        weapon = session.get(Weapon, weapon_id)
        if weapon is None:
            raise NotFoundError("Weapon not found")
        session.delete(weapon)

    logger.info("Weapon %d deleted", weapon_id)
    return {"message": "Weapon deleted successfully"}
