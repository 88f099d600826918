"""
lightbearer.services.catalog_service — Weapon component catalogs
=================================================================

Perks, traits, catalysts and mod attributes share one shape: a flat row
with list / get / create / update / delete.  Each is described by a
:class:`CatalogResource` and served by the generic functions below.

Mod rarities (read-only) and characters live here too.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from lightbearer.constants import PERK_SLOTS, TRAIT_TYPES
from lightbearer.database.engine import get_session
from lightbearer.database.models import (
    Catalyst,
    Character,
    ModAttribute,
    ModRarity,
    Trait,
    WeaponPerk,
)
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.mod_service import rarity_dict
from lightbearer.services.serialize import iso

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Resource descriptors
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class CatalogResource:
    """How one catalog table is exposed over the API."""

    model: type
    singular: str                       # response envelope key, e.g. "perk"
    plural: str                         # list envelope key, e.g. "perks"
    label: str                          # human name used in messages
    fields: dict[str, str]              # column attr → camelCase key
    required: tuple[str, ...] = ("name",)
    order_by: tuple[str, ...] = ("name",)
    validate: Callable[[dict[str, Any]], None] | None = None
    filters: tuple[str, ...] = field(default=())


def _validate_perk(payload: dict[str, Any]) -> None:
    if payload.get("slot") not in PERK_SLOTS:
        raise ValidationError(f"Perk slot must be one of {list(PERK_SLOTS)}")


def _validate_trait(payload: dict[str, Any]) -> None:
    if payload.get("type") not in TRAIT_TYPES:
        raise ValidationError(f"Trait type must be one of {list(TRAIT_TYPES)}")


def _validate_attribute(payload: dict[str, Any]) -> None:
    low, high = payload.get("min_stat_bonus"), payload.get("max_stat_bonus")
    if low is not None and high is not None and low > high:
        raise ValidationError("minStatBonus cannot exceed maxStatBonus")


_COMPONENT_FIELDS = {
    "name": "name",
    "description": "description",
    "effect": "effect",
    "icon_url": "iconUrl",
}

PERKS = CatalogResource(
    model=WeaponPerk,
    singular="perk",
    plural="perks",
    label="Perk",
    fields={**_COMPONENT_FIELDS, "slot": "slot"},
    required=("name", "slot"),
    order_by=("slot", "name"),
    validate=_validate_perk,
    filters=("slot",),
)

TRAITS = CatalogResource(
    model=Trait,
    singular="trait",
    plural="traits",
    label="Trait",
    fields={**_COMPONENT_FIELDS, "type": "type"},
    required=("name", "type"),
    order_by=("type", "name"),
    validate=_validate_trait,
    filters=("type",),
)

CATALYSTS = CatalogResource(
    model=Catalyst,
    singular="catalyst",
    plural="catalysts",
    label="Catalyst",
    fields={**_COMPONENT_FIELDS, "requirement_description": "requirementDescription"},
)

MOD_ATTRIBUTES = CatalogResource(
    model=ModAttribute,
    singular="attribute",
    plural="attributes",
    label="Mod attribute",
    fields={
        "name": "name",
        "description": "description",
        "min_stat_bonus": "minStatBonus",
        "max_stat_bonus": "maxStatBonus",
    },
    validate=_validate_attribute,
)


# ---------------------------------------------------------------------------
# Generic CRUD
# ---------------------------------------------------------------------------
def _row_dict(resource: CatalogResource, row) -> dict:
    data = {"id": row.id}
    for attr, key in resource.fields.items():
        data[key] = getattr(row, attr)
    data["createdAt"] = iso(row.created_at)
    return data


def _check(resource: CatalogResource, payload: dict[str, Any]) -> None:
    missing = [k for k in resource.required if payload.get(k) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    if resource.validate is not None:
        resource.validate(payload)


def list_items(engine: Engine, resource: CatalogResource, **filters: Any) -> dict:
    stmt = select(resource.model)
    for name in resource.filters:
        value = filters.get(name)
        if value is not None:
            stmt = stmt.where(getattr(resource.model, name) == value)
    stmt = stmt.order_by(*(getattr(resource.model, col) for col in resource.order_by))

    with Session(engine) as session:
        rows = session.scalars(stmt).all()
        return {resource.plural: [_row_dict(resource, r) for r in rows]}


def get_item(engine: Engine, resource: CatalogResource, item_id: int) -> dict:
    with Session(engine) as session:
        row = session.get(resource.model, item_id)
        if row is None:
            raise NotFoundError(f"{resource.label} not found")
        return {resource.singular: _row_dict(resource, row)}


def create_item(engine: Engine, resource: CatalogResource, payload: dict[str, Any]) -> dict:
    _check(resource, payload)
    with get_session(engine) as session:
        row = resource.model(**{attr: payload.get(attr) for attr in resource.fields})
        session.add(row)
        session.flush()
        result = {resource.singular: _row_dict(resource, row)}

    logger.info("%s %d created", resource.label, result[resource.singular]["id"])
    return result


def update_item(
    engine: Engine, resource: CatalogResource, item_id: int, payload: dict[str, Any]
) -> dict:
    _check(resource, payload)
    with get_session(engine) as session:
        row = session.get(resource.model, item_id)
        if row is None:
            raise NotFoundError(f"{resource.label} not found")
        for attr in resource.fields:
            setattr(row, attr, payload.get(attr))
        session.flush()
        return {resource.singular: _row_dict(resource, row)}


def delete_item(engine: Engine, resource: CatalogResource, item_id: int) -> dict:
    with get_session(engine) as session:
        row = session.get(resource.model, item_id)
        if row is None:
            raise NotFoundError(f"{resource.label} not found")
        session.delete(row)
    return {"message": f"{resource.label} deleted successfully"}


# ---------------------------------------------------------------------------
# Mod rarities
# ---------------------------------------------------------------------------
def list_mod_rarities(engine: Engine) -> dict:
    stmt = select(ModRarity).order_by(
        ModRarity.main_attribute_count, ModRarity.random_attribute_count
    )
    with Session(engine) as session:
        return {"rarities": [rarity_dict(r) for r in session.scalars(stmt).all()]}


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------
def _character_dict(character: Character) -> dict:
    return {
        "id": character.id,
        "name": character.name,
        "description": character.description,
        "imageUrl": character.image_url,
        "createdAt": iso(character.created_at),
    }


def list_characters(engine: Engine) -> list[dict]:
    with Session(engine) as session:
        rows = session.scalars(select(Character).order_by(Character.name)).all()
        return [_character_dict(c) for c in rows]


def create_character(
    engine: Engine,
    *,
    name: str | None,
    description: str | None = None,
    image_url: str | None = None,
) -> dict:
    if not name:
        raise ValidationError("Character name is required")
    with get_session(engine) as session:
        if session.scalar(select(Character.id).where(Character.name == name)):
            raise ValidationError(f"Character '{name}' already exists")
        character = Character(name=name, description=description, image_url=image_url)
        session.add(character)
        session.flush()
        return _character_dict(character)
