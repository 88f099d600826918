"""
lightbearer.services.build_service — Player build graph
========================================================

A build owns its artifacts (each with attribute rows) and up to two weapon
loadouts (each with free-text trait/perk/catalyst/mod snapshots).  Create
and update write the whole graph inside one transaction; delete cascades
through every owned row plus the build's votes and comments.

Payloads are plain dicts with snake_case keys (the API layer's
``model_dump()``)::

    {
        "title": "Solar DPS",
        "character_id": "…",
        "artifacts": [{"slot": 1, "rarity": "Exotic", "attributes": [...]}],
        "primary_weapon": {"weapon_id": 12, "traits": [{"name": "…"}]},
        "power_weapon": {"custom_name": "Prototype Launcher"},
    }
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.constants import (
    ARTIFACT_RARITIES,
    ARTIFACT_SLOTS,
    WEAPON_SLOTS,
    artifact_attribute_count,
)
from lightbearer.database.engine import get_session
from lightbearer.database.models import (
    ArtifactAttribute,
    Build,
    BuildArtifact,
    BuildWeapon,
    BuildWeaponCatalyst,
    BuildWeaponMod,
    BuildWeaponPerk,
    BuildWeaponTrait,
    Character,
    Weapon,
)
from lightbearer.services.errors import ForbiddenError, NotFoundError, ValidationError
from lightbearer.services.serialize import iso, user_summary

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def character_dict(character: Character | None) -> dict | None:
    if character is None:
        return None
    return {
        "id": character.id,
        "name": character.name,
        "description": character.description,
        "imageUrl": character.image_url,
        "createdAt": iso(character.created_at),
    }


def _snapshot_dict(row) -> dict:
    return {
        "id": row.id,
        "name": row.name,
        "description": row.description,
        "effect": row.effect,
    }


def _resolve_weapon(session: Session, ref: str | None) -> Weapon | None:
    """Look up a soft weapon reference by catalog id, then by slug."""
    if not ref:
        return None
    if ref.isdigit():
        weapon = session.get(Weapon, int(ref))
        if weapon is not None:
            return weapon
    return session.scalars(select(Weapon).where(Weapon.slug == ref)).one_or_none()


def _build_weapon_dict(session: Session, bw: BuildWeapon) -> dict:
    weapon = _resolve_weapon(session, bw.weapon_id)
    return {
        "id": bw.id,
        "weaponId": bw.weapon_id,
        "slot": bw.slot,
        "customName": bw.custom_name,
        "gearLevel": bw.gear_level,
        "enhancementLevel": bw.enhancement_level,
        "weapon": None if weapon is None else {
            "id": weapon.id,
            "name": weapon.name,
            "slug": weapon.slug,
            "rarity": weapon.rarity,
            "weaponType": weapon.weapon_type,
            "element": weapon.element,
            "imageUrl": weapon.image_url,
        },
        "traits": [_snapshot_dict(t) for t in bw.traits],
        "perks": [_snapshot_dict(p) for p in bw.perks],
        "catalysts": [_snapshot_dict(c) for c in bw.catalysts],
        "mods": [_snapshot_dict(m) for m in bw.mods],
    }


def _artifact_dict(artifact: BuildArtifact) -> dict:
    return {
        "id": artifact.id,
        "slot": artifact.slot,
        "artifactName": artifact.artifact_name,
        "rarity": artifact.rarity,
        "power": artifact.power,
        "gearLevel": artifact.gear_level,
        "enhancementLevel": artifact.enhancement_level,
        "attributes": [
            {"id": a.id, "name": a.name, "description": a.description}
            for a in artifact.attributes
        ],
    }


def _build_summary(build: Build) -> dict:
    return {
        "id": build.id,
        "title": build.title,
        "description": build.description,
        "characterId": build.character_id,
        "content": build.content,
        "isPublic": build.is_public,
        "voteCount": build.vote_count,
        "userId": build.user_id,
        "createdAt": iso(build.created_at),
        "updatedAt": iso(build.updated_at),
        "user": user_summary(build.user),
        "character": character_dict(build.character),
    }


def _build_detail(session: Session, build: Build) -> dict:
    data = _build_summary(build)
    data["artifacts"] = [_artifact_dict(a) for a in build.artifacts]
    data["weapons"] = [_build_weapon_dict(session, w) for w in build.weapons]
    data["votes"] = [{"userId": v.user_id, "value": v.value} for v in build.votes]
    return data


# ---------------------------------------------------------------------------
# Payload normalization
# ---------------------------------------------------------------------------
def normalize_attributes(attributes: list[dict] | None, rarity: str) -> list[dict]:
    """Return exactly ``artifact_attribute_count(rarity)`` attribute rows.

    Nameless rows are dropped, extras truncated, and the remainder padded
    with blank rows so every artifact carries its rarity's full count.
    """
    count = artifact_attribute_count(rarity)
    named = [
        {"name": a["name"], "description": a.get("description") or ""}
        for a in (attributes or [])
        if a.get("name")
    ][:count]
    while len(named) < count:
        named.append({"name": "", "description": ""})
    return named


def _named(items: list[dict] | None) -> list[dict]:
    return [i for i in (items or []) if i.get("name")]


def _validate_core(payload: dict[str, Any]) -> None:
    if not payload.get("title") or not payload.get("character_id"):
        raise ValidationError("Missing required fields (title, characterId)")


def _make_artifacts(artifacts: list[dict] | None) -> list[BuildArtifact]:
    rows: list[BuildArtifact] = []
    seen_slots: set[int] = set()
    for index, artifact in enumerate(artifacts or []):
        slot = artifact.get("slot") or index + 1
        if slot not in ARTIFACT_SLOTS:
            raise ValidationError(f"Artifact slot must be one of {list(ARTIFACT_SLOTS)}")
        if slot in seen_slots:
            raise ValidationError(f"Duplicate artifact slot {slot}")
        seen_slots.add(slot)

        rarity = artifact.get("rarity") or "Rare"
        if rarity not in ARTIFACT_RARITIES:
            raise ValidationError(f"Invalid artifact rarity '{rarity}'")

        rows.append(BuildArtifact(
            slot=slot,
            artifact_name=artifact.get("artifact_name") or None,
            rarity=rarity,
            power=artifact.get("power") or 0,
            gear_level=artifact.get("gear_level") or 0,
            enhancement_level=artifact.get("enhancement_level") or 0,
            attributes=[
                ArtifactAttribute(name=a["name"], description=a["description"])
                for a in normalize_attributes(artifact.get("attributes"), rarity)
            ],
        ))
    return rows


def _make_weapons(payload: dict[str, Any]) -> list[BuildWeapon]:
    rows: list[BuildWeapon] = []
    for default_slot, weapon in zip(
        WEAPON_SLOTS, (payload.get("primary_weapon"), payload.get("power_weapon"))
    ):
        # A loadout with neither a catalog weapon nor a custom name is empty
        if not weapon or not (weapon.get("weapon_id") or weapon.get("custom_name")):
            continue

        weapon_ref = weapon.get("weapon_id")
        weapon_id = str(weapon_ref) if weapon_ref not in (None, "") else None

        slot = weapon.get("slot") or default_slot
        if slot not in WEAPON_SLOTS:
            raise ValidationError(f"Weapon slot must be one of {list(WEAPON_SLOTS)}")

        def snapshot(model, items):
            return [
                model(
                    name=i["name"],
                    description=i.get("description") or None,
                    effect=i.get("effect") or None,
                )
                for i in _named(items)
            ]

        rows.append(BuildWeapon(
            weapon_id=weapon_id,
            slot=slot,
            custom_name=weapon.get("custom_name") or None,
            gear_level=weapon.get("gear_level") or 0,
            enhancement_level=weapon.get("enhancement_level") or 0,
            traits=snapshot(BuildWeaponTrait, weapon.get("traits")),
            perks=snapshot(BuildWeaponPerk, weapon.get("perks")),
            catalysts=snapshot(BuildWeaponCatalyst, weapon.get("catalysts")),
            mods=snapshot(BuildWeaponMod, weapon.get("mods")),
        ))
    return rows


def _require_character(session: Session, character_id: str) -> None:
    if session.get(Character, character_id) is None:
        raise ValidationError(f"Unknown character {character_id}")


def _owned_build(session: Session, build_id: str, user_id: str) -> Build:
    build = session.get(Build, build_id)
    if build is None:
        raise NotFoundError("Build not found")
    if build.user_id != user_id:
        raise ForbiddenError("Forbidden")
    return build


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def list_builds(
    engine: Engine,
    *,
    viewer_id: str | None = None,
    character_id: str | None = None,
    user_id: str | None = None,
    sort_by: str = "upvotes",
) -> list[dict]:
    """Builds visible to *viewer_id*, newest or most-voted first.

    Private builds only appear when the viewer lists their own builds.
    """
    stmt = select(Build).options(
        selectinload(Build.user), selectinload(Build.character)
    )
    if character_id:
        stmt = stmt.where(Build.character_id == character_id)
    if user_id:
        stmt = stmt.where(Build.user_id == user_id)
    if not (user_id and viewer_id and user_id == viewer_id):
        stmt = stmt.where(Build.is_public.is_(True))

    if sort_by == "recent":
        stmt = stmt.order_by(Build.created_at.desc())
    else:
        stmt = stmt.order_by(Build.vote_count.desc(), Build.created_at.desc())

    with Session(engine) as session:
        return [_build_summary(b) for b in session.scalars(stmt).all()]


def get_build(engine: Engine, build_id: str, *, viewer_id: str | None = None) -> dict:
    with Session(engine) as session:
        build = session.get(Build, build_id)
        if build is None or (not build.is_public and build.user_id != viewer_id):
            raise NotFoundError("Build not found")
        return _build_detail(session, build)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def create_build(engine: Engine, user_id: str, payload: dict[str, Any]) -> dict:
    """Create a build and its whole graph in one transaction."""
    _validate_core(payload)
    with get_session(engine) as session:
        _require_character(session, payload["character_id"])
        is_public = payload.get("is_public")
        build = Build(
            title=payload["title"],
            description=payload.get("description") or "",
            character_id=payload["character_id"],
            content=payload.get("content") or "",
            is_public=True if is_public is None else is_public,
            user_id=user_id,
            artifacts=_make_artifacts(payload.get("artifacts")),
            weapons=_make_weapons(payload),
        )
        session.add(build)
        session.flush()
        result = _build_detail(session, build)

    logger.info("Build %s created by user %s", result["id"], user_id)
    return result


def update_build(
    engine: Engine, build_id: str, user_id: str, payload: dict[str, Any]
) -> dict:
    """Replace a build's fields and every nested child in one transaction."""
    with get_session(engine) as session:
        build = _owned_build(session, build_id, user_id)
        _validate_core(payload)
        _require_character(session, payload["character_id"])

        # Orphans must be gone before re-inserting (build_id, slot) pairs
        build.artifacts.clear()
        build.weapons.clear()
        session.flush()

        is_public = payload.get("is_public")
        build.title = payload["title"]
        build.description = payload.get("description") or ""
        build.character_id = payload["character_id"]
        build.content = payload.get("content") or ""
        build.is_public = True if is_public is None else is_public
        build.artifacts.extend(_make_artifacts(payload.get("artifacts")))
        build.weapons.extend(_make_weapons(payload))
        session.flush()
        session.refresh(build)
        return _build_detail(session, build)


def delete_build(engine: Engine, build_id: str, user_id: str) -> None:
    """Delete a build with its artifacts, weapons, votes and comments."""
    with get_session(engine) as session:
        build = _owned_build(session, build_id, user_id)
        session.delete(build)

    logger.info("Build %s deleted by user %s", build_id, user_id)
