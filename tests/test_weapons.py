"""
tests/test_weapons.py — Weapon Catalog
=======================================
Slug derivation, the Exotic-only catalyst rule, link rewriting on update,
pagination and the admin gate.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lightbearer.constants import weapon_slug
from lightbearer.database.models import (
    Catalyst,
    Trait,
    WeaponCatalyst,
    WeaponPerk,
    WeaponPerkAssignment,
    WeaponTrait,
)
from lightbearer.services import weapon_service
from lightbearer.services.errors import NotFoundError, ValidationError


@pytest.fixture
def components(db_engine) -> dict:
    with Session(db_engine) as session:
        rows = {
            "intrinsic": Trait(name="Adaptive Frame", type="intrinsic"),
            "origin": Trait(name="Veist Stinger", type="origin"),
            "perk3": WeaponPerk(name="Outlaw", slot=3),
            "perk4": WeaponPerk(name="Rampage", slot=4),
            "catalyst": Catalyst(name="Fan Fire", requirement_description="Defeat 500"),
        }
        session.add_all(rows.values())
        session.commit()
        return {key: row.id for key, row in rows.items()}


def _weapon(components: dict | None = None, **overrides) -> dict:
    payload = {
        "name": "The Last Word",
        "rarity": 6,
        "weapon_type": "Hand Cannon",
        "slot": "Primary",
        "element": "Solar",
        "combat_style": "Impact",
        "dps": 1234.5,
    }
    if components:
        payload.update(
            intrinsic_trait_id=components["intrinsic"],
            origin_trait_id=components["origin"],
            perk1_id=components["perk3"],
            perk2_id=components["perk4"],
            catalyst_id=components["catalyst"],
        )
    payload.update(overrides)
    return payload


def _count(engine, model) -> int:
    with Session(engine) as session:
        return session.scalar(select(func.count()).select_from(model))


class TestWeaponSlug:
    def test_type_and_name_joined_by_double_dash(self):
        assert weapon_slug("The Last Word", "Hand Cannon") == "hand-cannon--the-last-word"

    def test_punctuation_stripped(self):
        assert weapon_slug("Ace of Spades!", "Hand Cannon") == "hand-cannon--ace-of-spades"


class TestCreateWeapon:
    def test_links_written_to_fixed_slots(self, db_engine, components):
        created = weapon_service.create_weapon(db_engine, _weapon(components))
        assert created["slug"] == "hand-cannon--the-last-word"

        weapon = weapon_service.get_weapon(db_engine, created["id"])
        assert weapon["rarityLabel"] == "Exotic"
        assert [(t["slot"], t["name"]) for t in weapon["traits"]] == [
            (1, "Adaptive Frame"), (2, "Veist Stinger"),
        ]
        assert [(p["slot"], p["name"]) for p in weapon["perks"]] == [(3, "Outlaw"), (4, "Rampage")]
        assert weapon["catalyst"]["name"] == "Fan Fire"
        assert weapon["dps"] == 1234.5

    def test_catalyst_ignored_below_exotic(self, db_engine, components):
        created = weapon_service.create_weapon(
            db_engine, _weapon(components, name="Palindrome", rarity=5)
        )
        assert weapon_service.get_weapon(db_engine, created["id"])["catalyst"] is None
        assert _count(db_engine, WeaponCatalyst) == 0

    @pytest.mark.parametrize("rarity", [2, 7])
    def test_rarity_out_of_range(self, db_engine, rarity):
        with pytest.raises(ValidationError, match="Rarity"):
            weapon_service.create_weapon(db_engine, _weapon(rarity=rarity))

    def test_required_fields(self, db_engine):
        with pytest.raises(ValidationError, match="weapon_type"):
            weapon_service.create_weapon(db_engine, _weapon(weapon_type=None))

    def test_duplicate_slug_rejected(self, db_engine):
        weapon_service.create_weapon(db_engine, _weapon())
        with pytest.raises(ValidationError, match="already exists"):
            weapon_service.create_weapon(db_engine, _weapon(name="The  Last Word"))

    def test_unknown_trait_rolls_back(self, db_engine):
        with pytest.raises(ValidationError):
            weapon_service.create_weapon(db_engine, _weapon(intrinsic_trait_id=999))
        assert weapon_service.list_weapons(db_engine)["pagination"]["total"] == 0

    def test_compatible_characters(self, db_engine, character_id):
        created = weapon_service.create_weapon(
            db_engine, _weapon(compatible_character_ids=[character_id, character_id])
        )
        weapon = weapon_service.get_weapon(db_engine, created["id"])
        assert [c["id"] for c in weapon["compatibleCharacters"]] == [character_id]


class TestUpdateWeapon:
    def test_links_rewritten(self, db_engine, components):
        created = weapon_service.create_weapon(db_engine, _weapon(components))
        updated = weapon_service.update_weapon(
            db_engine, created["id"],
            _weapon(name="Last Word", perk1_id=components["perk3"]),
        )
        assert updated["slug"] == "hand-cannon--last-word"

        weapon = weapon_service.get_weapon_by_slug(db_engine, "hand-cannon--last-word")
        assert weapon["traits"] == []
        assert [p["slot"] for p in weapon["perks"]] == [3]
        assert _count(db_engine, WeaponTrait) == 0
        assert _count(db_engine, WeaponPerkAssignment) == 1

    def test_missing_is_404(self, db_engine):
        with pytest.raises(NotFoundError):
            weapon_service.update_weapon(db_engine, 404, _weapon())


class TestListWeapons:
    def test_filters_and_pagination(self, db_engine):
        weapon_service.create_weapon(db_engine, _weapon())
        weapon_service.create_weapon(
            db_engine, _weapon(name="Gjallarhorn", weapon_type="Rocket Launcher", slot="Power")
        )
        weapon_service.create_weapon(db_engine, _weapon(name="Ace of Spades", element="Void"))

        page = weapon_service.list_weapons(db_engine, weapon_type="Hand Cannon", limit=1)
        assert page["pagination"] == {"page": 1, "limit": 1, "total": 2}
        assert len(page["data"]) == 1

        power = weapon_service.list_weapons(db_engine, slot="Power")
        assert [w["name"] for w in power["data"]] == ["Gjallarhorn"]

        void = weapon_service.list_weapons(db_engine, element="Void")
        assert [w["name"] for w in void["data"]] == ["Ace of Spades"]


class TestWeaponRoutes:
    def test_mutations_require_admin(self, client, member_headers):
        assert client.post("/api/weapons", json=_weapon()).status_code == 401
        assert client.post("/api/weapons", json=_weapon(), headers=member_headers).status_code == 401
        assert client.delete("/api/weapons/1", headers=member_headers).status_code == 401

    def test_admin_create_and_read_by_slug(self, client, admin_headers):
        resp = client.post(
            "/api/weapons",
            json={"name": "Gjallarhorn", "rarity": 6, "weaponType": "Rocket Launcher", "slot": "Power"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        slug = resp.json()["slug"]
        assert slug == "rocket-launcher--gjallarhorn"

        resp = client.get(f"/api/weapons/slug/{slug}")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Gjallarhorn"

        resp = client.get("/api/weapons?type=Rocket Launcher")
        assert resp.json()["pagination"]["total"] == 1

    def test_unknown_weapon_is_404(self, client):
        resp = client.get("/api/weapons/12345")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Weapon not found"}
