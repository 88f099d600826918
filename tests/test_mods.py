"""
tests/test_mods.py — Weapon Mods & Component Catalogs
======================================================
Mod filter composition, mod creation with junction rows, and the generic
perk / trait / catalyst / mod-attribute CRUD.
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from lightbearer.database.models import ModAttribute, ModPerkUpgrade, ModRarity, WeaponMod, WeaponPerk
from lightbearer.services import catalog_service, mod_service
from lightbearer.services.errors import NotFoundError, ValidationError


@pytest.fixture
def mod_refs(db_engine) -> dict:
    with Session(db_engine) as session:
        rows = {
            "rarity": ModRarity(name="Legendary", main_attribute_count=1, random_attribute_count=2),
            "handling": ModAttribute(name="Handling", min_stat_bonus=5, max_stat_bonus=10),
            "range": ModAttribute(name="Range", min_stat_bonus=2, max_stat_bonus=6),
            "perk": WeaponPerk(name="Outlaw", slot=3),
        }
        session.add_all(rows.values())
        session.commit()
        return {key: row.id for key, row in rows.items()}


def _seed_mods(engine) -> None:
    for name, category, style in (
        ("Extended Mag", "Magazine", "Impact"),
        ("Armor Piercing", "Ammo", "Piercing"),
        ("Steady Scope", "Scope", None),
        ("Alloy Mag", "Magazine", None),
    ):
        mod_service.create_mod(engine, {"name": name, "category": category, "combat_style": style})


class TestModFilters:
    def test_no_filters_returns_all_by_name(self, db_engine):
        _seed_mods(db_engine)
        names = [m["name"] for m in mod_service.list_mods(db_engine)]
        assert names == ["Alloy Mag", "Armor Piercing", "Extended Mag", "Steady Scope"]

    def test_category_only(self, db_engine):
        _seed_mods(db_engine)
        names = [m["name"] for m in mod_service.list_mods(db_engine, category="Magazine")]
        assert names == ["Alloy Mag", "Extended Mag"]

    def test_combat_style_includes_style_agnostic(self, db_engine):
        _seed_mods(db_engine)
        names = [m["name"] for m in mod_service.list_mods(db_engine, combat_style="Impact")]
        assert names == ["Alloy Mag", "Extended Mag", "Steady Scope"]

    def test_both_filters_compose(self, db_engine):
        _seed_mods(db_engine)
        names = [
            m["name"]
            for m in mod_service.list_mods(db_engine, category="Magazine", combat_style="Piercing")
        ]
        assert names == ["Alloy Mag"]

    def test_hostile_filter_value_is_just_a_value(self, db_engine):
        _seed_mods(db_engine)
        assert mod_service.list_mods(db_engine, category="Ammo' OR '1'='1") == []


class TestCreateMod:
    def test_junction_rows_written(self, db_engine, mod_refs):
        created = mod_service.create_mod(db_engine, {
            "name": "Precision Scope",
            "category": "Scope",
            "rarity_id": mod_refs["rarity"],
            "main_attribute_ids": [mod_refs["handling"]],
            "random_attribute_ids": [mod_refs["handling"], mod_refs["range"]],
            "upgradable_perk_ids": [mod_refs["perk"]],
            "perk_upgrade_descriptions": {str(mod_refs["perk"]): "Reload faster"},
        })

        mod = mod_service.get_mod(db_engine, created["id"])
        assert mod["rarity"]["name"] == "Legendary"
        assert [a["name"] for a in mod["mainAttributes"]] == ["Handling"]
        assert [a["name"] for a in mod["randomAttributes"]] == ["Handling", "Range"]
        assert mod["upgradablePerks"] == [
            {"id": mod_refs["perk"], "name": "Outlaw", "upgradeDescription": "Reload faster"}
        ]

    def test_unknown_attribute_rolls_back(self, db_engine):
        with pytest.raises(ValidationError):
            mod_service.create_mod(
                db_engine, {"name": "Broken", "category": "Ammo", "main_attribute_ids": [42]}
            )
        with Session(db_engine) as session:
            assert session.scalar(select(func.count(WeaponMod.id))) == 0

    def test_invalid_category(self, db_engine):
        with pytest.raises(ValidationError):
            mod_service.create_mod(db_engine, {"name": "X", "category": "Barrel"})

    def test_delete_removes_upgrades(self, db_engine, mod_refs):
        created = mod_service.create_mod(db_engine, {
            "name": "Scope", "category": "Scope", "upgradable_perk_ids": [mod_refs["perk"]],
        })
        mod_service.delete_mod(db_engine, created["id"])
        with Session(db_engine) as session:
            assert session.scalar(select(func.count()).select_from(ModPerkUpgrade)) == 0
        with pytest.raises(NotFoundError):
            mod_service.get_mod(db_engine, created["id"])


class TestCatalogCrud:
    def test_perk_lifecycle(self, db_engine):
        perks = catalog_service.PERKS
        created = catalog_service.create_item(
            db_engine, perks, {"name": "Rampage", "slot": 4, "effect": "Damage stacks"}
        )["perk"]
        assert created["slot"] == 4

        updated = catalog_service.update_item(
            db_engine, perks, created["id"], {"name": "Rampage", "slot": 3}
        )["perk"]
        assert updated["slot"] == 3
        assert updated["effect"] is None

        assert catalog_service.list_items(db_engine, perks, slot=4) == {"perks": []}
        assert len(catalog_service.list_items(db_engine, perks, slot=3)["perks"]) == 1

        catalog_service.delete_item(db_engine, perks, created["id"])
        with pytest.raises(NotFoundError, match="Perk not found"):
            catalog_service.get_item(db_engine, perks, created["id"])

    def test_perk_slot_validated(self, db_engine):
        with pytest.raises(ValidationError):
            catalog_service.create_item(db_engine, catalog_service.PERKS, {"name": "X", "slot": 1})

    def test_trait_type_validated(self, db_engine):
        with pytest.raises(ValidationError):
            catalog_service.create_item(
                db_engine, catalog_service.TRAITS, {"name": "X", "type": "exotic"}
            )

    def test_attribute_bounds_validated(self, db_engine):
        with pytest.raises(ValidationError):
            catalog_service.create_item(
                db_engine,
                catalog_service.MOD_ATTRIBUTES,
                {"name": "Range", "min_stat_bonus": 9, "max_stat_bonus": 1},
            )

    def test_character_names_unique(self, db_engine):
        catalog_service.create_character(db_engine, name="Ikora")
        with pytest.raises(ValidationError):
            catalog_service.create_character(db_engine, name="Ikora")


class TestCatalogRoutes:
    @pytest.mark.parametrize(
        "path", ["/api/perks", "/api/traits", "/api/catalysts", "/api/mod-attributes", "/api/mods"]
    )
    def test_create_requires_admin(self, client, member_headers, path):
        assert client.post(path, json={"name": "X"}).status_code == 401
        assert client.post(path, json={"name": "X"}, headers=member_headers).status_code == 401

    def test_admin_creates_catalyst(self, client, admin_headers):
        resp = client.post(
            "/api/catalysts",
            json={"name": "Fan Fire", "requirementDescription": "Defeat 500 enemies"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        catalyst = resp.json()["catalyst"]
        assert catalyst["requirementDescription"] == "Defeat 500 enemies"

        listed = client.get("/api/catalysts").json()["catalysts"]
        assert [c["name"] for c in listed] == ["Fan Fire"]

    def test_mod_list_query_params(self, client, admin_headers):
        for body in (
            {"name": "Extended Mag", "category": "Magazine", "combatStyle": "Impact"},
            {"name": "Alloy Mag", "category": "Magazine"},
        ):
            assert client.post("/api/mods", json=body, headers=admin_headers).status_code == 201

        resp = client.get("/api/mods?category=Magazine&combatStyle=Piercing")
        assert [m["name"] for m in resp.json()["mods"]] == ["Alloy Mag"]

    def test_characters_public_read_admin_write(self, client, member_headers, admin_headers):
        assert client.post(
            "/api/characters", json={"name": "Zavala"}, headers=member_headers
        ).status_code == 401
        assert client.post(
            "/api/characters", json={"name": "Zavala"}, headers=admin_headers
        ).status_code == 200
        assert [c["name"] for c in client.get("/api/characters").json()] == ["Zavala"]

    def test_mod_rarities_listed(self, client, mod_refs):
        resp = client.get("/api/mod-rarities")
        assert [r["name"] for r in resp.json()["rarities"]] == ["Legendary"]
