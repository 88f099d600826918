"""
lightbearer.constants — Shared Constants & Helpers
===================================================

Single source of truth for allow-lists, rarity rules and slug helpers.
Import from here instead of duplicating in services and routes.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Weapon catalog vocabularies
# ---------------------------------------------------------------------------
WEAPON_TYPES: tuple[str, ...] = (
    "Hand Cannon",
    "Auto Rifle",
    "Pulse Rifle",
    "Scout Rifle",
    "Sniper Rifle",
    "Shotgun",
    "Fusion Rifle",
    "Linear Fusion Rifle",
    "Submachine Gun",
    "Sidearm",
    "Machine Gun",
    "Rocket Launcher",
    "Grenade Launcher",
    "Light Grenade Launcher",
    "Auto Crossbow",
    "Sword",
)

ELEMENTS: tuple[str, ...] = ("Arc", "Solar", "Void")
COMBAT_STYLES: tuple[str, ...] = ("Piercing", "Impact", "Spread", "Rapid-Fire")
WEAPON_SLOTS: tuple[str, ...] = ("Primary", "Power")
MOD_CATEGORIES: tuple[str, ...] = ("Ammo", "Scope", "Magazine")
TRAIT_TYPES: tuple[str, ...] = ("intrinsic", "origin")

# Weapon rarity is stored as a star count
MIN_WEAPON_RARITY = 3
MAX_WEAPON_RARITY = 6
EXOTIC_WEAPON_RARITY = 6

WEAPON_RARITY_LABELS: dict[int, str] = {
    3: "Rare",
    4: "Legendary",
    5: "Mythic",
    6: "Exotic",
}

# Fixed slot positions on a weapon
INTRINSIC_TRAIT_SLOT = 1
ORIGIN_TRAIT_SLOT = 2
PERK_SLOTS: tuple[int, ...] = (3, 4)


# ---------------------------------------------------------------------------
# Build artifacts
# ---------------------------------------------------------------------------
ARTIFACT_RARITIES: tuple[str, ...] = ("Rare", "Legendary", "Mythic", "Exotic")
ARTIFACT_SLOTS: tuple[int, ...] = (1, 2, 3, 4)


def artifact_attribute_count(rarity: str | None) -> int:
    """Number of attribute rows an artifact of *rarity* carries.

    Exotic artifacts roll four attributes, every other rarity three.
    """
    return 4 if rarity == "Exotic" else 3


# ---------------------------------------------------------------------------
# Task tracker display labels
# ---------------------------------------------------------------------------
RESET_LABELS: dict[str, str] = {
    "DAILY_2AM_UTC": "Reset at 2AM UTC",
    "WEEKLY_MONDAY": "Reset on Monday",
    "FORTNIGHT": "Reset every two weeks",
    "MONTHLY": "Reset monthly",
    "SEASONAL": "Available this season",
}


# ---------------------------------------------------------------------------
# Leaderboard ingestion allow-lists
# ---------------------------------------------------------------------------
LEADERBOARD_ACTIVITIES: tuple[str, ...] = (
    "power",
    "expanse_eternity",
    "expanse_echoes",
    "shifting_gates",
    "acclaim_level",
    "fishing",
    "calamity_ops",
    "gauntlet_onslaught",
    "breakin",
    "menace_above",
    "issakis_tabernacle",
)

RANKING_TYPES: tuple[str, ...] = ("server", "regional")

API_KEY_PREFIX = "lb_"


# ---------------------------------------------------------------------------
# Profile cosmetics
# ---------------------------------------------------------------------------
NAME_EFFECTS: tuple[str, ...] = ("glow", "pulse", "rainbow")

HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


# ---------------------------------------------------------------------------
# Slug helpers
# ---------------------------------------------------------------------------
_NON_WORD = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def generate_slug(name: str) -> str:
    """Lower-case, hyphen-separated slug of *name*."""
    slug = _NON_WORD.sub("", name.lower())
    slug = _WHITESPACE.sub("-", slug.strip())
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


def weapon_slug(name: str, weapon_type: str) -> str:
    """Unique weapon slug: ``"<weapon-type>--<name>"``.

    >>> weapon_slug("The Last Word", "Hand Cannon")
    'hand-cannon--the-last-word'
    """
    type_slug = _WHITESPACE.sub("-", weapon_type.strip().lower())
    return f"{type_slug}--{generate_slug(name)}"
