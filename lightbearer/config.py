"""
lightbearer.config — YAML Configuration Loader
===============================================

Reads ``config.yaml`` for site-level settings (community identity, the
admin allow-list, session lifetime, paging defaults).  Secrets and
infrastructure URLs stay in the environment (``.env``).

Usage::

    from lightbearer.config import load_config

    cfg = load_config()              # reads ./config.yaml by default
    print(cfg.community_name)        # "Lightbearer"
    print(cfg.admin_discord_ids)     # ("989576730165518437",)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class LightbearerConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    community_name: str

    # Admin gate — Discord account ids allowed into admin endpoints
    admin_discord_ids: tuple[str, ...]

    # Sessions
    session_ttl_hours: int = 24 * 30

    # Listing defaults
    default_page_size: int = 20


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> LightbearerConfig:
    """Read *path* and return a :class:`LightbearerConfig` instance.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    KeyError
        If a required key is missing from the YAML file.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    return LightbearerConfig(
        community_name=raw["community_name"],
        # Snowflakes are kept as strings; YAML may hand us ints
        admin_discord_ids=tuple(str(i) for i in raw["admin_discord_ids"] or ()),
        session_ttl_hours=int(raw.get("session_ttl_hours", 24 * 30)),
        default_page_size=int(raw.get("default_page_size", 20)),
    )
