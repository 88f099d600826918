"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of lightbearer.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from lightbearer.config import LightbearerConfig  # noqa: E402
from lightbearer.database.models import Character, User, Weapon  # noqa: E402

_jsonb_sqlite_registered = False

ADMIN_DISCORD_ID = "100000000000000001"
MEMBER_DISCORD_ID = "200000000000000002"

TEST_CONFIG = LightbearerConfig(
    community_name="Test Community",
    admin_discord_ids=(ADMIN_DISCORD_ID,),
)


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all Lightbearer tables.

    Uses StaticPool so the TestClient's worker threads share the same
    in-memory database.
    """
    from sqlalchemy.pool import StaticPool

    from lightbearer.database.models import Base

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


# ---------------------------------------------------------------------------
# Rows most tests need
# ---------------------------------------------------------------------------
def make_user(engine: Engine, name: str = "Guardian", discord_id: str | None = None) -> str:
    """Insert a :class:`User` and return its id."""
    with Session(engine) as session:
        user = User(name=name, discord_id=discord_id)
        session.add(user)
        session.commit()
        return user.id


def make_character(engine: Engine, name: str = "Ikora", character_id: str | None = None) -> str:
    with Session(engine) as session:
        character = Character(name=name)
        if character_id:
            character.id = character_id
        session.add(character)
        session.commit()
        return character.id


def make_weapon(
    engine: Engine,
    name: str = "The Last Word",
    weapon_type: str = "Hand Cannon",
    rarity: int = 6,
) -> int:
    from lightbearer.constants import weapon_slug

    with Session(engine) as session:
        weapon = Weapon(
            name=name,
            slug=weapon_slug(name, weapon_type),
            rarity=rarity,
            weapon_type=weapon_type,
            slot="Primary",
        )
        session.add(weapon)
        session.commit()
        return weapon.id


@pytest.fixture
def user_id(db_engine: Engine) -> str:
    return make_user(db_engine, "Member", MEMBER_DISCORD_ID)


@pytest.fixture
def other_user_id(db_engine: Engine) -> str:
    return make_user(db_engine, "Other", "300000000000000003")


@pytest.fixture
def admin_id(db_engine: Engine) -> str:
    return make_user(db_engine, "Admin", ADMIN_DISCORD_ID)


@pytest.fixture
def character_id(db_engine: Engine) -> str:
    return make_character(db_engine)


# ---------------------------------------------------------------------------
# Tokens & API client
# ---------------------------------------------------------------------------
def make_session_token(
    user_id: str, discord_id: str | None = None, name: str = "Guardian"
) -> str:
    """Create a session JWT.  Usable as a factory in any test."""
    from lightbearer.api.deps import create_session_token

    return create_session_token(user_id, name=name, discord_id=discord_id)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def member_headers(user_id: str) -> dict:
    return auth(make_session_token(user_id, MEMBER_DISCORD_ID, "Member"))


@pytest.fixture
def other_headers(other_user_id: str) -> dict:
    return auth(make_session_token(other_user_id, "300000000000000003", "Other"))


@pytest.fixture
def admin_headers(admin_id: str) -> dict:
    return auth(make_session_token(admin_id, ADMIN_DISCORD_ID, "Admin"))


@pytest.fixture
def client(db_engine: Engine):
    """FastAPI TestClient bound to the in-memory engine and test config.

    Overrides cover both the dependency objects the routers were built
    with (re-exported by ``lightbearer.api.main``) and whatever
    ``lightbearer.api.deps`` exports right now.
    """
    from fastapi.testclient import TestClient

    from lightbearer.api import deps, main

    overrides = main.app.dependency_overrides
    for get_engine in {main.get_engine, deps.get_engine}:
        overrides[get_engine] = lambda: db_engine
    for get_config in {main.get_config, deps.get_config}:
        overrides[get_config] = lambda: TEST_CONFIG
    try:
        yield TestClient(main.app, raise_server_exceptions=False)
    finally:
        overrides.clear()
