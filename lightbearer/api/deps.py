"""
lightbearer.api.deps — FastAPI dependency injection
=====================================================

The session token is a PyJWT HS256 token carrying the member's user id,
display name and Discord id.  It is read from the ``lb_session`` cookie
(browser) or an ``Authorization: Bearer`` header (scripts, tests).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Cookie, Depends, Header, HTTPException, status
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine

from lightbearer.config import LightbearerConfig, load_config
from lightbearer.database.engine import create_db_engine

_WEAK_SECRETS = frozenset({
    "lightbearer-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"
SESSION_COOKIE = "lb_session"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> LightbearerConfig:
    return load_config()


# ---------------------------------------------------------------------------
# Session tokens
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Principal:
    """The signed-in member a request acts as."""

    id: str
    name: str | None = None
    discord_id: str | None = None


def create_session_token(
    user_id: str,
    *,
    name: str | None = None,
    discord_id: str | None = None,
    ttl_hours: int = 24 * 30,
) -> str:
    payload = {
        "sub": user_id,
        "name": name,
        "discord_id": discord_id,
        "exp": datetime.now(UTC) + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def _decode(token: str) -> Principal | None:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        return None
    if not payload.get("sub"):
        return None
    return Principal(
        id=payload["sub"],
        name=payload.get("name"),
        discord_id=payload.get("discord_id"),
    )


def get_optional_user(
    lb_session: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> Principal | None:
    """Resolve the caller, or ``None`` for anonymous / invalid tokens."""
    token = lb_session
    if authorization and authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1]
    if not token:
        return None
    return _decode(token)


def get_current_user(
    user: Annotated[Principal | None, Depends(get_optional_user)],
) -> Principal:
    """Require a signed-in member. Raises 401 otherwise."""
    if user is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
    return user


# ---------------------------------------------------------------------------
# Admin gate
# ---------------------------------------------------------------------------
def is_admin(user: Principal | None, cfg: LightbearerConfig) -> bool:
    return (
        user is not None
        and user.discord_id is not None
        and user.discord_id in cfg.admin_discord_ids
    )


def get_current_admin(
    user: Annotated[Principal | None, Depends(get_optional_user)],
    cfg: Annotated[LightbearerConfig, Depends(get_config)],
) -> Principal:
    """Require an admin. Raises 401 for anyone else, signed in or not."""
    if not is_admin(user, cfg):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Unauthorized")
    return user
