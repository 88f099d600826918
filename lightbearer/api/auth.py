"""
lightbearer.api.auth — Discord OAuth2 + session cookie
========================================================

``/api/auth/login`` sends the browser to Discord; ``/api/auth/callback``
exchanges the code, upserts the :class:`User` keyed by Discord id and sets
the ``lb_session`` cookie before redirecting back to the frontend.
"""

from __future__ import annotations

import logging
import os
import secrets
from datetime import UTC, datetime, timedelta
from typing import Annotated
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import Engine, delete, select

from lightbearer.api.deps import (
    SESSION_COOKIE,
    Principal,
    create_session_token,
    get_config,
    get_current_user,
    get_engine,
    is_admin,
)
from lightbearer.config import LightbearerConfig
from lightbearer.database.engine import get_session
from lightbearer.database.models import OAuthState, User
from lightbearer.services.serialize import user_summary

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])

DISCORD_API = "https://discord.com/api/v10"
DISCORD_CDN = "https://cdn.discordapp.com"
OAUTH_SCOPE = "identify email"
OAUTH_STATE_TTL_SECONDS = 600


def _oauth_env() -> tuple[str, str, str, str]:
    """Return required OAuth env vars or raise a clear 500."""
    client_id = os.getenv("DISCORD_CLIENT_ID", "").strip()
    client_secret = os.getenv("DISCORD_CLIENT_SECRET", "").strip()
    redirect_uri = os.getenv("DISCORD_REDIRECT_URI", "").strip()
    frontend_url = os.getenv("FRONTEND_URL", "").strip()

    missing = [
        name for name, value in (
            ("DISCORD_CLIENT_ID", client_id),
            ("DISCORD_CLIENT_SECRET", client_secret),
            ("DISCORD_REDIRECT_URI", redirect_uri),
            ("FRONTEND_URL", frontend_url),
        )
        if not value
    ]
    if missing:
        raise HTTPException(
            status_code=500,
            detail="Discord OAuth is not configured: missing " + ", ".join(missing),
        )

    return client_id, client_secret, redirect_uri, frontend_url.rstrip("/")


def _store_oauth_state(engine: Engine, state: str) -> None:
    """Persist an OAuth state token and prune stale entries."""
    cutoff = datetime.now(UTC) - timedelta(seconds=OAUTH_STATE_TTL_SECONDS)
    with get_session(engine) as session:
        session.execute(delete(OAuthState).where(OAuthState.created_at < cutoff))
        session.add(OAuthState(state=state))


def _consume_oauth_state(engine: Engine, state: str) -> bool:
    """Consume a one-time OAuth state token if valid and unexpired."""
    cutoff = datetime.now(UTC) - timedelta(seconds=OAUTH_STATE_TTL_SECONDS)
    with get_session(engine) as session:
        session.execute(delete(OAuthState).where(OAuthState.created_at < cutoff))
        row = session.get(OAuthState, state)
        if row is None:
            return False
        session.delete(row)
        return True


def _avatar_url(info: dict) -> str | None:
    if not info.get("avatar"):
        return None
    return f"{DISCORD_CDN}/avatars/{info['id']}/{info['avatar']}.png"


def upsert_discord_user(engine: Engine, info: dict) -> User:
    """Create or refresh the member row for a Discord ``/users/@me`` payload."""
    discord_id = str(info["id"])
    with get_session(engine) as session:
        user = session.scalars(
            select(User).where(User.discord_id == discord_id)
        ).one_or_none()
        if user is None:
            user = User(discord_id=discord_id)
            session.add(user)
            logger.info("New member signed up via Discord (%s)", discord_id)
        user.name = info.get("global_name") or info.get("username")
        user.image = _avatar_url(info)
        if info.get("email"):
            user.email = info["email"]
        session.flush()
        session.expunge(user)
        return user


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@router.get("/login")
def login(engine: Annotated[Engine, Depends(get_engine)]):
    """Redirect to the Discord OAuth2 consent screen."""
    client_id, _, redirect_uri, _ = _oauth_env()

    state = secrets.token_urlsafe(32)
    _store_oauth_state(engine, state)

    query = urlencode(
        {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": OAUTH_SCOPE,
            "state": state,
        }
    )
    return RedirectResponse(f"https://discord.com/oauth2/authorize?{query}")


@router.get("/callback")
def callback(
    code: str,
    state: str,
    cfg: Annotated[LightbearerConfig, Depends(get_config)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    """Exchange the OAuth code, upsert the member and set the session cookie."""
    client_id, client_secret, redirect_uri, frontend_url = _oauth_env()

    if not _consume_oauth_state(engine, state):
        raise HTTPException(400, "Invalid or expired OAuth state")

    transport = httpx.HTTPTransport(retries=1)
    with httpx.Client(timeout=10, transport=transport) as client:
        token_resp = client.post(
            f"{DISCORD_API}/oauth2/token",
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
                "client_id": client_id,
                "client_secret": client_secret,
                "scope": OAUTH_SCOPE,
            },
        )
        if token_resp.status_code != 200:
            raise HTTPException(400, "OAuth token exchange failed")

        access_token = token_resp.json().get("access_token")
        if not access_token:
            raise HTTPException(400, "No access token returned")

        user_resp = client.get(
            f"{DISCORD_API}/users/@me",
            headers={"Authorization": f"Bearer {access_token}"},
        )

    if user_resp.status_code != 200:
        raise HTTPException(400, "Failed to fetch Discord user")

    user = upsert_discord_user(engine, user_resp.json())
    token = create_session_token(
        user.id,
        name=user.name,
        discord_id=user.discord_id,
        ttl_hours=cfg.session_ttl_hours,
    )

    response = RedirectResponse(frontend_url)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=cfg.session_ttl_hours * 3600,
        httponly=True,
        samesite="lax",
        secure=frontend_url.startswith("https://"),
    )
    return response


@router.post("/logout")
def logout():
    response = JSONResponse({"success": True})
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/me")
def me(
    user: Annotated[Principal, Depends(get_current_user)],
    cfg: Annotated[LightbearerConfig, Depends(get_config)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    """Return the signed-in member's profile."""
    with get_session(engine) as session:
        row = session.get(User, user.id)
        profile = user_summary(row) or {"id": user.id, "name": user.name, "image": None}
    return {**profile, "discordId": user.discord_id, "isAdmin": is_admin(user, cfg)}
