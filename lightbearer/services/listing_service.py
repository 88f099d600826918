"""
lightbearer.services.listing_service — LFG board & clan recruitment
====================================================================

Both listing kinds are owner-authored rows with an ``active`` flag that
only the author may flip.  ``LFGPost.expires_at`` is stored for display;
nothing deactivates a post when it passes.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.database.engine import get_session
from lightbearer.database.models import ClanRecruitment, LFGPost
from lightbearer.services.errors import ForbiddenError, NotFoundError, ValidationError
from lightbearer.services.serialize import iso, user_summary


def _lfg_dict(post: LFGPost) -> dict:
    return {
        "id": post.id,
        "activity": post.activity,
        "description": post.description,
        "playerCount": post.player_count,
        "region": post.region,
        "active": post.active,
        "expiresAt": iso(post.expires_at),
        "userId": post.user_id,
        "createdAt": iso(post.created_at),
        "user": user_summary(post.user),
    }


def _clan_dict(post: ClanRecruitment) -> dict:
    return {
        "id": post.id,
        "clanName": post.clan_name,
        "description": post.description,
        "requirements": post.requirements,
        "contactInfo": post.contact_info,
        "active": post.active,
        "userId": post.user_id,
        "createdAt": iso(post.created_at),
        "user": user_summary(post.user),
    }


def _list(engine: Engine, model, serializer, active_only: bool) -> list[dict]:
    stmt = select(model).options(selectinload(model.user))
    if active_only:
        stmt = stmt.where(model.active.is_(True))
    stmt = stmt.order_by(model.created_at.desc())
    with Session(engine) as session:
        return [serializer(row) for row in session.scalars(stmt).all()]


def _set_active(engine: Engine, model, serializer, row_id, user_id, active) -> dict:
    if not row_id or not isinstance(active, bool):
        raise ValidationError("id and active (boolean) are required")
    with get_session(engine) as session:
        row = session.get(model, row_id)
        if row is None:
            raise NotFoundError("Post not found")
        if row.user_id != user_id:
            raise ForbiddenError("Not authorized")
        row.active = active
        session.flush()
        return serializer(row)


# ---------------------------------------------------------------------------
# LFG
# ---------------------------------------------------------------------------
def list_lfg(engine: Engine, *, active_only: bool = True) -> list[dict]:
    return _list(engine, LFGPost, _lfg_dict, active_only)


def create_lfg(
    engine: Engine,
    user_id: str,
    *,
    activity: str | None,
    description: str | None,
    player_count: int | None,
    region: str | None = None,
    expires_in_minutes: int | None = None,
) -> dict:
    if not activity or not description or not player_count:
        raise ValidationError("Activity, description, and player count are required")
    if player_count < 1:
        raise ValidationError("Player count must be positive")

    expires_at = None
    if expires_in_minutes:
        expires_at = datetime.now(UTC) + timedelta(minutes=expires_in_minutes)

    with get_session(engine) as session:
        post = LFGPost(
            activity=activity,
            description=description,
            player_count=player_count,
            region=region or None,
            expires_at=expires_at,
            user_id=user_id,
        )
        session.add(post)
        session.flush()
        return _lfg_dict(post)


def set_lfg_active(engine: Engine, post_id: str, user_id: str, active: bool) -> dict:
    return _set_active(engine, LFGPost, _lfg_dict, post_id, user_id, active)


# ---------------------------------------------------------------------------
# Clan recruitment
# ---------------------------------------------------------------------------
def list_clans(engine: Engine, *, active_only: bool = True) -> list[dict]:
    return _list(engine, ClanRecruitment, _clan_dict, active_only)


def create_clan(
    engine: Engine,
    user_id: str,
    *,
    clan_name: str | None,
    description: str | None,
    contact_info: str | None,
    requirements: str | None = None,
) -> dict:
    if not clan_name or not description or not contact_info:
        raise ValidationError("Clan name, description, and contact info are required")

    with get_session(engine) as session:
        post = ClanRecruitment(
            clan_name=clan_name,
            description=description,
            requirements=requirements or None,
            contact_info=contact_info,
            user_id=user_id,
        )
        session.add(post)
        session.flush()
        return _clan_dict(post)


def set_clan_active(engine: Engine, post_id: str, user_id: str, active: bool) -> dict:
    return _set_active(engine, ClanRecruitment, _clan_dict, post_id, user_id, active)
