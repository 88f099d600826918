"""
lightbearer.services.achievement_service — Badges and awards
=============================================================

Admins define :class:`Achievement` badges (a unique ``key`` plus display
text) and grant them to members by hand.  A member holds each badge at
most once; the ``(user_id, achievement_id)`` primary key enforces it.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.database.engine import get_session
from lightbearer.database.models import Achievement, User, UserAchievement
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.serialize import iso

logger = logging.getLogger(__name__)


def achievement_dict(achievement: Achievement) -> dict:
    return {
        "id": achievement.id,
        "key": achievement.key,
        "name": achievement.name,
        "description": achievement.description,
        "icon": achievement.icon,
        "createdAt": iso(achievement.created_at),
    }


def _earned_dict(earned: UserAchievement) -> dict:
    return {
        "userId": earned.user_id,
        "achievementId": earned.achievement_id,
        "earnedAt": iso(earned.earned_at),
        "grantedBy": earned.granted_by,
        "achievement": achievement_dict(earned.achievement),
    }


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
def list_achievements(engine: Engine) -> list[dict]:
    with Session(engine) as session:
        rows = session.scalars(select(Achievement).order_by(Achievement.name)).all()
        return [achievement_dict(a) for a in rows]


def create_achievement(engine: Engine, payload: dict[str, Any]) -> dict:
    key, name, description = payload.get("key"), payload.get("name"), payload.get("description")
    if not key or not name or not description:
        raise ValidationError("Key, name, and description are required")

    with get_session(engine) as session:
        taken = session.scalars(
            select(Achievement.id).where(Achievement.key == key)
        ).first()
        if taken is not None:
            raise ValidationError(f"Achievement key '{key}' already exists")
        achievement = Achievement(
            key=key,
            name=name,
            description=description,
            icon=payload.get("icon") or None,
        )
        session.add(achievement)
        session.flush()
        result = achievement_dict(achievement)

    logger.info("Achievement %s created", key)
    return result


# ---------------------------------------------------------------------------
# Awards
# ---------------------------------------------------------------------------
def grant_achievement(
    engine: Engine,
    user_id: str | None,
    achievement_id: str | None,
    *,
    granted_by: str | None = None,
) -> dict:
    """Award *achievement_id* to *user_id*; a second grant is rejected."""
    if not user_id or not achievement_id:
        raise ValidationError("userId and achievementId are required")

    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        achievement = session.get(Achievement, achievement_id)
        if achievement is None:
            raise NotFoundError("Achievement not found")
        if session.get(UserAchievement, (user_id, achievement_id)) is not None:
            raise ValidationError("User already has this achievement")

        earned = UserAchievement(
            user_id=user_id, achievement_id=achievement_id, granted_by=granted_by
        )
        session.add(earned)
        session.flush()
        result = _earned_dict(earned)
        result["user"] = {"id": user.id, "name": user.name}

    logger.info("Achievement %s granted to user %s by %s", achievement.key, user_id, granted_by)
    return result


def list_user_achievements(engine: Engine, user_id: str) -> list[dict]:
    """*user_id*'s badges, most recently earned first."""
    stmt = (
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .options(selectinload(UserAchievement.achievement))
        .order_by(UserAchievement.earned_at.desc(), UserAchievement.achievement_id)
    )
    with Session(engine) as session:
        return [_earned_dict(e) for e in session.scalars(stmt).all()]
