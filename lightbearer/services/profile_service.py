"""
lightbearer.services.profile_service — Member profile cosmetics
================================================================

Every member has at most one :class:`UserProfile`, created on first read
or write.  Members edit their own title, name effect and colour; admins
can set the name effect and colour for anyone.

Only the keys present in a change set are written, so a partial update
leaves the other fields alone.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from lightbearer.constants import HEX_COLOR, NAME_EFFECTS
from lightbearer.database.engine import get_session
from lightbearer.database.models import User, UserProfile
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.serialize import iso, user_summary

MEMBER_FIELDS = ("display_title", "name_effect", "custom_color")
ADMIN_EFFECT_FIELDS = ("name_effect", "custom_color")


def profile_dict(profile: UserProfile) -> dict:
    return {
        "id": profile.id,
        "userId": profile.user_id,
        "displayTitle": profile.display_title,
        "nameEffect": profile.name_effect,
        "customColor": profile.custom_color,
        "createdAt": iso(profile.created_at),
        "updatedAt": iso(profile.updated_at),
        "user": user_summary(profile.user),
    }


def _validate(changes: dict[str, Any]) -> dict[str, Any]:
    cleaned = {k: (v or None) for k, v in changes.items()}
    effect = cleaned.get("name_effect")
    if effect is not None and effect not in NAME_EFFECTS:
        raise ValidationError(f"nameEffect must be one of: {', '.join(NAME_EFFECTS)}")
    color = cleaned.get("custom_color")
    if color is not None and not HEX_COLOR.match(color):
        raise ValidationError("customColor must be a #RRGGBB hex colour")
    return cleaned


def _get_or_create(session: Session, user_id: str) -> UserProfile:
    if session.get(User, user_id) is None:
        raise NotFoundError("User not found")
    profile = session.scalars(
        select(UserProfile).where(UserProfile.user_id == user_id)
    ).one_or_none()
    if profile is None:
        profile = UserProfile(user_id=user_id)
        session.add(profile)
        session.flush()
    return profile


def _apply(engine: Engine, user_id: str, changes: dict[str, Any]) -> dict:
    cleaned = _validate(changes)
    with get_session(engine) as session:
        profile = _get_or_create(session, user_id)
        for field, value in cleaned.items():
            setattr(profile, field, value)
        session.flush()
        session.refresh(profile)
        return profile_dict(profile)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def get_profile(engine: Engine, user_id: str | None) -> dict:
    """Return *user_id*'s profile, creating an empty one on first read."""
    if not user_id:
        raise ValidationError("userId is required")
    with get_session(engine) as session:
        return profile_dict(_get_or_create(session, user_id))


def update_own_profile(engine: Engine, user_id: str, changes: dict[str, Any]) -> dict:
    return _apply(
        engine, user_id, {k: v for k, v in changes.items() if k in MEMBER_FIELDS}
    )


def set_user_effects(engine: Engine, user_id: str | None, changes: dict[str, Any]) -> dict:
    """Admin override of another member's name effect and colour."""
    if not user_id:
        raise ValidationError("userId is required")
    return _apply(
        engine, user_id, {k: v for k, v in changes.items() if k in ADMIN_EFFECT_FIELDS}
    )
