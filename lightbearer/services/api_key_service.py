"""
lightbearer.services.api_key_service — Static bearer keys
==========================================================

Keys are ``lb_`` + 64 hex characters drawn from :func:`secrets.token_hex`.
Authentication is an equality lookup on the key column; ``is_active`` is
the only revocation mechanism and ``last_used_at`` is stamped on every
accepted call.
"""

from __future__ import annotations

import logging
import secrets
from datetime import UTC, datetime

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from lightbearer.constants import API_KEY_PREFIX
from lightbearer.database.engine import get_session
from lightbearer.database.models import ApiKey
from lightbearer.services.errors import NotFoundError, UnauthorizedError, ValidationError
from lightbearer.services.serialize import iso

logger = logging.getLogger(__name__)


def generate_key() -> str:
    return f"{API_KEY_PREFIX}{secrets.token_hex(32)}"


def _key_dict(key: ApiKey) -> dict:
    return {
        "id": key.id,
        "key": key.key,
        "name": key.name,
        "isActive": key.is_active,
        "lastUsedAt": iso(key.last_used_at),
        "createdAt": iso(key.created_at),
    }


def list_keys(engine: Engine) -> list[dict]:
    with Session(engine) as session:
        rows = session.scalars(select(ApiKey).order_by(ApiKey.created_at.desc())).all()
        return [_key_dict(k) for k in rows]


def create_key(engine: Engine, name: str | None) -> dict:
    if not name or not isinstance(name, str):
        raise ValidationError("Name is required and must be a string")
    with get_session(engine) as session:
        key = ApiKey(key=generate_key(), name=name, is_active=True)
        session.add(key)
        session.flush()
        result = _key_dict(key)

    logger.info("API key %s created (%s)", result["id"], name)
    return result


def set_key_active(engine: Engine, key_id: str | None, is_active) -> dict:
    if not key_id or not isinstance(is_active, bool):
        raise ValidationError("ID and isActive (boolean) are required")
    with get_session(engine) as session:
        key = session.get(ApiKey, key_id)
        if key is None:
            raise NotFoundError("API key not found")
        key.is_active = is_active
        session.flush()
        result = _key_dict(key)

    logger.info("API key %s %s", key_id, "activated" if is_active else "revoked")
    return result


def delete_key(engine: Engine, key_id: str | None) -> dict:
    if not key_id:
        raise ValidationError("ID is required")
    with get_session(engine) as session:
        key = session.get(ApiKey, key_id)
        if key is None:
            raise NotFoundError("API key not found")
        session.delete(key)
    return {"success": True}


def authenticate(engine: Engine, raw_key: str) -> str:
    """Return the id of the active key equal to *raw_key* and stamp its use.

    Raises :class:`UnauthorizedError` for an unknown or revoked key.  The
    ``last_used_at`` stamp is committed on its own, before the caller's
    request is validated any further.
    """
    with get_session(engine) as session:
        key = session.scalars(select(ApiKey).where(ApiKey.key == raw_key)).one_or_none()
        if key is None or not key.is_active:
            logger.warning("Rejected leaderboard submission: invalid or inactive API key")
            raise UnauthorizedError("Invalid or inactive API key")
        key.last_used_at = datetime.now(UTC)
        return key.id
