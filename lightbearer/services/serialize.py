"""Small JSON shaping helpers shared by the service modules."""

from __future__ import annotations

from datetime import datetime

from lightbearer.database.models import User


def iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def user_summary(user: User | None) -> dict | None:
    """Public author card: id, display name and avatar only."""
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "image": user.image}
