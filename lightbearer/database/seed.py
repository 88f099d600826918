"""
lightbearer.database.seed — Default Task Catalogue
===================================================

The baseline task templates every tracker starts with: daily, weekly,
fortnightly, monthly and seasonal chores.

Idempotent — only inserts titles that don't already exist.  Templates
edited or added by admins are never overwritten.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from lightbearer.database.models import ResetType, TaskCategory, TaskTemplate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default task catalogue
# ---------------------------------------------------------------------------
_DAILY = (TaskCategory.DAILY, ResetType.DAILY_2AM_UTC)
_WEEKLY = (TaskCategory.WEEKLY, ResetType.WEEKLY_MONDAY)
_FORTNIGHT = (TaskCategory.FORTNIGHT, ResetType.FORTNIGHT)
_MONTHLY = (TaskCategory.MONTHLY, ResetType.MONTHLY)
_SEASONAL = (TaskCategory.SEASONAL, ResetType.SEASONAL)

DEFAULT_TASKS: list[tuple[str, str | None, tuple[TaskCategory, ResetType]]] = [
    ("Daily Commissions", None, _DAILY),
    ("Haven Cat Gift", None, _DAILY),
    ("PVP Card Game Chest Energy (5)", None, _DAILY),
    ("PVE Card Game Chest Energy (10, 3 high value)", None, _DAILY),
    ("Sparrow Racing Chest Energy (5)", None, _DAILY),
    ("Iron Commander Tickets (3)", None, _DAILY),
    ("Talk to Wu Ming (5 Black Market Favor)", None, _DAILY),
    ("Daily Bounties", None, _DAILY),
    ("Buy cheap Seasonal Engram", None, _DAILY),
    ("Complete daily Pack Quests", None, _DAILY),
    ("Complete daily Mentor tasks", None, _DAILY),

    ("Use your 3 Challenger Keys", None, _WEEKLY),
    ("Use your free Shifting Gates Run", None, _WEEKLY),
    ("Weekly Shifting Gates Quests", None, _WEEKLY),
    ("Shifting Gates Exchange", None, _WEEKLY),
    ("Fishing Exchange", None, _WEEKLY),
    ("Complete Legendary Campaign Weekly Challenges", None, _WEEKLY),
    ("Complete Gauntlet Onslaught Weekly Rewards", None, _WEEKLY),
    ("Check Wu Ming's new Card Shop offers", None, _WEEKLY),
    ("Check Wu Ming's Black Market offers (Fri/Mon)", None, _WEEKLY),
    ("Complete Black Market Bounties and sell materials", None, _WEEKLY),
    ("Get free Lumia Leaves from Silver Shop", None, _WEEKLY),
    ("Casual Activeness Points", None, _WEEKLY),
    ("Iron Bar Chest Energy (Weekends only)", None, _WEEKLY),
    ("Complete weekly Battle Pass Quests", None, _WEEKLY),
    ("Complete weekly Pack Quests", None, _WEEKLY),

    ("Complete The Expanse", None, _FORTNIGHT),
    ("Complete Calamity Ops", None, _FORTNIGHT),

    ("Mentor Exchange", None, _MONTHLY),
    ("Fortuna Dust Exchange", None, _MONTHLY),

    ("Season of Daybreak: Daybreak Seal and Cosmetics",
     "Available until 06/11/2025", _SEASONAL),
    ("Gauntlet: Onslaught - Challenge Accepted", "Time-limited triumph", _SEASONAL),
    ("Gauntlet: Onslaught - Iron Fist", "Time-limited triumph", _SEASONAL),
    ("Shadowshaper - Reigning Champ", "Time-limited triumph", _SEASONAL),
]
"""Each entry is ``(title, description, (category, reset_type))``."""


# ---------------------------------------------------------------------------
# Seeder
# ---------------------------------------------------------------------------
def seed_default_tasks(engine: Engine) -> tuple[int, int]:
    """Insert default task templates whose titles don't yet exist.

    Returns ``(created, skipped)``.
    """
    session = Session(engine)
    created = skipped = 0
    try:
        existing = set(session.scalars(select(TaskTemplate.title)).all())
        for title, description, (category, reset_type) in DEFAULT_TASKS:
            if title in existing:
                skipped += 1
                continue
            session.add(TaskTemplate(
                title=title,
                description=description,
                category=category.value,
                reset_type=reset_type.value,
            ))
            created += 1
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if created:
        logger.info("Seeded %d default task templates.", created)
    return created, skipped
