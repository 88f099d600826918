"""
lightbearer.services.vote_service — Transactional vote toggle
==============================================================

Builds and news posts carry a denormalized ``vote_count``.  Every vote
write changes the counter in the same transaction, so the counter always
equals the sum of live vote values:

* no existing vote   → insert vote,            ``vote_count += value``
* same value again   → delete vote (toggle),   ``vote_count -= value``
* opposite value     → flip the stored value,  ``vote_count += 2 × value``

The counter is bumped with a SQL-side ``vote_count + delta`` so two
concurrent voters never overwrite each other's increment.
"""

from __future__ import annotations

from sqlalchemy import Engine, select, update

from lightbearer.database.engine import get_session
from lightbearer.database.models import Build, NewsPost, NewsVote, Vote
from lightbearer.services.errors import NotFoundError, ValidationError

VALID_VOTE_VALUES = (1, -1)


def _toggle(
    engine: Engine,
    *,
    target_model,
    vote_model,
    target_column: str,
    target_id: str,
    user_id: str,
    value: int,
    not_found: str,
) -> dict:
    if value not in VALID_VOTE_VALUES:
        raise ValidationError("Vote value must be 1 or -1")

    with get_session(engine) as session:
        target = session.get(target_model, target_id)
        # Private builds are invisible to everyone but their owner
        if target is None or (
            getattr(target, "is_public", True) is False and target.user_id != user_id
        ):
            raise NotFoundError(not_found)

        fk = getattr(vote_model, target_column)
        vote = session.scalars(
            select(vote_model).where(vote_model.user_id == user_id, fk == target_id)
        ).one_or_none()

        if vote is None:
            session.add(vote_model(user_id=user_id, value=value, **{target_column: target_id}))
            delta, current = value, value
        elif vote.value == value:
            session.delete(vote)
            delta, current = -value, None
        else:
            vote.value = value
            delta, current = 2 * value, value

        session.execute(
            update(target_model)
            .where(target_model.id == target_id)
            .values(vote_count=target_model.vote_count + delta)
        )
        vote_count = session.scalar(
            select(target_model.vote_count).where(target_model.id == target_id)
        )

    return {"voted": current is not None, "value": current, "voteCount": vote_count}


def vote_build(engine: Engine, user_id: str, build_id: str, value: int = 1) -> dict:
    """Apply the three-way vote branch to a build."""
    return _toggle(
        engine,
        target_model=Build,
        vote_model=Vote,
        target_column="build_id",
        target_id=build_id,
        user_id=user_id,
        value=value,
        not_found="Build not found",
    )


def vote_news(engine: Engine, user_id: str, news_id: str, value: int = 1) -> dict:
    """Apply the three-way vote branch to a news post."""
    return _toggle(
        engine,
        target_model=NewsPost,
        vote_model=NewsVote,
        target_column="news_id",
        target_id=news_id,
        user_id=user_id,
        value=value,
        not_found="News post not found",
    )
