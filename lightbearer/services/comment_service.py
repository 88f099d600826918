"""
lightbearer.services.comment_service — Comment threads
=======================================================

A comment hangs off exactly one build or one news post.  Only the author
may delete it.
"""

from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.database.engine import get_session
from lightbearer.database.models import Build, Comment, NewsPost
from lightbearer.services.errors import ForbiddenError, NotFoundError, ValidationError
from lightbearer.services.serialize import iso, user_summary


def _comment_dict(comment: Comment) -> dict:
    return {
        "id": comment.id,
        "content": comment.content,
        "userId": comment.user_id,
        "buildId": comment.build_id,
        "newsId": comment.news_id,
        "createdAt": iso(comment.created_at),
        "user": user_summary(comment.user),
    }


def _single_target(build_id: str | None, news_id: str | None) -> None:
    if bool(build_id) == bool(news_id):
        raise ValidationError("Exactly one of buildId or newsId is required")


def list_comments(
    engine: Engine, *, build_id: str | None = None, news_id: str | None = None
) -> list[dict]:
    """Comments on a build or a news post, newest first."""
    _single_target(build_id, news_id)
    stmt = select(Comment).options(selectinload(Comment.user))
    if build_id:
        stmt = stmt.where(Comment.build_id == build_id)
    else:
        stmt = stmt.where(Comment.news_id == news_id)
    stmt = stmt.order_by(Comment.created_at.desc())

    with Session(engine) as session:
        return [_comment_dict(c) for c in session.scalars(stmt).all()]


def create_comment(
    engine: Engine,
    user_id: str,
    content: str | None,
    *,
    build_id: str | None = None,
    news_id: str | None = None,
) -> dict:
    if not content:
        raise ValidationError("Missing content or target ID")
    _single_target(build_id, news_id)

    with get_session(engine) as session:
        if build_id and session.get(Build, build_id) is None:
            raise NotFoundError("Build not found")
        if news_id and session.get(NewsPost, news_id) is None:
            raise NotFoundError("News post not found")

        comment = Comment(
            content=content, user_id=user_id, build_id=build_id, news_id=news_id
        )
        session.add(comment)
        session.flush()
        return _comment_dict(comment)


def delete_comment(engine: Engine, comment_id: str, user_id: str) -> None:
    """Delete *comment_id* if *user_id* wrote it.

    Raises :class:`NotFoundError` for an unknown id and
    :class:`ForbiddenError` for anyone but the author; the row is left
    untouched in both cases.
    """
    with get_session(engine) as session:
        comment = session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.user_id != user_id:
            raise ForbiddenError("Not authorized")
        session.delete(comment)
