"""
lightbearer.services.news_service — News board
===============================================
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.database.engine import get_session
from lightbearer.database.models import NewsPost, NewsType
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.serialize import iso, user_summary

logger = logging.getLogger(__name__)

NEWS_TYPES = frozenset(t.value for t in NewsType)


def _news_dict(post: NewsPost, *, with_votes: bool = False) -> dict:
    data = {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "type": post.type,
        "url": post.url,
        "voteCount": post.vote_count,
        "userId": post.user_id,
        "createdAt": iso(post.created_at),
        "user": user_summary(post.user),
    }
    if with_votes:
        data["votes"] = [{"userId": v.user_id, "value": v.value} for v in post.votes]
    return data


def _check_type(news_type: str) -> None:
    if news_type not in NEWS_TYPES:
        raise ValidationError(
            f"Invalid news type '{news_type}'. Must be one of {sorted(NEWS_TYPES)}"
        )


def list_news(
    engine: Engine, *, news_type: str | None = None, sort_by: str = "upvotes"
) -> list[dict]:
    stmt = select(NewsPost).options(
        selectinload(NewsPost.user), selectinload(NewsPost.votes)
    )
    if news_type:
        _check_type(news_type)
        stmt = stmt.where(NewsPost.type == news_type)
    if sort_by == "recent":
        stmt = stmt.order_by(NewsPost.created_at.desc())
    else:
        stmt = stmt.order_by(NewsPost.vote_count.desc(), NewsPost.created_at.desc())

    with Session(engine) as session:
        return [_news_dict(p, with_votes=True) for p in session.scalars(stmt).all()]


def get_news(engine: Engine, news_id: str) -> dict:
    with Session(engine) as session:
        post = session.get(NewsPost, news_id)
        if post is None:
            raise NotFoundError("News post not found")
        return _news_dict(post, with_votes=True)


def create_news(
    engine: Engine,
    user_id: str,
    *,
    title: str | None,
    content: str | None,
    news_type: str | None = None,
    url: str | None = None,
) -> dict:
    if not title or not content:
        raise ValidationError("Title and content are required")
    news_type = news_type or NewsType.ARTICLE.value
    _check_type(news_type)

    with get_session(engine) as session:
        post = NewsPost(
            title=title, content=content, type=news_type, url=url or None, user_id=user_id
        )
        session.add(post)
        session.flush()
        result = _news_dict(post)

    logger.info("News post %s created by user %s", result["id"], user_id)
    return result
