"""
lightbearer.api.routes.news — News board and news votes
========================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_user, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import news_service, vote_service

router = APIRouter(prefix="/news", tags=["news"])


class NewsIn(CamelModel):
    title: str | None = None
    content: str | None = None
    type: str | None = None
    url: str | None = None


class NewsVoteIn(CamelModel):
    news_id: str
    value: int = 1


@router.get("")
def list_news(
    engine: Annotated[Engine, Depends(get_engine)],
    type: str | None = None,
    sort_by: Annotated[str, Query(alias="sortBy")] = "upvotes",
):
    return news_service.list_news(engine, news_type=type, sort_by=sort_by)


@router.post("")
def create_news(
    body: NewsIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return news_service.create_news(
        engine,
        user.id,
        title=body.title,
        content=body.content,
        news_type=body.type,
        url=body.url,
    )


@router.post("/upvote")
def upvote_news(
    body: NewsVoteIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return vote_service.vote_news(engine, user.id, body.news_id, body.value)


@router.get("/{news_id}")
def get_news(news_id: str, engine: Annotated[Engine, Depends(get_engine)]):
    return news_service.get_news(engine, news_id)
