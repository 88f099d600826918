"""
lightbearer.api.routes.comments — Comment threads on builds and news
=====================================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_user, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import comment_service

router = APIRouter(prefix="/comments", tags=["comments"])


class CommentIn(CamelModel):
    content: str | None = None
    build_id: str | None = None
    news_id: str | None = None


@router.get("")
def list_comments(
    engine: Annotated[Engine, Depends(get_engine)],
    build_id: Annotated[str | None, Query(alias="buildId")] = None,
    news_id: Annotated[str | None, Query(alias="newsId")] = None,
):
    return comment_service.list_comments(engine, build_id=build_id, news_id=news_id)


@router.post("")
def create_comment(
    body: CommentIn,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return comment_service.create_comment(
        engine, user.id, body.content, build_id=body.build_id, news_id=body.news_id
    )


@router.delete("")
def delete_comment(
    id: str,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    comment_service.delete_comment(engine, id, user.id)
    return {"success": True}
