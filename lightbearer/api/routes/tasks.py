"""
lightbearer.api.routes.tasks — Per-user task checklist
=======================================================
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_user, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskToggle(CamelModel):
    task_id: str | None = None
    completed: bool | None = None


@router.get("")
def list_tasks(
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return task_service.list_user_tasks(engine, user.id)


@router.post("")
def toggle_task(
    body: TaskToggle,
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return task_service.set_task_completed(engine, user.id, body.task_id, body.completed)


@router.post("/init")
def init_tasks(
    user: Annotated[Principal, Depends(get_current_user)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return task_service.init_user_tasks(engine, user.id)
