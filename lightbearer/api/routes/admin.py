"""
lightbearer.api.routes.admin — Admin check, task templates, API keys
=====================================================================

Everything here except ``/admin/check`` requires an admin session.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from lightbearer.api.deps import (
    Principal,
    get_config,
    get_current_admin,
    get_engine,
    get_optional_user,
    is_admin,
)
from lightbearer.api.schemas import CamelModel
from lightbearer.config import LightbearerConfig
from lightbearer.services import api_key_service, task_service

router = APIRouter(prefix="/admin", tags=["admin"])


class TemplateIn(CamelModel):
    title: str | None = None
    description: str | None = None
    category: str | None = None
    reset_type: str | None = None


class ApiKeyIn(CamelModel):
    name: str | None = None


class ApiKeyToggle(CamelModel):
    id: str | None = None
    is_active: bool | None = None


@router.get("/check")
def admin_check(
    user: Annotated[Principal | None, Depends(get_optional_user)],
    cfg: Annotated[LightbearerConfig, Depends(get_config)],
):
    return {"isAdmin": is_admin(user, cfg)}


# ---------------------------------------------------------------------------
# Task templates
# ---------------------------------------------------------------------------
@router.get("/tasks")
def list_templates(
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return task_service.list_templates(engine)


@router.post("/tasks")
def create_template(
    body: TemplateIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return task_service.create_template(
        engine,
        title=body.title,
        category=body.category,
        reset_type=body.reset_type,
        description=body.description,
    )


@router.post("/tasks/seed-defaults")
def seed_default_templates(
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return task_service.seed_defaults(engine)


@router.delete("/tasks/{template_id}")
def delete_template(
    template_id: str,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return task_service.delete_template(engine, template_id)


# ---------------------------------------------------------------------------
# API keys
# ---------------------------------------------------------------------------
@router.get("/api-keys")
def list_api_keys(
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return api_key_service.list_keys(engine)


@router.post("/api-keys", status_code=201)
def create_api_key(
    body: ApiKeyIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return api_key_service.create_key(engine, body.name)


@router.patch("/api-keys")
def toggle_api_key(
    body: ApiKeyToggle,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return api_key_service.set_key_active(engine, body.id, body.is_active)


@router.delete("/api-keys")
def delete_api_key(
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
    id: str | None = None,
):
    return api_key_service.delete_key(engine, id)
