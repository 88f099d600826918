"""
lightbearer.services.task_service — Task tracker
=================================================

Admins curate :class:`TaskTemplate` rows; each user gets one
:class:`UserTask` per template (``init_user_tasks``) and ticks it off.
``reset_type`` is a display label only — nothing clears ``completed`` on
a schedule.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import Engine, case, delete, select
from sqlalchemy.orm import Session, selectinload

from lightbearer.constants import RESET_LABELS
from lightbearer.database.engine import get_session
from lightbearer.database.models import ResetType, TaskCategory, TaskTemplate, UserTask
from lightbearer.database.seed import DEFAULT_TASKS, seed_default_tasks
from lightbearer.services.errors import NotFoundError, ValidationError
from lightbearer.services.serialize import iso

logger = logging.getLogger(__name__)

# Shortest cadence first
_CATEGORY_ORDER = case(
    {c.value: i for i, c in enumerate(TaskCategory)},
    value=TaskTemplate.category,
    else_=len(TaskCategory),
)


def template_dict(template: TaskTemplate) -> dict:
    return {
        "id": template.id,
        "title": template.title,
        "description": template.description,
        "category": template.category,
        "resetType": template.reset_type,
        "resetLabel": RESET_LABELS.get(template.reset_type, template.reset_type),
        "createdAt": iso(template.created_at),
    }


def _user_task_dict(task: UserTask) -> dict:
    return {
        "id": task.id,
        "userId": task.user_id,
        "taskTemplateId": task.task_template_id,
        "completed": task.completed,
        "completedAt": iso(task.completed_at),
        "taskTemplate": template_dict(task.task_template),
    }


# ---------------------------------------------------------------------------
# Per-user tasks
# ---------------------------------------------------------------------------
def list_user_tasks(engine: Engine, user_id: str) -> list[dict]:
    stmt = (
        select(UserTask)
        .join(UserTask.task_template)
        .where(UserTask.user_id == user_id)
        .options(selectinload(UserTask.task_template))
        .order_by(_CATEGORY_ORDER, TaskTemplate.title)
    )
    with Session(engine) as session:
        return [_user_task_dict(t) for t in session.scalars(stmt).all()]


def set_task_completed(engine: Engine, user_id: str, task_id: str, completed: bool) -> dict:
    """Tick or untick one of *user_id*'s tasks."""
    if not task_id or not isinstance(completed, bool):
        raise ValidationError("taskId and completed (boolean) are required")
    with get_session(engine) as session:
        task = session.scalars(
            select(UserTask).where(UserTask.id == task_id, UserTask.user_id == user_id)
        ).one_or_none()
        if task is None:
            raise NotFoundError("Task not found")
        task.completed = completed
        task.completed_at = datetime.now(UTC) if completed else None
        session.flush()
        return _user_task_dict(task)


def init_user_tasks(engine: Engine, user_id: str) -> dict:
    """Create a UserTask for every template *user_id* doesn't have yet.

    Idempotent: a second call creates nothing.
    """
    with get_session(engine) as session:
        have = set(session.scalars(
            select(UserTask.task_template_id).where(UserTask.user_id == user_id)
        ).all())
        template_ids = session.scalars(select(TaskTemplate.id)).all()
        missing = [tid for tid in template_ids if tid not in have]
        for template_id in missing:
            session.add(UserTask(user_id=user_id, task_template_id=template_id))

    if missing:
        logger.info("Initialized %d tasks for user %s", len(missing), user_id)
    return {"created": len(missing), "total": len(template_ids)}


# ---------------------------------------------------------------------------
# Admin: templates
# ---------------------------------------------------------------------------
def list_templates(engine: Engine) -> list[dict]:
    stmt = select(TaskTemplate).order_by(_CATEGORY_ORDER, TaskTemplate.title)
    with Session(engine) as session:
        return [template_dict(t) for t in session.scalars(stmt).all()]


def create_template(
    engine: Engine,
    *,
    title: str | None,
    category: str | None,
    reset_type: str | None,
    description: str | None = None,
) -> dict:
    if not title or not category or not reset_type:
        raise ValidationError("Missing required fields")
    if category not in {c.value for c in TaskCategory}:
        raise ValidationError("Invalid category")
    if reset_type not in {r.value for r in ResetType}:
        raise ValidationError("Invalid reset type")

    with get_session(engine) as session:
        if session.scalar(select(TaskTemplate.id).where(TaskTemplate.title == title)):
            raise ValidationError(f"A task titled '{title}' already exists")
        template = TaskTemplate(
            title=title,
            description=description or None,
            category=category,
            reset_type=reset_type,
        )
        session.add(template)
        session.flush()
        return template_dict(template)


def delete_template(engine: Engine, template_id: str) -> dict:
    """Delete a template and every user's row for it."""
    with get_session(engine) as session:
        template = session.get(TaskTemplate, template_id)
        if template is None:
            raise NotFoundError("Task template not found")
        session.execute(delete(UserTask).where(UserTask.task_template_id == template_id))
        session.delete(template)

    logger.info("Task template %s deleted", template_id)
    return {"message": "Task template deleted successfully"}


def seed_defaults(engine: Engine) -> dict:
    created, skipped = seed_default_tasks(engine)
    return {
        "message": "Default tasks seeded successfully",
        "created": created,
        "skipped": skipped,
        "total": len(DEFAULT_TASKS),
    }
