"""
REST API routes — task CRUD and health.

Every task route sits behind ``get_current_identity`` and only ever touches
rows owned by the authenticated user.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, get_current_identity
from database.helpers import (
    create_task,
    delete_task_for_owner,
    list_tasks_for_owner,
    update_task_for_owner,
)
from utils.errors import NotFoundError
from utils.schemas import Identity, MessageOut, TaskCreate, TaskOut, TaskUpdate
from utils.validators import require_task_changes

logger = logging.getLogger(__name__)

router = APIRouter()

_NOT_FOUND = "Task not found or not authorized"


@router.post("/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED, tags=["tasks"])
async def create_task_route(
    payload: TaskCreate,
    session: AsyncSession = Depends(db_session),
    identity: Identity = Depends(get_current_identity),
) -> TaskOut:
    task = await create_task(session, identity.user_id, payload.title)
    logger.info("Task %s created for user %s", task.task_id, identity.user_id)
    return TaskOut.from_row(task)


@router.get("/tasks", response_model=List[TaskOut], tags=["tasks"])
async def list_tasks_route(
    session: AsyncSession = Depends(db_session),
    identity: Identity = Depends(get_current_identity),
) -> List[TaskOut]:
    """Tasks of the authenticated user, newest first."""
    tasks = await list_tasks_for_owner(session, identity.user_id)
    return [TaskOut.from_row(t) for t in tasks]


@router.put("/tasks/{task_id}", response_model=MessageOut, tags=["tasks"])
async def update_task_route(
    task_id: uuid.UUID,
    payload: TaskUpdate,
    session: AsyncSession = Depends(db_session),
    identity: Identity = Depends(get_current_identity),
) -> MessageOut:
    changes = require_task_changes(payload)
    if not await update_task_for_owner(session, task_id, identity.user_id, changes):
        raise NotFoundError(_NOT_FOUND)

    logger.info("Task %s updated (%s)", task_id, ", ".join(sorted(changes)))
    return MessageOut(message="Task updated successfully")


@router.delete("/tasks/{task_id}", response_model=MessageOut, tags=["tasks"])
async def delete_task_route(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(db_session),
    identity: Identity = Depends(get_current_identity),
) -> MessageOut:
    if not await delete_task_for_owner(session, task_id, identity.user_id):
        raise NotFoundError(_NOT_FOUND)

    logger.info("Task %s deleted", task_id)
    return MessageOut(message="Task deleted successfully")


@router.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "ok"}
