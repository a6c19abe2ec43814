"""
Database helper functions — the user / task store.

Every task query filters on both ``task_id`` and ``user_id`` so a caller can
only ever reach rows it owns.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Task, User
from utils.errors import DuplicateEmailError

logger = logging.getLogger(__name__)


def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value


# ── Users ───────────────────────────────────────────────────────────


async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password_hash: str,
) -> User:
    """
    Insert a user row.

    The unique constraint on ``email`` is the only duplicate check, so two
    concurrent registrations cannot both succeed.  Raises
    ``DuplicateEmailError`` when the constraint fires.
    """
    user = User(
        user_id=uuid.uuid4(),
        name=name,
        email=email,
        password_hash=password_hash,
        created_at=datetime.now(timezone.utc),
    )
    session.add(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        await session.rollback()
        logger.debug("Unique email constraint rejected %s", email)
        raise DuplicateEmailError(email) from exc
    return user


async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


# ── Tasks ───────────────────────────────────────────────────────────


async def create_task(session: AsyncSession, user_id: str | uuid.UUID, title: str) -> Task:
    """Insert a task owned by *user_id*."""
    task = Task(
        task_id=uuid.uuid4(),
        user_id=_to_uuid(user_id),
        title=title,
        completed=False,
        created_at=datetime.now(timezone.utc),
    )
    session.add(task)
    await session.flush()
    return task


async def list_tasks_for_owner(session: AsyncSession, user_id: str | uuid.UUID) -> List[Task]:
    """All tasks owned by *user_id*, newest first."""
    result = await session.execute(
        select(Task)
        .where(Task.user_id == _to_uuid(user_id))
        .order_by(Task.created_at.desc())
    )
    return list(result.scalars().all())


async def update_task_for_owner(
    session: AsyncSession,
    task_id: str | uuid.UUID,
    user_id: str | uuid.UUID,
    changes: Dict[str, Any],
) -> bool:
    """
    Apply *changes* to the task matching both ids.

    Returns ``False`` when no row matched, which covers both a missing task
    and a task owned by somebody else.
    """
    result = await session.execute(
        update(Task)
        .where(Task.task_id == _to_uuid(task_id), Task.user_id == _to_uuid(user_id))
        .values(**changes)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def delete_task_for_owner(
    session: AsyncSession,
    task_id: str | uuid.UUID,
    user_id: str | uuid.UUID,
) -> bool:
    """Delete the task matching both ids.  ``False`` when nothing matched."""
    result = await session.execute(
        delete(Task)
        .where(Task.task_id == _to_uuid(task_id), Task.user_id == _to_uuid(user_id))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0
