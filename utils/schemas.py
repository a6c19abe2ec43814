"""
Pydantic schemas for request bodies and JSON responses.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    """Public view of a user.  Never carries the password hash."""

    id: uuid.UUID
    name: str
    email: str


class TokenOut(BaseModel):
    token: str


class Identity(BaseModel):
    """Claims of a verified bearer token, attached to the request."""

    user_id: uuid.UUID
    email: str


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════════


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1)


class TaskUpdate(BaseModel):
    """Partial update.  Fields left out (or sent as null) are not touched."""

    title: Optional[str] = Field(None, min_length=1)
    completed: Optional[StrictBool] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class TaskOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID
    title: str
    completed: bool
    created_at: datetime
    user_id: uuid.UUID

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes; everything is stored in UTC.
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @classmethod
    def from_row(cls, task: Any) -> "TaskOut":
        return cls(
            id=task.task_id,
            title=task.title,
            completed=task.completed,
            created_at=task.created_at,
            user_id=task.user_id,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Generic responses
# ═══════════════════════════════════════════════════════════════════════════════


class MessageOut(BaseModel):
    message: str


class FieldIssue(BaseModel):
    field: str
    message: str


class ErrorOut(BaseModel):
    error: str
    errors: List[FieldIssue] = Field(default_factory=list)
