"""
Domain error taxonomy.

Handlers and the auth gate raise these; ``api.errors`` maps each one to a
JSON response.  Anything that is not an ``AppError`` becomes a generic 500.
"""

from __future__ import annotations

from typing import List, Optional

from utils.schemas import FieldIssue


class AppError(Exception):
    """Base class for errors that carry their own HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Malformed or missing input.  Carries every failing field."""

    status_code = 400

    def __init__(self, message: str, issues: Optional[List[FieldIssue]] = None) -> None:
        super().__init__(message)
        self.issues = issues or []


class ConflictError(AppError):
    status_code = 409


class AuthenticationError(AppError):
    """Missing or malformed credential (401)."""

    status_code = 401


class InvalidCredentialError(AuthenticationError):
    """A credential was presented but failed verification (403)."""

    status_code = 403


class NotFoundError(AppError):
    """Resource absent, or present but owned by someone else.

    The two cases are deliberately reported the same way so callers
    cannot probe for other users' resources.
    """

    status_code = 404


class DuplicateEmailError(Exception):
    """Raised by the store when the unique email constraint is violated."""

    def __init__(self, email: str) -> None:
        super().__init__(f"email already registered: {email}")
        self.email = email
