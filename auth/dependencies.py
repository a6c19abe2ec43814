"""
FastAPI dependencies for authentication.

Provides ``db_session`` and ``get_current_identity``.  The latter is the
gate in front of every protected route: it reads the ``Authorization``
header, verifies the bearer token and attaches the caller's identity to
``request.state.identity``.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import InvalidTokenError, verify_token
from database.session import get_db_session
from utils.errors import AuthenticationError, InvalidCredentialError
from utils.schemas import Identity

logger = logging.getLogger(__name__)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization`` header value.

    Raises ``AuthenticationError`` when the header is absent or is not of
    the form ``Bearer <token>``.
    """
    if not authorization:
        raise AuthenticationError("Access denied: no token provided.")

    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Access denied: malformed token.")
    return token


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> Identity:
    """
    Extract and verify the Bearer token, returning the authenticated
    identity (``user_id`` + ``email``).
    """
    token = extract_bearer_token(authorization)
    try:
        identity = verify_token(token)
    except InvalidTokenError as exc:
        logger.info("Rejected bearer token on %s: %s", request.url.path, exc)
        raise InvalidCredentialError("Access forbidden: invalid token.") from exc

    request.state.identity = identity
    return identity
