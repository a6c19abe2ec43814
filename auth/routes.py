"""
Auth API routes — register, login.

Route prefix: /api/auth
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from auth.dependencies import db_session
from auth.jwt import create_token
from auth.password import hash_password, verify_password
from database.helpers import create_user, get_user_by_email
from utils.errors import AuthenticationError, ConflictError, DuplicateEmailError
from utils.schemas import LoginRequest, RegisterRequest, TokenOut, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Checked against when the email is unknown, so both failure paths pay for one bcrypt round.
_DUMMY_HASH = hash_password("dummy-password-for-unknown-emails")


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    session: AsyncSession = Depends(db_session),
) -> UserOut:
    """Register a new user."""
    password_hash = await run_in_threadpool(hash_password, req.password)
    try:
        user = await create_user(
            session,
            name=req.name,
            email=req.email,
            password_hash=password_hash,
        )
    except DuplicateEmailError as exc:
        raise ConflictError("Email already registered") from exc

    logger.info("Registered user %s (%s)", user.name, user.user_id)
    return UserOut(id=user.user_id, name=user.name, email=user.email)


@router.post("/login", response_model=TokenOut)
async def login(
    req: LoginRequest,
    session: AsyncSession = Depends(db_session),
) -> TokenOut:
    """Login with email + password."""
    user = await get_user_by_email(session, req.email)

    # Unknown email and wrong password must be indistinguishable, in body and in timing.
    stored_hash = user.password_hash if user is not None else _DUMMY_HASH
    password_ok = await run_in_threadpool(verify_password, req.password, stored_hash)
    if user is None or not password_ok:
        logger.warning("Failed login attempt")
        raise AuthenticationError("Wrong email or password")

    token = create_token(str(user.user_id), user.email)
    logger.info("Login: %s (%s)", user.name, user.user_id)
    return TokenOut(token=token)
