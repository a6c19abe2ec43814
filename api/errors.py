"""
Exception handlers — map the error taxonomy onto JSON responses.

Every error body has the shape ``{"error": str, "errors": [...]}``; only
validation failures fill ``errors``.  Unexpected exceptions are logged with
their traceback and reported to the client as a bare 500.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.errors import AppError, ValidationError
from utils.schemas import ErrorOut, FieldIssue
from utils.validators import issues_from_errors

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    message: str,
    issues: Optional[List[FieldIssue]] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = ErrorOut(error=message, errors=issues or [])
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers for domain, validation and unexpected errors."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        issues = exc.issues if isinstance(exc, ValidationError) else None
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            return _error_response(
                exc.status_code, exc.message, issues, headers={"WWW-Authenticate": "Bearer"}
            )
        return _error_response(exc.status_code, exc.message, issues)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        issues = issues_from_errors(exc.errors())
        logger.debug("%s %s — %d validation issue(s)", request.method, request.url.path, len(issues))
        return _error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", issues)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
