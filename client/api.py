"""
Async HTTP client for the Task Manager API.

Usage::

    session = SessionContext()
    async with TaskApiClient("http://localhost:5000/api", session) as api:
        await api.login("ann@x.com", "secret1")
        task = await api.create_task("Buy milk")
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional

import httpx

from client.session import SessionContext
from utils.schemas import ErrorOut, FieldIssue, MessageOut, TaskOut, TokenOut, UserOut
from utils.validators import parse_model

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[FieldIssue]] = None) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class TaskApiClient:
    """Thin wrapper over the REST surface, one method per endpoint."""

    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self.session = session
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "TaskApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    # ── Internals ──────────────────────────────────────────────────────

    async def _request(self, method: str, path: str, *, protected: bool, **kwargs: Any) -> httpx.Response:
        headers: Dict[str, str] = {}
        if protected:
            # Fails before any network I/O when signed out.
            headers.update(self.session.authorization_header())

        resp = await self._http.request(method, path, headers=headers, **kwargs)
        if resp.is_success:
            return resp

        if protected and resp.status_code in (401, 403):
            self.session.sign_out()
        raise self._to_error(resp)

    @staticmethod
    def _to_error(resp: httpx.Response) -> ApiError:
        try:
            body = ErrorOut.model_validate(resp.json())
        except ValueError:
            return ApiError(resp.status_code, resp.text or resp.reason_phrase)
        return ApiError(resp.status_code, body.error, body.errors)

    # ── Auth (public) ──────────────────────────────────────────────────

    async def register(self, name: str, email: str, password: str) -> UserOut:
        resp = await self._request(
            "POST", "/auth/register", protected=False,
            json={"name": name, "email": email, "password": password},
        )
        return parse_model(UserOut, resp.json())

    async def login(self, email: str, password: str) -> str:
        resp = await self._request(
            "POST", "/auth/login", protected=False,
            json={"email": email, "password": password},
        )
        token = parse_model(TokenOut, resp.json()).token
        self.session.sign_in(token, email)
        logger.info("Signed in as %s", email)
        return token

    def logout(self) -> None:
        self.session.sign_out()

    # ── Tasks (bearer) ─────────────────────────────────────────────────

    async def list_tasks(self) -> List[TaskOut]:
        resp = await self._request("GET", "/tasks", protected=True)
        return [parse_model(TaskOut, item) for item in resp.json()]

    async def create_task(self, title: str) -> TaskOut:
        resp = await self._request("POST", "/tasks", protected=True, json={"title": title})
        return parse_model(TaskOut, resp.json())

    async def update_task(
        self,
        task_id: uuid.UUID | str,
        *,
        title: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> str:
        body: Dict[str, Any] = {}
        if title is not None:
            body["title"] = title
        if completed is not None:
            body["completed"] = completed
        resp = await self._request("PUT", f"/tasks/{task_id}", protected=True, json=body)
        return parse_model(MessageOut, resp.json()).message

    async def delete_task(self, task_id: uuid.UUID | str) -> str:
        resp = await self._request("DELETE", f"/tasks/{task_id}", protected=True)
        return parse_model(MessageOut, resp.json()).message
