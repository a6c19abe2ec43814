"""
Tests for /api/auth/register and /api/auth/login.
"""

import asyncio
import threading
from unittest.mock import patch

import httpx
import pytest
from sqlalchemy import select

from auth.jwt import verify_token
from auth.password import hash_password, verify_password
from database.helpers import create_user
from database.models import User
from utils.errors import DuplicateEmailError

ANN = {"name": "Ann", "email": "ann@x.com", "password": "secret1"}


class TestRegister:
    @pytest.mark.asyncio
    async def test_returns_public_fields_only(self, client):
        resp = await client.post("/api/auth/register", json=ANN)
        assert resp.status_code == 201
        body = resp.json()
        assert set(body) == {"id", "name", "email"}
        assert body["name"] == "Ann"
        assert body["email"] == "ann@x.com"

    @pytest.mark.asyncio
    async def test_password_is_stored_hashed(self, client, db):
        await client.post("/api/auth/register", json=ANN)
        user = (await db.execute(select(User).where(User.email == "ann@x.com"))).scalar_one()
        assert user.password_hash != "secret1"
        assert verify_password("secret1", user.password_hash)
        assert not verify_password("secret2", user.password_hash)

    @pytest.mark.asyncio
    async def test_reports_every_failing_field(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"name": "", "email": "not-an-email", "password": "123"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Validation failed"
        assert {issue["field"] for issue in body["errors"]} == {"name", "email", "password"}

    @pytest.mark.asyncio
    async def test_missing_fields(self, client):
        resp = await client.post("/api/auth/register", json={})
        assert resp.status_code == 400
        assert {issue["field"] for issue in resp.json()["errors"]} == {"name", "email", "password"}

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, client):
        first = await client.post("/api/auth/register", json=ANN)
        second = await client.post("/api/auth/register", json={**ANN, "name": "Other"})
        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "Email already registered"

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_yield_one_success(self, client):
        statuses = [
            resp.status_code
            for resp in await asyncio.gather(
                client.post("/api/auth/register", json=ANN),
                client.post("/api/auth/register", json=ANN),
            )
        ]
        assert sorted(statuses) == [201, 409]

    @pytest.mark.asyncio
    async def test_long_password_and_name_accepted(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"name": "A" * 300, "email": "ann@x.com", "password": "p" * 129},
        )
        assert resp.status_code == 201

    @pytest.mark.asyncio
    async def test_hashing_runs_off_the_event_loop_thread(self, client):
        loop_thread = threading.get_ident()
        seen = []

        def _recording_hash(password):
            seen.append(threading.get_ident())
            return hash_password(password)

        with patch("auth.routes.hash_password", side_effect=_recording_hash):
            resp = await client.post("/api/auth/register", json=ANN)
        assert resp.status_code == 201
        assert len(seen) == 1
        assert seen[0] != loop_thread

    @pytest.mark.asyncio
    async def test_store_unique_constraint_raises_duplicate(self, db):
        await create_user(db, "Ann", "ann@x.com", "hash")
        with pytest.raises(DuplicateEmailError):
            await create_user(db, "Ann again", "ann@x.com", "hash")

    @pytest.mark.asyncio
    async def test_hashing_failure_is_generic_500(self, app):
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            with patch("auth.routes.hash_password", side_effect=RuntimeError("bcrypt backend failure")):
                resp = await c.post("/api/auth/register", json=ANN)
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error", "errors": []}


class TestLogin:
    @pytest.mark.asyncio
    async def test_returns_token_for_user(self, client):
        created = (await client.post("/api/auth/register", json=ANN)).json()
        resp = await client.post("/api/auth/login", json={"email": ANN["email"], "password": ANN["password"]})
        assert resp.status_code == 200
        identity = verify_token(resp.json()["token"])
        assert str(identity.user_id) == created["id"]
        assert identity.email == "ann@x.com"

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_identical(self, client):
        await client.post("/api/auth/register", json=ANN)
        wrong_pw = await client.post("/api/auth/login", json={"email": "ann@x.com", "password": "nope123"})
        unknown = await client.post("/api/auth/login", json={"email": "bob@x.com", "password": "secret1"})
        assert wrong_pw.status_code == unknown.status_code == 401
        assert wrong_pw.json() == unknown.json() == {"error": "Wrong email or password", "errors": []}

    @pytest.mark.asyncio
    async def test_empty_password_is_validation_error(self, client):
        resp = await client.post("/api/auth/login", json={"email": "ann@x.com", "password": ""})
        assert resp.status_code == 400
        assert [issue["field"] for issue in resp.json()["errors"]] == ["password"]

    @pytest.mark.asyncio
    async def test_unknown_email_still_runs_one_bcrypt_check(self, client):
        await client.post("/api/auth/register", json=ANN)

        with patch("auth.routes.verify_password", wraps=verify_password) as checker:
            await client.post("/api/auth/login", json={"email": "ann@x.com", "password": "nope123"})
        known_calls = checker.call_count

        with patch("auth.routes.verify_password", wraps=verify_password) as checker:
            await client.post("/api/auth/login", json={"email": "bob@x.com", "password": "nope123"})
        unknown_calls = checker.call_count

        assert known_calls == unknown_calls == 1
