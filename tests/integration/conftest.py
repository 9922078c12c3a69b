"""Integration-test fixtures.

These tests need a migrated PostgreSQL (alembic upgrade head) and Redis,
configured through DATABASE_URL / REDIS_URL. They are collected only when
RUN_INTEGRATION=1.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.
"""

import os
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.sb_common.database import async_session_factory
from src.sb_gateway.auth.jwt_handler import create_access_token

if os.environ.get("RUN_INTEGRATION") != "1":
    collect_ignore_glob = ["test_*.py"]

_INSERT_USER_SQL = text("""
    INSERT INTO users (username, status, is_admin)
    VALUES (:username, :status, :is_admin)
    RETURNING id
""")


def auth_header(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client, keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _insert_user(status: str, is_admin: bool) -> str:
    async with async_session_factory() as session:
        row = (
            await session.execute(
                _INSERT_USER_SQL,
                {
                    "username": f"it_{uuid.uuid4().hex[:12]}",
                    "status": status,
                    "is_admin": is_admin,
                },
            )
        ).fetchone()
        await session.commit()
    return str(row.id)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin_id() -> str:
    return await _insert_user("ACTIVE", True)


@pytest_asyncio.fixture(loop_scope="session")
async def make_user(
    client: AsyncClient, admin_id: str
) -> Callable[[], Awaitable[str]]:
    """Factory: a fresh PENDING user approved by the admin (starter bonus credited)."""

    async def factory() -> str:
        user_id = await _insert_user("PENDING", False)
        resp = await client.post(
            f"/api/v1/admin/users/{user_id}/approve", headers=auth_header(admin_id)
        )
        assert resp.status_code == 200, resp.text
        return user_id

    return factory


@pytest_asyncio.fixture(loop_scope="session")
async def make_bet(client: AsyncClient) -> Callable[..., Awaitable[str]]:
    async def factory(creator_id: str, **fields: object) -> str:
        body = {
            "title": f"Integration bet {uuid.uuid4().hex[:6]}",
            "end_at": (datetime.now(UTC) + timedelta(hours=1)).isoformat(),
            **fields,
        }
        resp = await client.post("/api/v1/bets", json=body, headers=auth_header(creator_id))
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]["id"]

    return factory
