"""
Integration tests against a real MongoDB instance.

These tests verify that:
1. The supervisor connects through the real pymongo asyncio client
2. Startup seeding writes a record that /welcome then returns
3. An unreachable address keeps the supervisor retrying without crashing

Run with: RUN_INTEGRATION_TESTS=1 MONGO_URI=mongodb://localhost:27017/welcome_it pytest tests/integration/
"""

from __future__ import annotations

import os

import httpx
import pytest
import pytest_asyncio
from pymongo import AsyncMongoClient

from welcome_service.api.app import create_app
from welcome_service.config import Settings
from welcome_service.infrastructure.supervisor import ConnectionState, ConnectionSupervisor

DEFAULT_URI = "mongodb://localhost:27017/welcome_it"
UNREACHABLE_URI = "mongodb://127.0.0.1:1/welcome_it"
SEED_NAME = "Big Bill Brown"

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
        reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable MongoDB",
    ),
]


@pytest.fixture()
def mongo_uri() -> str:
    return os.getenv("MONGO_URI") or DEFAULT_URI


@pytest_asyncio.fixture()
async def clean_users(mongo_uri: str):
    """
    Empty the users collection before and after each test.
    """
    client = AsyncMongoClient(mongo_uri, serverSelectionTimeoutMS=5000)
    users = client.get_default_database("welcome_it")["users"]
    await users.delete_many({})
    try:
        yield users
    finally:
        await users.delete_many({})
        await client.close()


@pytest.mark.asyncio
async def test_supervisor_connects_to_real_server(mongo_uri: str) -> None:
    supervisor = ConnectionSupervisor(mongo_uri, retry_delay_seconds=0.5)
    await supervisor.connect()
    try:
        assert supervisor.state is ConnectionState.CONNECTED
        assert supervisor.attempts == 1
    finally:
        await supervisor.close()


@pytest.mark.asyncio
async def test_welcome_round_trip(mongo_uri: str, clean_users) -> None:
    settings = Settings(_env_file=None, mongo_uri=mongo_uri, mongo_retry_delay_seconds=0.5)
    app = create_app(settings)

    async with app.router.lifespan_context(app):
        await app.state.seed_task
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/welcome")

    assert response.status_code == 200
    assert response.text == f"Hello Client! There is one record in the database for {SEED_NAME}"
    assert await clean_users.count_documents({"name": SEED_NAME}) == 1


@pytest.mark.asyncio
async def test_restarts_accumulate_seed_records(mongo_uri: str, clean_users) -> None:
    settings = Settings(_env_file=None, mongo_uri=mongo_uri, mongo_retry_delay_seconds=0.5)
    for _ in range(3):
        app = create_app(settings)
        async with app.router.lifespan_context(app):
            await app.state.seed_task

    assert await clean_users.count_documents({"name": SEED_NAME}) == 3


@pytest.mark.asyncio
async def test_unreachable_address_keeps_retrying() -> None:
    supervisor = ConnectionSupervisor(
        UNREACHABLE_URI, retry_delay_seconds=0.05, server_selection_timeout_ms=100
    )
    supervisor.connect()
    try:
        assert await supervisor.wait_connected(timeout=1.0) is False
        assert supervisor.attempts >= 2
    finally:
        await supervisor.close()
    assert supervisor.state is ConnectionState.DISCONNECTED
