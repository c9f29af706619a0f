"""
Root conftest for the pytest test suite.

This file contains the main fixtures that are used across the entire test suite.

Key Fixtures:
- `initialize_test_db`: Creates a fresh in-memory Tortoise database and schema.
  Only tests that touch the ORM request it.
- `app_for_testing`: Provides the FastAPI application instance with its production
  lifespan disabled so no real database is opened.
- `client`: Provides a non-authenticated httpx AsyncClient bound to the app.
- `admin_token`, `manager_token`, `staff_token`: Signed bearer tokens for chain 1.
- `other_chain_token`: A manager token for chain 2.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from ckms.core.config import MODEL_MODULES
from ckms.features.auth.security import create_user_token

# Import the app
from ckms.main import app as actual_app


@pytest_asyncio.fixture(scope="function")
async def initialize_test_db() -> AsyncGenerator[None, None]:
    """
    Initializes the database for a test function.

    Creates a fresh in-memory database and schema for the test and tears it
    down afterwards.
    """
    test_db_config = {
        "connections": {"default": "sqlite://:memory:"},
        "apps": {
            "models": {
                "models": MODEL_MODULES,
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }
    await Tortoise.init(config=test_db_config)
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


@pytest.fixture(scope="function")
def app_for_testing() -> Generator[FastAPI, Any, None]:
    """
    Provides a FastAPI application instance for testing, with its
    production lifespan manager disabled.
    """
    original_lifespan = actual_app.router.lifespan_context

    @asynccontextmanager
    async def dummy_lifespan(app: FastAPI):
        yield

    actual_app.router.lifespan_context = dummy_lifespan

    yield actual_app

    # Restore the original lifespan context and drop any overrides after the test
    actual_app.router.lifespan_context = original_lifespan
    actual_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def client(app_for_testing: FastAPI) -> AsyncGenerator[AsyncClient, Any]:
    """
    Provides a non-authenticated client talking to the app in-process.
    """
    transport = ASGITransport(app=app_for_testing)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_token() -> str:
    return create_user_token(sub="admin-user", chain_id=1, role="admin", email="admin@example.com")


@pytest.fixture
def manager_token() -> str:
    return create_user_token(sub="manager-user", chain_id=1, role="manager", email="manager@example.com")


@pytest.fixture
def staff_token() -> str:
    return create_user_token(sub="staff-user", chain_id=1, role="store_staff", store_id=10)


@pytest.fixture
def other_chain_token() -> str:
    return create_user_token(sub="other-manager", chain_id=2, role="manager")
