"""Pytest configuration and shared fixtures."""

import os
from datetime import timedelta

# Settings are read at import time by main; keep them test-friendly
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from config import Settings
from database import make_engine, create_db_and_tables
from main import create_app
from repositories.tasks import InMemoryTaskRepository, SqlTaskRepository
from repositories.users import InMemoryUserStore, SqlUserStore
from utils.jwt import TokenService

from helpers import auth_headers, register

TEST_SECRET = "test-secret"
TEST_ROUNDS = 4


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=TEST_ROUNDS)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_SECRET, timedelta(hours=1))


@pytest.fixture
def sqlite_engine():
    engine = make_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture(params=["memory", "sqlite"])
def user_store(request):
    """Each user store implementation, freshly emptied"""
    if request.param == "memory":
        return InMemoryUserStore(TEST_ROUNDS)
    return SqlUserStore(request.getfixturevalue("sqlite_engine"), TEST_ROUNDS)


@pytest.fixture(params=["memory", "sqlite"])
def task_repo(request):
    """Each task repository implementation, freshly emptied"""
    if request.param == "memory":
        return InMemoryTaskRepository()
    return SqlTaskRepository(request.getfixturevalue("sqlite_engine"))


@pytest.fixture(params=["memory", "sqlite"])
def client(request, settings: Settings) -> TestClient:
    """API client over in-memory and SQLite storage"""
    if request.param == "sqlite":
        settings = settings.model_copy(update={"database_url": "sqlite://"})
    return TestClient(create_app(settings))


@pytest.fixture
def alice(client: TestClient) -> dict:
    """Registered user with token and auth headers"""
    data = register(client, "alice@example.com", name="Alice")
    return {**data, "headers": auth_headers(data["token"])}


@pytest.fixture
def bob(client: TestClient) -> dict:
    data = register(client, "bob@example.com", name="Bob")
    return {**data, "headers": auth_headers(data["token"])}
