# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from task_tracker.main import create_app
from task_tracker.repositories import InMemoryTaskStore
from task_tracker.service import TaskService
from task_tracker.settings import Settings

from .fakes import FixedClock, SequentialIds


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Explicit settings so tests never depend on the caller's environment.
    """
    return Settings(
        persistence_backend="memory",
        sqlite_db_path=str(tmp_path / "tasks.db"),
        cors_allow_origins=["http://localhost:5173"],
        log_level="INFO",
        host="127.0.0.1",
        port=8080,
        api_base_url="http://testserver/api/v1",
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture()
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture()
def store() -> InMemoryTaskStore:
    return InMemoryTaskStore()


@pytest.fixture()
def service(store: InMemoryTaskStore, clock: FixedClock, ids: SequentialIds) -> TaskService:
    return TaskService(store, clock=clock, id_generator=ids)


@pytest.fixture()
def app(settings: Settings, store: InMemoryTaskStore, clock: FixedClock, ids: SequentialIds) -> FastAPI:
    return create_app(settings=settings, store=store, clock=clock, id_generator=ids)


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
