# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from config import AppConfig
from database import Database
from task_service import TaskRepository
from web_app import create_app

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture()
def db(tmp_path: Path) -> Iterator[Database]:
    database = Database(tmp_path / "tasks.db").open()
    yield database
    database.close()


@pytest.fixture()
def repo(db: Database) -> TaskRepository:
    return TaskRepository(db)


@pytest.fixture()
def config(tmp_path: Path) -> AppConfig:
    """Config isolated from the environment: tmp database, real static bundle, no sign-in."""
    return AppConfig(database_path=str(tmp_path / "tasks.db"), static_dir=str(ROOT / "static"))


@pytest.fixture()
def client(config: AppConfig, repo: TaskRepository) -> TestClient:
    return TestClient(create_app(config, repository=repo))
