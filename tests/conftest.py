"""Shared fixtures: a throwaway SQLite file per test and an app bound to it."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from vip_access.accounts import AccountStore
from vip_access.api.server import create_app
from vip_access.config import Config

from tests.helpers import ADMIN_SECRET


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "data" / "vip.sqlite")


@pytest.fixture
def cfg(db_path: str, tmp_path: Path) -> Config:
    return Config(
        DB_PATH=db_path,
        ADMIN_SECRET=ADMIN_SECRET,
        ADMIN_STATIC_DIR=str(tmp_path / "admin"),
    )


@pytest.fixture
def store(db_path: str):
    with AccountStore(db_path) as s:
        yield s


@pytest.fixture
def client(cfg: Config):
    with TestClient(create_app(cfg)) as c:
        yield c


