from __future__ import annotations

import os
from typing import Any

import pytest


def pytest_configure() -> None:
    # Ensure the SQLAlchemy engine is created against sqlite for tests.
    os.environ["DB_URL"] = "sqlite:///./test.db"
    os.environ["ENVIRONMENT"] = "test"
    os.environ["REQUEST_DELAY_SECONDS"] = "0"
    os.environ.pop("IMPORT_API_TOKEN", None)


@pytest.fixture()
def db() -> Any:
    from uae_catalog.database import Base, SessionLocal, engine
    import uae_catalog.models  # noqa: F401

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db) -> Any:
    from fastapi.testclient import TestClient

    from uae_catalog.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
