from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import get_db
from app.main import app
from app.models import models  # noqa: F401  (registers tables on Base.metadata)
from app.models.base import Base
from tests.test_utils import create_business


# One in-memory SQLite database stands in for the sales store for the whole run.
store_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    future=True,
)
StoreSession = sessionmaker(autocommit=False, autoflush=False, bind=store_engine)


@pytest.fixture(scope="session", autouse=True)
def sales_schema() -> Generator[None, None, None]:
    """Create the businesses/product/sales_order tables for the test run."""
    Base.metadata.create_all(bind=store_engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=store_engine)


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Session bound to an outer transaction that is rolled back after the test."""
    connection = store_engine.connect()
    outer = connection.begin()
    session = StoreSession(bind=connection)
    try:
        yield session
    finally:
        session.close()
        outer.rollback()
        connection.close()


@pytest.fixture
def owned_business(db_session):
    """A business owned by ``user-1``, the identity used by most tests."""
    return create_business(db_session, name="Test Shop", user_id="user-1")


@pytest.fixture
def client(db_session) -> Generator[TestClient, None, None]:
    """API client whose requests read from the test session."""

    def _get_db_override():
        yield db_session

    app.dependency_overrides[get_db] = _get_db_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
