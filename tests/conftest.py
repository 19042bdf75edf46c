# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from hims_sequencing.api.v1.dependencies import get_allocator
from hims_sequencing.db.session import Base
from hims_sequencing.db.session import get_db as app_get_session
from hims_sequencing.main import app as fastapi_app
from hims_sequencing.services.sequence import SequenceAllocator
from hims_sequencing.services.sequence_store import (
    InMemoryConfigStore,
    InMemorySequenceStore,
    SqlConfigStore,
    SqlSequenceStore,
)

TEST_DB_URL = "sqlite://"
TEST_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=UTC)


class FakeClock:
    """Settable clock handed to allocators under test."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: Any) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(TEST_NOW)


@pytest.fixture()
def state_store() -> InMemorySequenceStore:
    return InMemorySequenceStore()


@pytest.fixture()
def allocator(state_store: InMemorySequenceStore, clock: FakeClock) -> SequenceAllocator:
    """Allocator over in-memory stores using the built-in defaults."""
    return SequenceAllocator(state_store, InMemoryConfigStore(), clock=clock, tz=UTC)


@pytest.fixture()
def sql_allocator(db_session: Session, clock: FakeClock) -> SequenceAllocator:
    """Allocator over the SQL stores, sharing the test session."""
    return SequenceAllocator(
        SqlSequenceStore(db_session),
        SqlConfigStore(db_session),
        clock=clock,
        tz=UTC,
    )


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def override_dependencies(
    app: FastAPI, db_session: Session, clock: FakeClock
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    def _get_allocator_override() -> SequenceAllocator:
        return SequenceAllocator(
            SqlSequenceStore(db_session),
            SqlConfigStore(db_session),
            clock=clock,
            tz=UTC,
        )

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_allocator] = _get_allocator_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_allocator, None)


@pytest.fixture()
def client(app: FastAPI, override_dependencies: None) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def patient_payload() -> dict[str, Any]:
    return {
        "name": "Ayesha Khan",
        "age": 34,
        "age_unit": "Years",
        "gender": "Female",
        "contact": "0300-1234567",
        "address": "12 Mall Road, Lahore",
        "blood_group": "B+",
        "patient_type": ["OPD"],
        "cnic": "35202-1234567-1",
    }
