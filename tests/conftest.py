"""
tests/conftest.py

In-memory SQLite store shared by repository and service tests.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 registers all ORM models on Base.metadata
from app.repositories.hotel_repository import HotelRepository
from db.base import Base
from db.models.hotel import Hotel
from forecast_fixtures import FakeMailSource, InMemoryBlobStorage


@pytest.fixture()
def engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def make_hotel(session_factory: sessionmaker[Session]) -> Callable[..., Hotel]:
    def _make(
        *,
        name: str = "Harbour View",
        email: str = "revenue@harbourview.example",
        total_available_rooms: int = 120,
        is_active: bool = True,
    ) -> Hotel:
        with session_factory() as session:
            with session.begin():
                hotel = HotelRepository(session).create(
                    name=name,
                    email=email,
                    total_available_rooms=total_available_rooms,
                    is_active=is_active,
                )
            session.expunge(hotel)
        return hotel

    return _make


@pytest.fixture()
def mail_source() -> FakeMailSource:
    return FakeMailSource()


@pytest.fixture()
def blob_storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()
