"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.core.db import create_session_factory
from catalog.models import Base, ProductRecord
from catalog.schemas.product import Product, ProductCandidate
from catalog.services import InMemoryProductRepository, ProductRepository, SqlProductRepository

# In-memory SQLite by default; point at PostgreSQL to match production
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")

TODAY = date(2024, 6, 15)


@pytest.fixture(scope="session")
def db_engine() -> Generator[Engine, None, None]:
    """Create an engine with a fresh product table for the test session."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL, future=True, pool_pre_ping=True)

    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine: Engine) -> Generator[sessionmaker[Session], None, None]:
    """Provide a session factory and empty the product table afterwards."""
    factory = create_session_factory(db_engine)

    yield factory

    with db_engine.begin() as conn:
        conn.execute(ProductRecord.__table__.delete())


@pytest.fixture
def product_factory() -> Callable[..., Product]:
    """Build valid products, overriding any field by keyword."""

    def _make(**overrides) -> Product:
        values = {
            "id": 100,
            "description": "Chocolate Bar",
            "brand": "Cocoa Co",
            "content": "100 g",
            "category": "Groceries",
            "price": Decimal("12.50"),
            "active": True,
            "date_made": TODAY - timedelta(days=10),
            "expiration_date": TODAY + timedelta(days=100),
        }
        values.update(overrides)
        return Product(**values)

    return _make


@pytest.fixture
def candidate_factory() -> Callable[..., ProductCandidate]:
    """Build valid candidates, overriding any field by keyword."""

    def _make(**overrides) -> ProductCandidate:
        values = {
            "id": 100,
            "description": "Chocolate Bar",
            "brand": "Cocoa Co",
            "content": "100 g",
            "category": "Groceries",
            "price": Decimal("12.50"),
            "status": "Active",
            "date_made": TODAY - timedelta(days=10),
            "expiration_date": TODAY + timedelta(days=100),
        }
        values.update(overrides)
        return ProductCandidate(**values)

    return _make


@pytest.fixture
def sql_repository(session_factory: sessionmaker[Session]) -> SqlProductRepository:
    return SqlProductRepository(session_factory)


@pytest.fixture(params=["sql", "memory"])
def repository(request: pytest.FixtureRequest, session_factory: sessionmaker[Session]) -> ProductRepository:
    """Each repository implementation, so both honour the same contract."""
    if request.param == "sql":
        return SqlProductRepository(session_factory)
    return InMemoryProductRepository()


@pytest.fixture
def unreachable_session_factory(tmp_path) -> sessionmaker[Session]:
    """Session factory bound to a SQLite file that cannot be opened."""
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'catalog.db'}", future=True)
    return create_session_factory(engine)
