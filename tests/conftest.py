"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime, UTC
from itertools import count

import pytest
import yaml
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import wildtrip.db.models  # noqa: F401 - register all models on Base
from wildtrip.db.base import Base
from wildtrip.db.content_kinds import NEWS, PROTECTED_AREA, SPECIES
from wildtrip.db.models import User
from wildtrip.db.services import record_service

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)

_external_ids = count(1)


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


# ---------------------------------------------------------------------------
# Database (a fresh SQLite file per test)
# ---------------------------------------------------------------------------

@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'wildtrip-test.db'}"


@pytest.fixture
async def engine(db_url):
    engine = create_async_engine(db_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

async def create_user(db_session: AsyncSession, role: str = "content_editor", **fields) -> User:
    n = next(_external_ids)
    user = User(
        external_id=fields.pop("external_id", f"user_{n}"),
        email=fields.pop("email", f"editor{n}@example.org"),
        role=role,
        is_active=fields.pop("is_active", True),
        **fields,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
def make_user(db_session):
    async def _make(role: str = "content_editor", **fields) -> User:
        return await create_user(db_session, role=role, **fields)

    return _make


@pytest.fixture
def make_species(db_session):
    async def _make(slug: str = "puma", status: str = "published", **fields):
        data = {"common_name": "Puma", "scientific_name": "Puma concolor", **fields}
        return await record_service.create_record(db_session, SPECIES, slug, data, status=status, now=NOW)

    return _make


@pytest.fixture
def make_area(db_session):
    async def _make(slug: str = "torres-del-paine", status: str = "published", **fields):
        data = {"name": "Torres del Paine", **fields}
        return await record_service.create_record(db_session, PROTECTED_AREA, slug, data, status=status, now=NOW)

    return _make


@pytest.fixture
def make_news(db_session):
    async def _make(slug: str = "new-reserve", status: str = "published", **fields):
        data = {"title": "A new reserve", **fields}
        return await record_service.create_record(db_session, NEWS, slug, data, status=status, now=NOW)

    return _make
