"""Shared fixtures: in-memory database, store, services and fakes."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

import jarvis.models  # noqa: F401
from jarvis.services.lifecycle import KeyLifecycle
from jarvis.services.policy import TrustPolicy
from jarvis.store.keys import KeyStore
from tests.fakes import RecordingDispatcher, RecordingNotifier


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite database with all tables."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def session_scope(session_factory):
    """Context-manager session factory with commit/rollback, like get_async_session."""

    @asynccontextmanager
    async def scope() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return scope


@pytest.fixture
async def file_session_factory(tmp_path):
    """Session factory over a file database.

    Each session gets its own connection, so concurrent tests can give
    every coroutine its own session like separate requests would.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'jarvis.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> KeyStore:
    return KeyStore(db_session)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def policy() -> TrustPolicy:
    return TrustPolicy.from_trusted()


@pytest.fixture
def lifecycle(store: KeyStore, policy: TrustPolicy, notifier: RecordingNotifier) -> KeyLifecycle:
    return KeyLifecycle(store=store, policy=policy, notifier=notifier)
