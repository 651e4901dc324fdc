"""Shared fixtures: an in-memory database per test and an API client."""

import json
from collections.abc import AsyncGenerator
from typing import Annotated, Any

import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import quickmap.models  # noqa: F401
from quickmap.agent.llm import get_completion_requester
from quickmap.api.deps import get_auth_user, get_db
from quickmap.core.database import Base, configure_sqlite
from quickmap.main import app
from quickmap.schemas.auth import Identity
from quickmap.services import identity_service

OWNER = Identity(id="user-owner", email="owner@example.com")
OTHER = Identity(id="user-other", email="other@example.com")

LEARN_GO_ROADMAP: dict[str, Any] = {
    "planTitle": "Learn Go",
    "focus": "Go",
    "outcome": "Build CLI tools",
    "estimatedDurationWeeks": 6,
    "milestones": [
        {
            "title": "Basics",
            "description": "Syntax and tooling",
            "estimatedDuration": "2 weeks",
            "steps": [
                {
                    "title": "Tour of Go",
                    "description": "Work through the tour",
                    "resources": [
                        {"type": "link", "title": "Tour", "url": "https://go.dev/tour"},
                    ],
                },
                {"title": "Write hello world", "resources": []},
            ],
        },
        {"title": "Concurrency", "steps": []},
    ],
}


class FakeCompletionRequester:
    """Returns canned message content and records the prompts it was given."""

    def __init__(self, content: Any = None) -> None:
        self.content = json.dumps(LEARN_GO_ROADMAP) if content is None else content
        self.calls: list[tuple[str, str]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        json_response: bool = True,
    ) -> Any:
        self.calls.append((system_prompt, user_prompt))
        return self.content


class CallerHolder:
    """Identity returned by the overridden auth dependency; tests switch it."""

    def __init__(self) -> None:
        self.identity = OWNER

    def use(self, identity: Identity) -> None:
        self.identity = identity


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(test_engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def test_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def fake_requester() -> FakeCompletionRequester:
    return FakeCompletionRequester()


@pytest_asyncio.fixture
async def caller() -> CallerHolder:
    return CallerHolder()


@pytest_asyncio.fixture
async def api_client(
    session_factory, fake_requester: FakeCompletionRequester, caller: CallerHolder
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with store, auth and model swapped for test doubles."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_auth_user(
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> Identity:
        await identity_service.remember_identity(db, caller.identity)
        return caller.identity

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_auth_user] = override_get_auth_user
    app.dependency_overrides[get_completion_requester] = lambda: fake_requester

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
