"""
Shared fixtures for PLAAFP Assistant backend tests.

Uses a throwaway SQLite database file.  Each test function gets its own
session; tables are created before and dropped after every test so each test
starts with a clean slate.  The process-wide editor session is reset and the
Ollama-backed assistant is replaced with an in-process fake.
"""
from __future__ import annotations

import os
import tempfile
from typing import AsyncGenerator, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

# Override DATABASE_URL *before* any app module is imported, so that
# settings.DATABASE_URL and the global engine point at the test DB.
_TEST_DB_PATH = os.path.join(tempfile.gettempdir(), "plaafp_test.db")
TEST_DATABASE_URL = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite+aiosqlite:///{_TEST_DB_PATH}",
)
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models import database_models  # noqa: E402,F401
from app.models.record import Locator, Record  # noqa: E402
from app.services.assistant import Suggestion, get_assistant_service  # noqa: E402
from app.services.editor_session import editor_session  # noqa: E402
from app.services.errors import AssistantUnavailableError, MissingContextError  # noqa: E402


# ---------------------------------------------------------------------------
# Fake assistant
# ---------------------------------------------------------------------------

class FakeAssistant:
    """Stands in for OllamaAssistantService; records the calls it receives."""

    def __init__(self) -> None:
        self.healthy = True
        self.fail = False
        self.suggestion_text = "**Tip:** check the FIE report."
        self.extracted: Optional[str] = "Reading Comprehension, Algebraic Reasoning"
        self.extract_calls: List[Locator] = []

    async def suggest(self, field: str, label: str, record: Record) -> Suggestion:
        if self.fail:
            raise AssistantUnavailableError("The AI service could not be reached.")
        if field == "disabilityImpact" and not (
            record.cognitive_deficits.strip() or record.academic_deficits.strip()
        ):
            raise MissingContextError("Missing Information", "Please fill in the deficits first.")
        return Suggestion(field=field, title=f"Suggestion for {label}", content=self.suggestion_text)

    async def extract_from_image(
        self, image_b64: str, locator: Locator, label: str, record: Record
    ) -> Optional[str]:
        if self.fail:
            raise AssistantUnavailableError("The AI service could not be reached.")
        self.extract_calls.append(locator)
        return self.extracted

    async def check_health(self) -> bool:
        return self.healthy


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a DB session for each test.  Tables are created up front and
    dropped afterwards.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def fake_assistant() -> FakeAssistant:
    return FakeAssistant()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession, fake_assistant: FakeAssistant
) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB dependency
    overridden to use the per-test session and the assistant replaced by
    ``fake_assistant``.
    """

    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_assistant_service] = lambda: fake_assistant
    editor_session.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    editor_session.reset()
