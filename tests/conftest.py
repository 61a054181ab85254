"""
Test configuration and fixtures.

Provides:
- Settings pointed at an in-memory SQLite database
- Database session over a fresh schema per test
- HTTPX AsyncClient bound to the app with the session injected
"""
import uuid
from typing import AsyncGenerator, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from formdesk.core.config import Settings
from formdesk.core.deps import get_db
from formdesk.db import models  # noqa: F401
from formdesk.db.base import Base
from formdesk.db.enums import FormStatus
from formdesk.db.models import Form
from formdesk.db.session import build_engine, build_session_factory
from formdesk.main import create_app
from formdesk.schemas.forms import FormDefinition, FormSettings
from formdesk.services import form_schema


CONTACT_FIELDS = [
    {"id": "name", "type": "text", "label": "Full Name", "required": True},
    {"id": "email", "type": "email", "label": "Email", "required": True},
    {
        "id": "color",
        "type": "radio",
        "label": "Favorite Color",
        "required": False,
        "options": ["Red", "Green", "Blue"],
    },
    {
        "id": "tags",
        "type": "checkbox",
        "label": "Tags",
        "required": False,
        "options": ["a", "b", "c"],
    },
    {"id": "resume", "type": "file", "label": "Resume", "required": False},
]


def _build_definition(
    fields: list[dict] | None = None,
    submission_limit: int = 0,
    submission_count: int = 0,
) -> FormDefinition:
    return form_schema.build_definition(
        form_id=uuid.uuid4(),
        raw_fields=CONTACT_FIELDS if fields is None else fields,
        settings=FormSettings(submission_limit=submission_limit),
        status=FormStatus.PUBLISHED,
        submission_count=submission_count,
    )


@pytest.fixture
def make_definition():
    """Factory for published in-memory form definitions."""
    return _build_definition


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture(scope="function")
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ENV="test",
        DATABASE_URL="sqlite://",
        RATE_LIMIT_ENABLED=False,
        LOG_LEVEL="DEBUG",
    )


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine(settings: Settings) -> Generator[Engine, None, None]:
    """Fresh in-memory schema for each test."""
    engine = build_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine: Engine) -> Generator[Session, None, None]:
    session = build_session_factory(engine)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def published_form(db: Session) -> Form:
    """A published contact form with no submission limit."""
    form = Form(
        title="Contact Us",
        description="Get in touch",
        status=FormStatus.PUBLISHED.value,
        fields_json=form_schema.dump_fields(form_schema.parse_fields(CONTACT_FIELDS)),
    )
    db.add(form)
    db.commit()
    db.refresh(form)
    return form


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture(scope="function")
async def client(app, db: Session) -> AsyncGenerator[AsyncClient, None]:
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"User-Agent": "pytest-client"},
    ) as c:
        yield c

    app.dependency_overrides.clear()
