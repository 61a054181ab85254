"""FastAPI dependencies for settings, database access and the submission gate."""

from typing import Generator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from formdesk.core.config import Settings
from formdesk.services.submission_limit_gate import SqlSubmissionCounter, SubmissionLimitGate


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_submission_gate(db: Session = Depends(get_db)) -> SubmissionLimitGate:
    return SubmissionLimitGate(SqlSubmissionCounter(db))
