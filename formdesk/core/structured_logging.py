"""Structured logging helpers (PII-safe)."""

import logging
from typing import Any
from uuid import UUID

from formdesk.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings."""
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


def build_log_context(
    *,
    form_id: UUID | str | None = None,
    submission_id: UUID | str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
) -> dict[str, Any]:
    """Return a log context dict that never carries submitted values."""
    context: dict[str, Any] = {}
    if form_id:
        context["form_id"] = str(form_id)
    if submission_id:
        context["submission_id"] = str(submission_id)
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    return context
