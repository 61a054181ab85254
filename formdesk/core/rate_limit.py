"""Rate limiting configuration for the forms API."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from formdesk.core.config import Settings


def build_limiter(settings: Settings) -> Limiter:
    """Create the limiter for one app; each app (and worker process) keeps its own window."""
    return Limiter(
        key_func=get_remote_address,
        storage_uri="memory://",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


def submit_limit(settings: Settings) -> str:
    return f"{settings.RATE_LIMIT_SUBMIT}/minute"
