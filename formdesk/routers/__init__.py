"""API routers."""

from formdesk.routers.forms import router as forms_router
from formdesk.routers.public import build_router as build_public_router
from formdesk.routers.submissions import router as submissions_router

__all__ = [
    "build_public_router",
    "forms_router",
    "submissions_router",
]
