"""Public form endpoints for respondents."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from sqlalchemy.orm import Session

from formdesk.core.config import Settings
from formdesk.core.deps import get_app_settings, get_db, get_submission_gate
from formdesk.core.errors import FormError
from formdesk.core.rate_limit import submit_limit
from formdesk.routers.errors import to_http_exception
from formdesk.schemas.forms import FormPublicRead, PublicFormSettings
from formdesk.schemas.submissions import SubmissionPayload, SubmissionReceipt
from formdesk.services import form_service, submission_service
from formdesk.services.submission_limit_gate import SubmissionLimitGate


def build_router(limiter: Limiter, settings: Settings) -> APIRouter:
    """Respondent routes; the submit limit comes from the app's own settings."""
    router = APIRouter(tags=["forms-public"])

    @router.get("/public/forms/{form_id}", response_model=FormPublicRead)
    def get_public_form(form_id: UUID, db: Session = Depends(get_db)):
        form = form_service.get_published_form(db, form_id)
        if not form:
            raise HTTPException(status_code=404, detail="Form not found or not published")

        definition = form_service.to_definition(form)
        return FormPublicRead(
            id=form.id,
            title=form.title,
            description=form.description,
            fields=list(definition.fields),
            settings=PublicFormSettings(
                thank_you_message=definition.settings.thank_you_message,
                allow_anonymous=definition.settings.allow_anonymous,
            ),
        )

    @router.post("/forms/{form_id}/submit", response_model=SubmissionReceipt, status_code=201)
    @limiter.limit(submit_limit(settings))
    def submit_form(
        request: Request,
        form_id: UUID,
        body: SubmissionPayload,
        db: Session = Depends(get_db),
        gate: SubmissionLimitGate = Depends(get_submission_gate),
        app_settings: Settings = Depends(get_app_settings),
    ):
        # Drafts are indistinguishable from missing forms to respondents.
        form = form_service.get_published_form(db, form_id)
        if not form:
            raise HTTPException(status_code=404, detail="Form not found or not published")

        try:
            return submission_service.submit_form(
                db,
                form,
                body,
                gate=gate,
                settings=app_settings,
                ip_address=request.client.host if request.client else None,
                user_agent=request.headers.get("user-agent"),
            )
        except FormError as exc:
            raise to_http_exception(exc) from exc

    return router
