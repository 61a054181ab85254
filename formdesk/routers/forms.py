"""Form builder endpoints: create, edit, publish and duplicate forms."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from formdesk.core.deps import get_db
from formdesk.core.errors import FormError
from formdesk.db.enums import FormStatus
from formdesk.db.models import Form
from formdesk.routers.errors import to_http_exception
from formdesk.schemas.forms import (
    FormCreate,
    FormListResponse,
    FormRead,
    FormStatsRead,
    FormSummary,
    FormUpdate,
)
from formdesk.services import form_service, submission_service
from formdesk.utils.pagination import PaginationParams, get_pagination, page_count

router = APIRouter(prefix="/forms", tags=["forms"])


def _form_summary(form: Form) -> FormSummary:
    return FormSummary(
        id=form.id,
        title=form.title,
        description=form.description,
        status=FormStatus(form.status),
        submission_count=form.submission_count,
        created_at=form.created_at,
        updated_at=form.updated_at,
    )


def _form_read(form: Form) -> FormRead:
    definition = form_service.to_definition(form)
    return FormRead(
        **_form_summary(form).model_dump(),
        fields=list(definition.fields),
        settings=definition.settings,
    )


def _get_form_or_404(db: Session, form_id: UUID) -> Form:
    form = form_service.get_form(db, form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@router.get("", response_model=FormListResponse)
def list_forms(
    status: FormStatus | None = Query(None),
    search: str | None = Query(None, max_length=200),
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    forms, total = form_service.list_forms(db, pagination, status=status, search=search)
    return FormListResponse(
        items=[_form_summary(form) for form in forms],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=page_count(total, pagination),
    )


@router.post("", response_model=FormRead, status_code=201)
def create_form(body: FormCreate, db: Session = Depends(get_db)):
    try:
        form = form_service.create_form(db, body)
    except FormError as exc:
        raise to_http_exception(exc) from exc
    return _form_read(form)


@router.get("/{form_id}", response_model=FormRead)
def get_form(form_id: UUID, db: Session = Depends(get_db)):
    return _form_read(_get_form_or_404(db, form_id))


@router.put("/{form_id}", response_model=FormRead)
def update_form(form_id: UUID, body: FormUpdate, db: Session = Depends(get_db)):
    form = _get_form_or_404(db, form_id)
    try:
        form = form_service.update_form(db, form, body)
    except FormError as exc:
        raise to_http_exception(exc) from exc
    return _form_read(form)


@router.delete("/{form_id}", status_code=204)
def delete_form(form_id: UUID, db: Session = Depends(get_db)):
    form = _get_form_or_404(db, form_id)
    form_service.delete_form(db, form)


@router.post("/{form_id}/publish", response_model=FormRead)
def publish_form(form_id: UUID, db: Session = Depends(get_db)):
    form = _get_form_or_404(db, form_id)
    try:
        form = form_service.publish_form(db, form)
    except FormError as exc:
        raise to_http_exception(exc) from exc
    return _form_read(form)


@router.post("/{form_id}/unpublish", response_model=FormRead)
def unpublish_form(form_id: UUID, db: Session = Depends(get_db)):
    form = form_service.unpublish_form(db, _get_form_or_404(db, form_id))
    return _form_read(form)


@router.post("/{form_id}/duplicate", response_model=FormRead, status_code=201)
def duplicate_form(form_id: UUID, db: Session = Depends(get_db)):
    copy = form_service.duplicate_form(db, _get_form_or_404(db, form_id))
    return _form_read(copy)


@router.get("/{form_id}/stats", response_model=FormStatsRead)
def get_form_stats(form_id: UUID, db: Session = Depends(get_db)):
    form = _get_form_or_404(db, form_id)
    stats = submission_service.get_submission_stats(db, form.id)
    return FormStatsRead(
        form_id=form.id,
        title=form.title,
        status=FormStatus(form.status),
        total_submissions=stats.total_submissions,
        created_at=form.created_at,
        first_submission=stats.first_submission,
        last_submission=stats.last_submission,
        average_per_day=stats.average_per_day,
    )
