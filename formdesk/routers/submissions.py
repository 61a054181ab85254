"""Submission endpoints: listing, stats, export and deletion."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from formdesk.core.config import Settings
from formdesk.core.deps import get_app_settings, get_db, get_submission_gate
from formdesk.core.errors import FormError
from formdesk.db.enums import SortOrder, SubmissionSortField
from formdesk.routers.errors import to_http_exception
from formdesk.schemas.submissions import (
    SubmissionListResponse,
    SubmissionRecord,
    SubmissionStatsRead,
)
from formdesk.services import form_service, submission_service
from formdesk.services.submission_limit_gate import SubmissionLimitGate
from formdesk.utils.pagination import PaginationParams, get_pagination, page_count

router = APIRouter(tags=["submissions"])


def _require_form(db: Session, form_id: UUID):
    form = form_service.get_form(db, form_id)
    if not form:
        raise HTTPException(status_code=404, detail="Form not found")
    return form


@router.get("/forms/{form_id}/submissions", response_model=SubmissionListResponse)
def list_submissions(
    form_id: UUID,
    sort_by: SubmissionSortField = Query(SubmissionSortField.SUBMITTED_AT),
    sort_order: SortOrder = Query(SortOrder.DESC),
    search: str | None = Query(None, max_length=200),
    pagination: PaginationParams = Depends(get_pagination),
    db: Session = Depends(get_db),
):
    _require_form(db, form_id)
    rows, total = submission_service.list_submissions(
        db,
        form_id,
        pagination,
        sort_by=sort_by,
        sort_order=sort_order,
        search=search,
    )
    return SubmissionListResponse(
        items=[submission_service.to_record(row) for row in rows],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=page_count(total, pagination),
    )


@router.get("/forms/{form_id}/submissions/stats", response_model=SubmissionStatsRead)
def get_submission_stats(form_id: UUID, db: Session = Depends(get_db)):
    _require_form(db, form_id)
    return submission_service.get_submission_stats(db, form_id)


@router.get("/forms/{form_id}/export")
def export_submissions(
    form_id: UUID,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    form = _require_form(db, form_id)
    try:
        export = submission_service.export_form_csv(db, form, settings)
    except FormError as exc:
        raise to_http_exception(exc) from exc

    return Response(
        content=export.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@router.get("/submissions/{submission_id}", response_model=SubmissionRecord)
def get_submission(submission_id: UUID, db: Session = Depends(get_db)):
    submission = submission_service.get_submission(db, submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    return submission_service.to_record(submission)


@router.delete("/submissions/{submission_id}", status_code=204)
def delete_submission(
    submission_id: UUID,
    db: Session = Depends(get_db),
    gate: SubmissionLimitGate = Depends(get_submission_gate),
):
    submission = submission_service.get_submission(db, submission_id)
    if not submission:
        raise HTTPException(status_code=404, detail="Submission not found")
    submission_service.delete_submission(db, submission, gate)
