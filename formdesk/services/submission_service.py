"""Submission service: accept, list, delete, summarize and export submissions."""

import logging
import math
import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import String, cast, func
from sqlalchemy.orm import Session

from formdesk.core.config import Settings
from formdesk.core.errors import FormStateError
from formdesk.core.structured_logging import build_log_context
from formdesk.db.enums import FieldKind, FormStatus, SortOrder, SubmissionSortField
from formdesk.db.models import Form, Submission
from formdesk.schemas.forms import FormDefinition
from formdesk.schemas.submissions import (
    FileRef,
    SubmissionPayload,
    SubmissionReceipt,
    SubmissionRecord,
    SubmissionStatsRead,
)
from formdesk.services import csv_exporter, form_service
from formdesk.services.content_sanitizer import sanitize
from formdesk.services.submission_limit_gate import SubmissionLimitGate
from formdesk.services.submission_validator import validate_submission
from formdesk.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


@dataclass
class CsvExport:
    filename: str
    content: str


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_record(submission: Submission) -> SubmissionRecord:
    return SubmissionRecord(
        id=submission.id,
        form_id=submission.form_id,
        data=submission.data_json or {},
        files=tuple(FileRef.model_validate(item) for item in submission.files_json or []),
        submitted_at=_as_utc(submission.submitted_at),
        ip_address=submission.ip_address,
        user_agent=submission.user_agent,
    )


def _declared_file_refs(definition: FormDefinition, files: list[FileRef]) -> list[FileRef]:
    file_field_ids = {field.id for field in definition.fields if field.kind is FieldKind.FILE}
    return [ref for ref in files if ref.field_id in file_field_ids]


def submit_form(
    db: Session,
    form: Form,
    payload: SubmissionPayload,
    *,
    gate: SubmissionLimitGate,
    settings: Settings,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> SubmissionReceipt:
    """Validate, sanitize, reserve and persist one submission."""
    if form.status != FormStatus.PUBLISHED.value:
        raise FormStateError("Form not found or not published")

    definition = form_service.to_definition(form)
    files = _declared_file_refs(definition, payload.files)
    validated = validate_submission(definition, payload.data, files)
    clean_data = sanitize(validated, max_depth=settings.MAX_PAYLOAD_DEPTH)
    clean_files = [
        FileRef.model_validate(item)
        for item in sanitize(
            [ref.model_dump(mode="json", by_alias=True) for ref in files],
            max_depth=settings.MAX_PAYLOAD_DEPTH,
        )
    ]

    with gate.reservation(definition):
        try:
            submission = Submission(
                form_id=definition.id,
                data_json=clean_data,
                files_json=[ref.model_dump(mode="json", by_alias=True) for ref in clean_files],
                submitted_at=datetime.now(timezone.utc),
                ip_address=ip_address,
                user_agent=user_agent,
            )
            db.add(submission)
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(submission)

    logger.info(
        "Form submission received",
        extra=build_log_context(form_id=definition.id, submission_id=submission.id),
    )
    return SubmissionReceipt(
        submission_id=submission.id,
        submitted_at=_as_utc(submission.submitted_at),
        thank_you_message=definition.settings.thank_you_message,
    )


def list_submissions(
    db: Session,
    form_id: uuid.UUID,
    pagination: PaginationParams,
    sort_by: SubmissionSortField = SubmissionSortField.SUBMITTED_AT,
    sort_order: SortOrder = SortOrder.DESC,
    search: str | None = None,
) -> tuple[list[Submission], int]:
    query = db.query(Submission).filter(Submission.form_id == form_id)
    if search:
        query = query.filter(cast(Submission.data_json, String).ilike(f"%{search}%"))

    column = getattr(Submission, sort_by.value)
    ordering = column.desc() if sort_order is SortOrder.DESC else column.asc()
    query = query.order_by(ordering, Submission.id.asc())
    return paginate_query(query, pagination)


def get_submission(db: Session, submission_id: uuid.UUID) -> Submission | None:
    return db.query(Submission).filter(Submission.id == submission_id).first()


def delete_submission(db: Session, submission: Submission, gate: SubmissionLimitGate) -> None:
    form_id = submission.form_id
    db.delete(submission)
    db.commit()
    gate.release(form_id)


def get_submission_stats(db: Session, form_id: uuid.UUID) -> SubmissionStatsRead:
    total, first, last = (
        db.query(
            func.count(Submission.id),
            func.min(Submission.submitted_at),
            func.max(Submission.submitted_at),
        )
        .filter(Submission.form_id == form_id)
        .one()
    )
    first = _as_utc(first)
    last = _as_utc(last)

    average = 0.0
    if total:
        span_days = math.ceil((last - first).total_seconds() / SECONDS_PER_DAY) if first and last else 0
        average = round(total / max(span_days, 1), 2)

    return SubmissionStatsRead(
        form_id=form_id,
        total_submissions=total,
        first_submission=first,
        last_submission=last,
        average_per_day=average,
    )


def export_filename(title: str) -> str:
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title)}_submissions.csv"


def export_form_csv(db: Session, form: Form, settings: Settings) -> CsvExport:
    """Raises NothingToExport when the form has no submissions."""
    definition = form_service.to_definition(form)
    rows = (
        db.query(Submission)
        .filter(Submission.form_id == form.id)
        .order_by(Submission.submitted_at.desc(), Submission.id.asc())
        .all()
    )
    content = csv_exporter.export_csv(
        definition,
        [to_record(row) for row in rows],
        escape_formulas=settings.CSV_ESCAPE_FORMULAS,
    )
    return CsvExport(filename=export_filename(form.title), content=content)
