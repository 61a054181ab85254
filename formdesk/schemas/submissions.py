"""Schemas for submissions, file references and validation failures."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from formdesk.schemas.forms import FrozenWireModel, WireModel


class FileRef(FrozenWireModel):
    """Pointer to an uploaded file; the bytes belong to the file store."""

    field_id: str = Field(..., min_length=1)
    original_name: str = Field(..., min_length=1)
    stored_name: str = Field(..., min_length=1, alias="fileName")
    file_path: str | None = None
    size: int = Field(..., ge=0, alias="fileSize")
    mime_type: str = Field(..., min_length=1)


class SubmissionPayload(WireModel):
    data: dict[str, Any]
    files: list[FileRef] = Field(default_factory=list)


class SubmissionRecord(FrozenWireModel):
    """An accepted submission; immutable after creation."""

    id: UUID
    form_id: UUID
    data: dict[str, Any]
    files: tuple[FileRef, ...] = ()
    submitted_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None


class SubmissionReceipt(WireModel):
    submission_id: UUID
    submitted_at: datetime
    thank_you_message: str


class SubmissionListResponse(WireModel):
    items: list[SubmissionRecord]
    total: int
    page: int
    per_page: int
    pages: int


class SubmissionStatsRead(WireModel):
    form_id: UUID
    total_submissions: int
    first_submission: datetime | None = None
    last_submission: datetime | None = None
    average_per_day: float = 0.0


class FieldErrorRead(WireModel):
    field: str
    code: str
    message: str


class ValidationFailureResponse(WireModel):
    message: str
    errors: list[FieldErrorRead]
