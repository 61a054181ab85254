"""Flatten submissions into CSV rows for a form."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from formdesk.core.errors import NothingToExport
from formdesk.db.enums import FieldKind
from formdesk.schemas.forms import FieldSpec, FormDefinition
from formdesk.schemas.submissions import SubmissionRecord

CSV_DANGEROUS_PREFIXES = ("=", "+", "-", "@")
METADATA_HEADERS = ("Submission ID", "Submitted At")
CHECKBOX_JOINER = "; "


def _csv_safe(value: str) -> str:
    if value and value.startswith(CSV_DANGEROUS_PREFIXES):
        return f"'{value}"
    return value


def _serialize_csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


def _iso_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def build_headers(form: FormDefinition) -> list[str]:
    # Duplicate labels are kept; each field gets its own column.
    return [*METADATA_HEADERS, *(field.label for field in form.fields)]


def _cell(field: FieldSpec, submission: SubmissionRecord) -> str:
    if field.kind is FieldKind.FILE:
        for ref in submission.files:
            if ref.field_id == field.id:
                return ref.original_name
        return ""

    value = submission.data.get(field.id)
    if field.kind is FieldKind.CHECKBOX and isinstance(value, list):
        return CHECKBOX_JOINER.join(_serialize_csv_value(item) for item in value)
    return _serialize_csv_value(value)


def build_row(form: FormDefinition, submission: SubmissionRecord) -> list[str]:
    return [
        str(submission.id),
        _iso_timestamp(submission.submitted_at),
        *(_cell(field, submission) for field in form.fields),
    ]


def build_rows(
    form: FormDefinition, submissions: Sequence[SubmissionRecord]
) -> list[list[str]]:
    """Header row followed by one row per submission."""
    if not submissions:
        raise NothingToExport()
    return [build_headers(form), *(build_row(form, submission) for submission in submissions)]


def _write_csv(rows: Iterable[Sequence[str]], *, escape_formulas: bool) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    for row in rows:
        if escape_formulas:
            row = [_csv_safe(value) for value in row]
        writer.writerow(row)
    return output.getvalue()


def export_csv(
    form: FormDefinition,
    submissions: Sequence[SubmissionRecord],
    *,
    escape_formulas: bool = False,
) -> str:
    """Render submissions as RFC 4180 CSV text.

    Raises NothingToExport when ``submissions`` is empty.
    """
    return _write_csv(build_rows(form, submissions), escape_formulas=escape_formulas)
