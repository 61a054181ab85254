"""Validate a raw submission payload against a form definition.

Errors are collected across every field and raised together, so a client can
report every problem in one round trip. Missing required fields are reported
on their own; kind and constraint checks only run once every required field
is present.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any, assert_never

from formdesk.core.errors import FieldError, InvalidFieldConfig, SubmissionValidationError
from formdesk.db.enums import FieldKind
from formdesk.schemas.forms import FieldSpec, FormDefinition
from formdesk.schemas.submissions import FileRef
from formdesk.types import JsonObject

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_present(value: Any) -> bool:
    """Absent, None, "" and [] count as no answer; 0 and False are answers."""
    if value is None:
        return False
    if isinstance(value, str) and value == "":
        return False
    if isinstance(value, list) and not value:
        return False
    return True


def validate_submission(
    form: FormDefinition,
    data: JsonObject,
    files: Sequence[FileRef] = (),
) -> JsonObject:
    """Return ``data`` trimmed to declared fields, or raise SubmissionValidationError.

    Raises InvalidFieldConfig when a field's own pattern does not compile.
    """
    if not isinstance(data, dict):
        raise SubmissionValidationError(
            [FieldError("data", "invalid_type", "Data must be an object")]
        )

    file_field_ids = {ref.field_id for ref in files}

    missing: list[FieldError] = []
    for field in form.fields:
        if not field.required:
            continue
        if field.kind is FieldKind.FILE and field.id in file_field_ids:
            continue
        if not is_present(data.get(field.id)):
            missing.append(FieldError(field.id, "missing_required", f"{field.label} is required"))
    if missing:
        raise SubmissionValidationError(missing, message="Required fields are missing")

    errors: list[FieldError] = []
    for field in form.fields:
        value = data.get(field.id)
        if not is_present(value):
            continue
        errors.extend(_check_kind(field, value))
        if isinstance(value, str) and field.constraints:
            errors.extend(_check_constraints(field, value))
    if errors:
        logger.debug("Submission rejected with %d field errors", len(errors))
        raise SubmissionValidationError(errors)

    declared = {field.id for field in form.fields}
    validated: JsonObject = {}
    for key, value in data.items():
        if key not in declared:
            continue
        field = form.get_field(key)
        if field is not None and field.kind is FieldKind.CHECKBOX and isinstance(value, list):
            # Ordered set: keep first occurrence of each choice.
            value = list(dict.fromkeys(value))
        validated[key] = value
    return validated


def _check_kind(field: FieldSpec, value: Any) -> list[FieldError]:
    kind = field.kind
    match kind:
        case FieldKind.TEXT | FieldKind.TEXTAREA:
            if isinstance(value, bool) or not isinstance(value, (str, int, float)):
                return [FieldError(field.id, "invalid_type", f"{field.label} must be text")]
            return []
        case FieldKind.EMAIL:
            if not isinstance(value, str) or not EMAIL_RE.fullmatch(value):
                return [
                    FieldError(
                        field.id, "invalid_email", f"{field.label} must be a valid email address"
                    )
                ]
            return []
        case FieldKind.SELECT | FieldKind.RADIO:
            if not isinstance(value, str) or value not in field.options:
                return [
                    FieldError(
                        field.id, "invalid_option", f"{field.label} contains an invalid option"
                    )
                ]
            return []
        case FieldKind.CHECKBOX:
            if not isinstance(value, list):
                return [
                    FieldError(
                        field.id, "invalid_option", f"{field.label} must be a list of options"
                    )
                ]
            invalid = [item for item in value if not isinstance(item, str) or item not in field.options]
            if invalid:
                names = ", ".join(str(item) for item in invalid)
                return [
                    FieldError(
                        field.id,
                        "invalid_option",
                        f"{field.label} contains invalid options: {names}",
                    )
                ]
            return []
        case FieldKind.FILE:
            # Stored and checked by the upload collaborator.
            return []
        case _:
            assert_never(kind)


def _check_constraints(field: FieldSpec, value: str) -> list[FieldError]:
    constraints = field.constraints
    if constraints is None:
        return []

    errors: list[FieldError] = []
    if constraints.min_length is not None and len(value) < constraints.min_length:
        errors.append(
            FieldError(
                field.id,
                "too_short",
                f"{field.label} must be at least {constraints.min_length} characters long",
            )
        )
    if constraints.max_length is not None and len(value) > constraints.max_length:
        errors.append(
            FieldError(
                field.id,
                "too_long",
                f"{field.label} must be no more than {constraints.max_length} characters long",
            )
        )
    if constraints.pattern:
        try:
            compiled = re.compile(constraints.pattern)
        except re.error as exc:
            logger.error(
                "Invalid validation pattern on field %s: %s", field.id, exc
            )
            raise InvalidFieldConfig(
                f"Invalid validation pattern for '{field.label}'", field_id=field.id
            ) from exc
        if compiled.search(value) is None:
            errors.append(
                FieldError(field.id, "pattern_mismatch", f"{field.label} format is invalid")
            )
    return errors
