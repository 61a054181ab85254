"""Error taxonomy for form definitions, submissions and exports.

Every error carries a stable ``code`` for clients and a human ``message``.
Routers translate these into HTTP responses; services only raise them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """One submitter-facing problem with one field."""

    field: str
    code: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}


class FormError(Exception):
    """Base class for expected, domain-level failures."""

    code = "form_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# =============================================================================
# Schema errors (malformed form definitions)
# =============================================================================


class SchemaError(FormError):
    code = "invalid_schema"

    def __init__(self, message: str, field_id: str | None = None) -> None:
        super().__init__(message)
        self.field_id = field_id


class DuplicateFieldId(SchemaError):
    code = "duplicate_field_id"


class InvalidFieldId(SchemaError):
    code = "invalid_field_id"


class InvalidFieldKind(SchemaError):
    code = "invalid_field_kind"


class InvalidOptionSet(SchemaError):
    code = "invalid_option_set"


class InvalidFieldDefinition(SchemaError):
    code = "invalid_field_definition"


class CannotPublish(SchemaError):
    code = "cannot_publish"


# =============================================================================
# Submission errors
# =============================================================================


class SubmissionValidationError(FormError):
    """Submitter-caused problems, always reported all at once."""

    code = "validation_failed"

    def __init__(self, errors: list[FieldError], message: str = "Validation failed") -> None:
        super().__init__(message)
        self.errors = list(errors)


class PayloadTooDeep(SubmissionValidationError):
    code = "payload_too_deep"

    def __init__(self, max_depth: int, field: str = "data") -> None:
        message = f"Submission nesting exceeds the maximum depth of {max_depth}"
        super().__init__([FieldError(field, self.code, message)], message=message)
        self.max_depth = max_depth


class InvalidFieldConfig(FormError):
    """The form's own constraint data is broken; not the submitter's fault."""

    code = "invalid_field_config"

    def __init__(self, message: str, field_id: str) -> None:
        super().__init__(message)
        self.field_id = field_id


class LimitExceeded(FormError):
    code = "submission_limit_reached"

    def __init__(self, message: str = "Submission limit reached for this form") -> None:
        super().__init__(message)


class FormStateError(FormError):
    """Operation not allowed in the form's current lifecycle state."""

    code = "form_state"


# =============================================================================
# Export errors
# =============================================================================


class NothingToExport(FormError):
    code = "nothing_to_export"

    def __init__(self, message: str = "No submissions to export") -> None:
        super().__init__(message)
