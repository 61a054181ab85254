"""Form-related enums."""

from enum import Enum


class FormStatus(str, Enum):
    """Status of a form configuration."""

    DRAFT = "draft"
    PUBLISHED = "published"


class FieldKind(str, Enum):
    """Closed set of field kinds a form can declare."""

    TEXT = "text"
    EMAIL = "email"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    FILE = "file"


# Kinds whose values must come from the field's option list.
OPTION_KINDS = frozenset({FieldKind.SELECT, FieldKind.RADIO, FieldKind.CHECKBOX})


class SubmissionSortField(str, Enum):
    SUBMITTED_AT = "submitted_at"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
