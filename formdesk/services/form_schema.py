"""Structural checks for form definitions.

Forms arrive as raw JSON. ``validate_schema`` runs the structural rules
(identifier shape, known kind, options present, unique ids) and raises the
matching ``SchemaError``; ``parse_fields`` then builds the frozen
``FieldSpec`` values. Nothing here touches storage.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from formdesk.core.errors import (
    DuplicateFieldId,
    InvalidFieldDefinition,
    InvalidFieldId,
    InvalidFieldKind,
    InvalidOptionSet,
)
from formdesk.db.enums import OPTION_KINDS, FieldKind, FormStatus
from formdesk.schemas.forms import FIELD_ID_PATTERN, FieldSpec, FormDefinition, FormSettings

_FIELD_ID_RE = re.compile(FIELD_ID_PATTERN)
_KIND_VALUES = {kind.value for kind in FieldKind}


def _read(field: Mapping[str, Any] | FieldSpec, key: str, *aliases: str) -> Any:
    if isinstance(field, FieldSpec):
        return getattr(field, key)
    for name in (key, *aliases):
        if name in field:
            return field[name]
    return None


def validate_schema(fields: Sequence[Mapping[str, Any] | FieldSpec]) -> None:
    """Raise a SchemaError for the first structural problem found."""
    seen: set[str] = set()
    for position, field in enumerate(fields):
        if not isinstance(field, (Mapping, FieldSpec)):
            raise InvalidFieldDefinition(f"Field #{position + 1} must be an object")

        field_id = _read(field, "id")
        if not isinstance(field_id, str) or not _FIELD_ID_RE.fullmatch(field_id):
            raise InvalidFieldId(
                f"Field ID {field_id!r} must start with a letter and contain only "
                "letters, numbers, and underscores",
                field_id=field_id if isinstance(field_id, str) else None,
            )

        kind = _read(field, "kind", "type")
        kind_value = kind.value if isinstance(kind, FieldKind) else kind
        if kind_value not in _KIND_VALUES:
            allowed = ", ".join(sorted(_KIND_VALUES))
            raise InvalidFieldKind(
                f"Field '{field_id}' has unknown type {kind!r}; expected one of: {allowed}",
                field_id=field_id,
            )

        options = _read(field, "options")
        if FieldKind(kind_value) in OPTION_KINDS and not options:
            raise InvalidOptionSet(
                f"Field '{field_id}' of type {kind_value} needs at least one option",
                field_id=field_id,
            )
        # Submitted values are compared verbatim, so options must already be trimmed.
        padded = [o for o in options or () if isinstance(o, str) and o != o.strip()]
        if padded:
            raise InvalidOptionSet(
                f"Field '{field_id}' has options with surrounding whitespace: {padded[0]!r}",
                field_id=field_id,
            )

        if field_id in seen:
            raise DuplicateFieldId(
                f"Field ID '{field_id}' is used more than once", field_id=field_id
            )
        seen.add(field_id)


def parse_fields(raw_fields: Sequence[Mapping[str, Any] | FieldSpec]) -> tuple[FieldSpec, ...]:
    validate_schema(raw_fields)

    parsed: list[FieldSpec] = []
    for raw in raw_fields:
        if isinstance(raw, FieldSpec):
            field = raw
        else:
            try:
                field = FieldSpec.model_validate(raw)
            except ValidationError as exc:
                problems = "; ".join(
                    f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
                )
                raise InvalidFieldDefinition(
                    f"Field '{raw.get('id')}' is invalid: {problems}", field_id=raw.get("id")
                ) from exc
        constraints = field.constraints
        if (
            constraints
            and constraints.min_length is not None
            and constraints.max_length is not None
            and constraints.min_length > constraints.max_length
        ):
            raise InvalidFieldDefinition(
                f"Field '{field.id}' has minLength greater than maxLength", field_id=field.id
            )
        parsed.append(field)
    return tuple(parsed)


def can_publish(form: FormDefinition) -> bool:
    return len(form.fields) > 0


def build_definition(
    form_id: uuid.UUID,
    raw_fields: Sequence[Mapping[str, Any] | FieldSpec],
    settings: FormSettings | None = None,
    status: FormStatus = FormStatus.DRAFT,
    submission_count: int = 0,
) -> FormDefinition:
    return FormDefinition(
        id=form_id,
        fields=parse_fields(raw_fields),
        settings=settings or FormSettings(),
        status=status,
        submission_count=submission_count,
    )


def dump_fields(fields: Sequence[FieldSpec]) -> list[dict[str, Any]]:
    """Serialize fields in their wire shape for JSON storage."""
    return [field.model_dump(mode="json", by_alias=True) for field in fields]
