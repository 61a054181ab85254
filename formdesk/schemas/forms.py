"""Schemas for form definitions and their fields."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from pydantic.alias_generators import to_camel

from formdesk.db.enums import FieldKind, FormStatus


FIELD_ID_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*$"
DEFAULT_THANK_YOU_MESSAGE = "Thank you for your submission!"

OptionStr = Annotated[str, StringConstraints(min_length=1, max_length=100)]


class WireModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenWireModel(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FieldConstraints(FrozenWireModel):
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)
    pattern: str | None = None


class FieldSpec(FrozenWireModel):
    id: str = Field(..., pattern=FIELD_ID_PATTERN)
    kind: FieldKind = Field(..., alias="type")
    label: str = Field(..., min_length=1, max_length=100)
    required: bool = False
    placeholder: str = Field("", max_length=200)
    options: tuple[OptionStr, ...] = ()
    constraints: FieldConstraints | None = Field(None, alias="validation")

    @field_validator("label", mode="before")
    @classmethod
    def _strip_label(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class FormSettings(FrozenWireModel):
    thank_you_message: str = Field(DEFAULT_THANK_YOU_MESSAGE, max_length=500)
    submission_limit: int = Field(0, ge=0)  # 0 means no limit
    allow_anonymous: bool = True
    # Stored only; notifications are not sent.
    notification_email: str | None = None


class FormDefinition(FrozenWireModel):
    """A form's schema as the submission pipeline sees it."""

    id: UUID
    fields: tuple[FieldSpec, ...]
    settings: FormSettings = FormSettings()
    status: FormStatus = FormStatus.DRAFT
    submission_count: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _unique_field_ids(self) -> "FormDefinition":
        ids = [field.id for field in self.fields]
        if len(ids) != len(set(ids)):
            raise ValueError("Field IDs must be unique within a form")
        return self

    def get_field(self, field_id: str) -> FieldSpec | None:
        for field in self.fields:
            if field.id == field_id:
                return field
        return None


# =============================================================================
# API payloads
# =============================================================================


class FormCreate(WireModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    # Raw definitions; structural checks run in form_schema.validate_schema so
    # that failures surface as SchemaError rather than generic 422s.
    fields: list[dict[str, Any]] = Field(default_factory=list)
    settings: FormSettings | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class FormUpdate(WireModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    fields: list[dict[str, Any]] | None = None
    settings: FormSettings | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class FormSummary(WireModel):
    id: UUID
    title: str
    description: str | None
    status: FormStatus
    submission_count: int
    created_at: datetime
    updated_at: datetime


class FormRead(FormSummary):
    fields: list[FieldSpec]
    settings: FormSettings


class FormListResponse(WireModel):
    items: list[FormSummary]
    total: int
    page: int
    per_page: int
    pages: int


class PublicFormSettings(WireModel):
    thank_you_message: str
    allow_anonymous: bool


class FormPublicRead(WireModel):
    id: UUID
    title: str
    description: str | None
    fields: list[FieldSpec]
    settings: PublicFormSettings


class FormStatsRead(WireModel):
    form_id: UUID
    title: str
    status: FormStatus
    total_submissions: int
    created_at: datetime
    first_submission: datetime | None = None
    last_submission: datetime | None = None
    average_per_day: float = 0.0
