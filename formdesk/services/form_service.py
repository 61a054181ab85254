"""Form service: create, edit, publish and duplicate form definitions."""

import logging
import uuid

from sqlalchemy import delete, or_
from sqlalchemy.orm import Session

from formdesk.core.errors import CannotPublish, FormStateError
from formdesk.db.enums import FormStatus
from formdesk.db.models import Form, Submission
from formdesk.schemas.forms import FormCreate, FormDefinition, FormSettings, FormUpdate
from formdesk.services import form_schema
from formdesk.utils.pagination import PaginationParams, paginate_query

logger = logging.getLogger(__name__)


def list_forms(
    db: Session,
    pagination: PaginationParams,
    status: FormStatus | None = None,
    search: str | None = None,
) -> tuple[list[Form], int]:
    query = db.query(Form)
    if status:
        query = query.filter(Form.status == status.value)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Form.title.ilike(pattern), Form.description.ilike(pattern)))
    query = query.order_by(Form.created_at.desc(), Form.id.desc())
    return paginate_query(query, pagination)


def get_form(db: Session, form_id: uuid.UUID) -> Form | None:
    return db.query(Form).filter(Form.id == form_id).first()


def get_published_form(db: Session, form_id: uuid.UUID) -> Form | None:
    return (
        db.query(Form)
        .filter(Form.id == form_id, Form.status == FormStatus.PUBLISHED.value)
        .first()
    )


def get_settings(form: Form) -> FormSettings:
    return FormSettings(
        thank_you_message=form.thank_you_message,
        submission_limit=form.submission_limit,
        allow_anonymous=form.allow_anonymous,
        notification_email=form.notification_email,
    )


def to_definition(form: Form) -> FormDefinition:
    return form_schema.build_definition(
        form_id=form.id,
        raw_fields=form.fields_json or [],
        settings=get_settings(form),
        status=FormStatus(form.status),
        submission_count=form.submission_count,
    )


def _apply_settings(form: Form, settings: FormSettings) -> None:
    form.thank_you_message = settings.thank_you_message
    form.submission_limit = settings.submission_limit
    form.allow_anonymous = settings.allow_anonymous
    form.notification_email = settings.notification_email


def create_form(db: Session, payload: FormCreate) -> Form:
    fields = form_schema.parse_fields(payload.fields)
    form = Form(
        title=payload.title,
        description=payload.description,
        status=FormStatus.DRAFT.value,
        fields_json=form_schema.dump_fields(fields),
        submission_count=0,
    )
    _apply_settings(form, payload.settings or FormSettings())
    db.add(form)
    db.commit()
    db.refresh(form)
    return form


def update_form(db: Session, form: Form, payload: FormUpdate) -> Form:
    if payload.fields is not None:
        if form.status == FormStatus.PUBLISHED.value:
            raise FormStateError("Unpublish the form before changing its fields")
        fields = form_schema.parse_fields(payload.fields)
        form.fields_json = form_schema.dump_fields(fields)
    if payload.title is not None:
        form.title = payload.title
    if payload.description is not None:
        form.description = payload.description
    if payload.settings is not None:
        _apply_settings(form, payload.settings)

    db.commit()
    db.refresh(form)
    return form


def publish_form(db: Session, form: Form) -> Form:
    definition = to_definition(form)
    if not form_schema.can_publish(definition):
        raise CannotPublish("Cannot publish form without fields")

    form.status = FormStatus.PUBLISHED.value
    db.commit()
    db.refresh(form)
    logger.info("Published form %s", form.id)
    return form


def unpublish_form(db: Session, form: Form) -> Form:
    form.status = FormStatus.DRAFT.value
    db.commit()
    db.refresh(form)
    logger.info("Unpublished form %s", form.id)
    return form


def duplicate_form(db: Session, form: Form) -> Form:
    copy = Form(
        title=f"{form.title} (Copy)"[:200],
        description=form.description,
        status=FormStatus.DRAFT.value,
        fields_json=list(form.fields_json or []),
        submission_count=0,
    )
    _apply_settings(copy, get_settings(form))
    db.add(copy)
    db.commit()
    db.refresh(copy)
    return copy


def delete_form(db: Session, form: Form) -> None:
    form_id = form.id
    db.execute(delete(Submission).where(Submission.form_id == form_id))
    db.delete(form)
    db.commit()
    logger.info("Deleted form %s and its submissions", form_id)
