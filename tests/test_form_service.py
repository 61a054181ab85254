"""Tests for form lifecycle operations."""

import pytest

from formdesk.core.errors import CannotPublish, DuplicateFieldId, FormStateError
from formdesk.db.enums import FormStatus
from formdesk.db.models import Form, Submission
from formdesk.schemas.forms import FormCreate, FormSettings, FormUpdate
from formdesk.services import form_service
from formdesk.utils.pagination import PaginationParams


def _create(db, title="Feedback", fields=None, **kwargs) -> Form:
    fields = fields if fields is not None else [{"id": "name", "type": "text", "label": "Name"}]
    return form_service.create_form(db, FormCreate(title=title, fields=fields, **kwargs))


def test_create_form_starts_as_draft(db):
    form = _create(db, title="  Feedback  ", settings=FormSettings(submission_limit=10))

    assert form.title == "Feedback"
    assert form.status == FormStatus.DRAFT.value
    assert form.submission_count == 0
    assert form.submission_limit == 10
    assert form.thank_you_message == "Thank you for your submission!"
    assert form.fields_json[0]["type"] == "text"


def test_create_form_rejects_duplicate_ids_before_persisting(db):
    with pytest.raises(DuplicateFieldId):
        _create(
            db,
            fields=[
                {"id": "name", "type": "text", "label": "Name"},
                {"id": "name", "type": "email", "label": "Email"},
            ],
        )

    assert db.query(Form).count() == 0


def test_publish_requires_fields(db):
    form = _create(db, fields=[])

    with pytest.raises(CannotPublish, match="Cannot publish form without fields"):
        form_service.publish_form(db, form)
    assert form.status == FormStatus.DRAFT.value


def test_publish_and_unpublish(db):
    form = form_service.publish_form(db, _create(db))
    assert form_service.get_published_form(db, form.id) is not None

    form_service.unpublish_form(db, form)
    assert form_service.get_published_form(db, form.id) is None


def test_published_fields_are_locked(db):
    form = form_service.publish_form(db, _create(db))

    with pytest.raises(FormStateError):
        form_service.update_form(
            db, form, FormUpdate(fields=[{"id": "email", "type": "email", "label": "Email"}])
        )

    updated = form_service.update_form(db, form, FormUpdate(title="Renamed"))
    assert updated.title == "Renamed"


def test_update_draft_fields_and_settings(db):
    form = _create(db)

    updated = form_service.update_form(
        db,
        form,
        FormUpdate(
            fields=[{"id": "email", "type": "email", "label": "Email", "required": True}],
            settings=FormSettings(thank_you_message="Cheers", allow_anonymous=False),
        ),
    )

    definition = form_service.to_definition(updated)
    assert [field.id for field in definition.fields] == ["email"]
    assert definition.settings.thank_you_message == "Cheers"
    assert definition.settings.allow_anonymous is False


def test_duplicate_form_resets_state(db):
    form = form_service.publish_form(db, _create(db, settings=FormSettings(submission_limit=3)))
    form.submission_count = 2
    db.commit()

    copy = form_service.duplicate_form(db, form)

    assert copy.id != form.id
    assert copy.title == "Feedback (Copy)"
    assert copy.status == FormStatus.DRAFT.value
    assert copy.submission_count == 0
    assert copy.submission_limit == 3
    assert copy.fields_json == form.fields_json


def test_list_forms_filters_and_paginates(db):
    for index in range(3):
        _create(db, title=f"Survey {index}")
    published = form_service.publish_form(db, _create(db, title="Contact"))

    forms, total = form_service.list_forms(db, PaginationParams(page=1, per_page=2))
    assert total == 4
    assert len(forms) == 2

    forms, total = form_service.list_forms(
        db, PaginationParams(), status=FormStatus.PUBLISHED
    )
    assert [form.id for form in forms] == [published.id]

    forms, total = form_service.list_forms(db, PaginationParams(), search="survey")
    assert total == 3


def test_delete_form_removes_submissions(db, published_form):
    db.add(Submission(form_id=published_form.id, data_json={"name": "Jo"}, files_json=[]))
    db.commit()

    form_service.delete_form(db, published_form)

    assert db.query(Form).count() == 0
    assert db.query(Submission).count() == 0
