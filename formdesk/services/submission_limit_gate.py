"""Submission-count reservations against a form's submission limit.

The counter behind the gate must perform read-compare-increment as one
atomic step. ``SqlSubmissionCounter`` issues a single conditional ``UPDATE``
and reads ``rowcount``; the database serializes concurrent writers on the row.

A reservation that is not followed by a durable submission must be
released; ``SubmissionLimitGate.reservation`` does this automatically.
Deleting a submission is the only other caller of ``release``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from formdesk.core.errors import LimitExceeded
from formdesk.db.models import Form
from formdesk.schemas.forms import FormDefinition

logger = logging.getLogger(__name__)


class SubmissionCounter(Protocol):
    def try_increment(self, form: FormDefinition) -> bool:
        """Atomically increment unless the form's limit is reached."""
        ...

    def decrement(self, form_id: uuid.UUID) -> None:
        """Decrement by one, never below zero."""
        ...


class SqlSubmissionCounter:
    """Counter stored on ``forms.submission_count``.

    Each call commits so the reservation is durable, and the row lock is
    released, before the submission itself is written.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def try_increment(self, form: FormDefinition) -> bool:
        stmt = (
            update(Form)
            .where(
                Form.id == form.id,
                or_(
                    Form.submission_limit == 0,
                    Form.submission_count < Form.submission_limit,
                ),
            )
            .values(submission_count=Form.submission_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        self.db.commit()
        return result.rowcount == 1

    def decrement(self, form_id: uuid.UUID) -> None:
        stmt = (
            update(Form)
            .where(Form.id == form_id, Form.submission_count > 0)
            .values(submission_count=Form.submission_count - 1)
            .execution_options(synchronize_session=False)
        )
        self.db.execute(stmt)
        self.db.commit()


class SubmissionLimitGate:
    """The only writer of a form's submission count."""

    def __init__(self, counter: SubmissionCounter) -> None:
        self.counter = counter

    def try_reserve(self, form: FormDefinition) -> None:
        if not self.counter.try_increment(form):
            logger.info(
                "Submission limit reached for form %s (limit=%s)",
                form.id,
                form.settings.submission_limit,
            )
            raise LimitExceeded()

    def release(self, form_id: uuid.UUID) -> None:
        self.counter.decrement(form_id)

    @contextmanager
    def reservation(self, form: FormDefinition) -> Iterator[None]:
        """Reserve a slot; release it if the body raises."""
        self.try_reserve(form)
        try:
            yield
        except BaseException:
            logger.warning("Rolling back submission reservation for form %s", form.id)
            self.release(form.id)
            raise
