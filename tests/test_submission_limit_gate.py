"""Tests for atomic submission-limit reservations."""

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from formdesk.core.config import Settings
from formdesk.core.errors import LimitExceeded
from formdesk.db.base import Base
from formdesk.db.enums import FormStatus
from formdesk.db.models import Form
from formdesk.db.session import build_engine, build_session_factory
from formdesk.services import form_service
from formdesk.services.submission_limit_gate import SqlSubmissionCounter, SubmissionLimitGate


class InMemorySubmissionCounter:
    """Lock-guarded counter for exercising the gate without a database."""

    def __init__(self) -> None:
        self._counts: dict[uuid.UUID, int] = {}
        self._lock = threading.Lock()

    def try_increment(self, form) -> bool:
        limit = form.settings.submission_limit
        with self._lock:
            current = self._counts.setdefault(form.id, form.submission_count)
            if limit and current >= limit:
                return False
            self._counts[form.id] = current + 1
            return True

    def decrement(self, form_id: uuid.UUID) -> None:
        with self._lock:
            current = self._counts.get(form_id, 0)
            if current > 0:
                self._counts[form_id] = current - 1

    def count(self, form_id: uuid.UUID) -> int:
        with self._lock:
            return self._counts.get(form_id, 0)


def _reserve_all(gate, form, attempts: int) -> list[bool]:
    barrier = threading.Barrier(attempts)

    def attempt(_):
        barrier.wait()
        try:
            gate.try_reserve(form)
        except LimitExceeded:
            return False
        return True

    with ThreadPoolExecutor(max_workers=attempts) as pool:
        return list(pool.map(attempt, range(attempts)))


@pytest.mark.parametrize("limit", [1, 5, 17])
def test_exactly_limit_concurrent_reservations_succeed(make_definition, limit):
    form = make_definition(submission_limit=limit)
    counter = InMemorySubmissionCounter()
    gate = SubmissionLimitGate(counter)

    results = _reserve_all(gate, form, attempts=40)

    assert results.count(True) == limit
    assert counter.count(form.id) == limit


def test_zero_limit_means_unlimited(make_definition):
    form = make_definition(submission_limit=0)
    counter = InMemorySubmissionCounter()
    gate = SubmissionLimitGate(counter)

    for _ in range(50):
        gate.try_reserve(form)

    assert counter.count(form.id) == 50


def test_counter_starts_from_stored_count(make_definition):
    form = make_definition(submission_limit=3, submission_count=2)
    gate = SubmissionLimitGate(InMemorySubmissionCounter())

    gate.try_reserve(form)
    with pytest.raises(LimitExceeded):
        gate.try_reserve(form)


def test_rejection_does_not_mutate_count(make_definition):
    form = make_definition(submission_limit=1)
    counter = InMemorySubmissionCounter()
    gate = SubmissionLimitGate(counter)

    gate.try_reserve(form)
    for _ in range(3):
        with pytest.raises(LimitExceeded):
            gate.try_reserve(form)

    assert counter.count(form.id) == 1


def test_reservation_is_released_when_body_fails(make_definition):
    form = make_definition(submission_limit=1)
    counter = InMemorySubmissionCounter()
    gate = SubmissionLimitGate(counter)

    with pytest.raises(RuntimeError):
        with gate.reservation(form):
            raise RuntimeError("disk full")

    assert counter.count(form.id) == 0
    with gate.reservation(form):
        pass
    assert counter.count(form.id) == 1


def test_release_never_goes_below_zero(make_definition):
    form = make_definition()
    counter = InMemorySubmissionCounter()
    gate = SubmissionLimitGate(counter)

    gate.release(form.id)

    assert counter.count(form.id) == 0


def _stored_form(db, limit: int, count: int = 0) -> Form:
    form = Form(
        title="Limited",
        status=FormStatus.PUBLISHED.value,
        fields_json=[{"id": "name", "type": "text", "label": "Name"}],
        submission_limit=limit,
        submission_count=count,
    )
    db.add(form)
    db.commit()
    db.refresh(form)
    return form


def test_sql_counter_enforces_limit(db):
    row = _stored_form(db, limit=2)
    gate = SubmissionLimitGate(SqlSubmissionCounter(db))
    definition = form_service.to_definition(row)

    gate.try_reserve(definition)
    gate.try_reserve(definition)
    with pytest.raises(LimitExceeded):
        gate.try_reserve(definition)

    db.refresh(row)
    assert row.submission_count == 2


def test_sql_counter_release_and_floor(db):
    row = _stored_form(db, limit=0, count=1)
    gate = SubmissionLimitGate(SqlSubmissionCounter(db))

    gate.release(row.id)
    gate.release(row.id)

    db.refresh(row)
    assert row.submission_count == 0


def test_sql_counter_unlimited_form(db):
    row = _stored_form(db, limit=0)
    gate = SubmissionLimitGate(SqlSubmissionCounter(db))
    definition = form_service.to_definition(row)

    for _ in range(5):
        gate.try_reserve(definition)

    db.refresh(row)
    assert row.submission_count == 5


def test_sql_counter_concurrent_reservations_across_sessions(tmp_path):
    engine = build_engine(
        Settings(_env_file=None, DATABASE_URL=f"sqlite:///{tmp_path / 'gate.db'}")
    )
    Base.metadata.create_all(bind=engine)
    session_factory = build_session_factory(engine)
    attempts = 30

    try:
        setup = session_factory()
        try:
            row = _stored_form(setup, limit=5)
            definition = form_service.to_definition(row)
        finally:
            setup.close()

        barrier = threading.Barrier(attempts)

        def attempt(_):
            session = session_factory()
            try:
                gate = SubmissionLimitGate(SqlSubmissionCounter(session))
                barrier.wait()
                try:
                    gate.try_reserve(definition)
                except LimitExceeded:
                    return False
                return True
            finally:
                session.close()

        with ThreadPoolExecutor(max_workers=attempts) as pool:
            results = list(pool.map(attempt, range(attempts)))

        check = session_factory()
        try:
            stored = check.get(Form, definition.id)
            assert results.count(True) == 5
            assert stored.submission_count == 5
        finally:
            check.close()
    finally:
        engine.dispose()
