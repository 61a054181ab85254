"""SQLAlchemy ORM models."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formdesk.db.base import Base
from formdesk.db.enums import FormStatus
from formdesk.schemas.forms import DEFAULT_THANK_YOU_MESSAGE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Form(Base):
    """Form definition plus its settings and submission counter."""

    __tablename__ = "forms"
    __table_args__ = (
        Index("idx_forms_status", "status"),
        Index("idx_forms_created", "created_at"),
        CheckConstraint("submission_count >= 0", name="ck_forms_submission_count"),
        CheckConstraint("submission_limit >= 0", name="ck_forms_submission_limit"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        default=FormStatus.DRAFT.value,
        server_default=text(f"'{FormStatus.DRAFT.value}'"),
        nullable=False,
    )

    # Field definitions in their wire shape
    fields_json: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Settings
    thank_you_message: Mapped[str] = mapped_column(
        String(500), default=DEFAULT_THANK_YOU_MESSAGE, nullable=False
    )
    submission_limit: Mapped[int] = mapped_column(
        Integer, default=0, server_default=text("0"), nullable=False
    )
    allow_anonymous: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notification_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Written only through the submission limit gate
    submission_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default=text("0"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    submissions: Mapped[list["Submission"]] = relationship(
        back_populates="form",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Submission(Base):
    """Accepted, sanitized response to a form."""

    __tablename__ = "submissions"
    __table_args__ = (
        Index("idx_submissions_form_submitted", "form_id", "submitted_at"),
        Index("idx_submissions_submitted", "submitted_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    form_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("forms.id", ondelete="CASCADE"), nullable=False
    )
    data_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    files_json: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    form: Mapped["Form"] = relationship(back_populates="submissions")
