"""Declarative base for the forms and submissions tables."""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    # Submission and form timestamps are always stored timezone-aware.
    type_annotation_map = {datetime: DateTime(timezone=True)}
