"""
Notes API — Note SQLAlchemy Model
==================================

What:  ORM model representing the `notes` collection.
How:   Inherits from the project's DeclarativeBase; `init_models()` creates
       the table at startup.
Who:   Used by NoteService for CRUD operations.

Column Notes:
    - id: UUID assigned in Python on insert, so the same model works on
      PostgreSQL (native UUID) and SQLite (CHAR(32)) in tests
    - title / content: length bounds are enforced by the Validation Gate
      before any write; the column sizes mirror the same upper bounds
    - created_at: UTC, set once on insert and never updated
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from notes_api.database import Base

TITLE_MIN_LENGTH = 2
TITLE_MAX_LENGTH = 100
CONTENT_MIN_LENGTH = 2
CONTENT_MAX_LENGTH = 1000


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A short text note.

    Lifecycle:
        1. Created by POST /notes (id and created_at assigned here)
        2. title/content replaced by PUT /notes/{id}
        3. Removed by DELETE /notes/{id} (hard delete)
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        nullable=False,
    )

    content: Mapped[str] = mapped_column(
        String(CONTENT_MAX_LENGTH),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    # Default listing order is newest first
    __table_args__ = (
        Index("idx_notes_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}', created_at='{self.created_at}')>"
