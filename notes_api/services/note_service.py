"""
Notes API — Note Service (Note Store)
======================================

What:  CRUD operations over the notes collection.
How:   Each method receives an AsyncSession, runs one database operation,
       commits writes, and returns response schemas.
Who:   Called by the /notes route handlers.

Operation Summary:
    create_note   → INSERT, returns the stored note
    list_notes    → COUNT + ordered SELECT with OFFSET/LIMIT
    list_all      → SELECT without ordering or paging
    get_note      → SELECT by primary key
    update_note   → replaces title/content, id and created_at untouched
    delete_note   → hard delete

Error Handling Strategy:
    - Missing rows and malformed identifiers raise NotFoundError (404)
    - Payloads are re-checked by the Validation Gate before any write
    - SQLAlchemy errors are wrapped in StorageError (500) carrying the
      driver message
"""

import logging
import math
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions import NotFoundError, StorageError
from notes_api.models.note import Note
from notes_api.schemas.note import NoteListResponse, NoteResponse
from notes_api.validation import validate_note_payload

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

# Query-string sort keys → columns. "date" and "matiere" are kept for
# clients of the earlier API.
SORT_FIELDS = {
    "createdAt": Note.created_at,
    "date": Note.created_at,
    "title": Note.title,
    "matiere": Note.title,
    "content": Note.content,
}
DEFAULT_SORT_FIELD = "createdAt"

# OFFSET/LIMIT are bound as 64-bit integers by every supported driver
MAX_SQL_INTEGER = 2**63 - 1


def parse_note_id(note_id: str) -> UUID:
    """
    Convert a path identifier into a UUID.

    Raises:
        NotFoundError: `note_id` is not a well-formed UUID.
    """
    try:
        return UUID(str(note_id))
    except ValueError:
        raise NotFoundError(resource_id=str(note_id))


def parse_positive_int(value: Optional[str], default: int) -> int:
    """
    Lenient query-param parsing: absent, non-numeric, < 1 or too large for
    a SQL BIGINT → default.
    """
    if value is None:
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if 1 <= parsed <= MAX_SQL_INTEGER else default


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_response(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        title=note.title,
        content=note.content,
        created_at=_as_utc(note.created_at),
    )


class NoteService:
    """
    Persistence layer for notes.

    Stateless apart from `max_page_size`: the session is passed to each
    call, so one instance serves every request.

    Args:
        max_page_size: Optional upper bound applied to `limit` in list_notes.
                       None leaves the page size unbounded.
    """

    def __init__(self, max_page_size: Optional[int] = None):
        self.max_page_size = max_page_size

    async def create_note(self, db: AsyncSession, title: str, content: str) -> NoteResponse:
        """
        Persist a new note.

        Returns:
            NoteResponse with the generated id and createdAt.

        Raises:
            ValidationError: title/content outside their bounds (→ 400)
            StorageError: Database write failed (→ 500)
        """
        payload = validate_note_payload({"title": title, "content": content})
        note = Note(title=payload.title, content=payload.content)

        try:
            db.add(note)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e))
            raise StorageError(message=str(e), context={"operation": "create"})

        logger.info("Note created: %s", note.id)
        return _to_response(note)

    async def list_notes(
        self,
        db: AsyncSession,
        page: int = DEFAULT_PAGE,
        limit: int = DEFAULT_PAGE_SIZE,
        sort_by: str = DEFAULT_SORT_FIELD,
        order: str = "desc",
    ) -> NoteListResponse:
        """
        Return one page of notes plus totals.

        Query plan:
            SELECT count(id) FROM notes
            SELECT * FROM notes ORDER BY <field> <dir> OFFSET (page-1)*limit LIMIT limit

        Args:
            page: 1-based page number
            limit: Items per page (capped by max_page_size when configured)
            sort_by: createdAt | date | title | matiere | content;
                     anything else falls back to createdAt
            order: "asc" for ascending, anything else descending

        Ties keep the database's natural order. A page past the last note
        is answered from the count alone, so a huge page number never
        reaches the driver as an out-of-range OFFSET.
        """
        page = max(page, 1)
        limit = max(limit, 1)
        if self.max_page_size is not None:
            limit = min(limit, self.max_page_size)

        column = SORT_FIELDS.get(sort_by, SORT_FIELDS[DEFAULT_SORT_FIELD])
        direction = asc if order == "asc" else desc
        offset = (page - 1) * limit

        try:
            count_result = await db.execute(select(func.count(Note.id)))
            total_notes = count_result.scalar() or 0

            notes = []
            if offset < total_notes:
                query = (
                    select(Note)
                    .order_by(direction(column))
                    .offset(offset)
                    .limit(min(limit, MAX_SQL_INTEGER))
                )
                result = await db.execute(query)
                notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise StorageError(message=str(e), context={"operation": "list"})

        return NoteListResponse(
            page=page,
            total_pages=math.ceil(total_notes / limit),
            total_notes=total_notes,
            notes=[_to_response(note) for note in notes],
        )

    async def list_all(self, db: AsyncSession) -> List[NoteResponse]:
        """Every note, unordered and unpaged."""
        try:
            result = await db.execute(select(Note))
            notes = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing all notes: %s", str(e))
            raise StorageError(message=str(e), context={"operation": "list_all"})
        return [_to_response(note) for note in notes]

    async def _load(self, db: AsyncSession, note_id: str) -> Note:
        uuid_value = parse_note_id(note_id)
        try:
            note = await db.get(Note, uuid_value)
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise StorageError(message=str(e), context={"note_id": str(note_id)})

        if note is None:
            raise NotFoundError(resource_id=str(note_id))
        return note

    async def get_note(self, db: AsyncSession, note_id: str) -> NoteResponse:
        """
        Retrieve a single note by id.

        Raises:
            NotFoundError: No such note, or `note_id` is not a UUID (→ 404)
            StorageError: Query failed (→ 500)
        """
        note = await self._load(db, note_id)
        return _to_response(note)

    async def update_note(
        self,
        db: AsyncSession,
        note_id: str,
        title: str,
        content: str,
    ) -> NoteResponse:
        """
        Replace title and content of an existing note.

        The payload is validated before the lookup, so an invalid body is
        reported as 400 even for an unknown id. id and created_at are never
        modified.
        """
        payload = validate_note_payload({"title": title, "content": content})
        note = await self._load(db, note_id)

        note.title = payload.title
        note.content = payload.content
        try:
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e))
            raise StorageError(message=str(e), context={"note_id": str(note_id)})

        logger.info("Note updated: %s", note.id)
        return _to_response(note)

    async def delete_note(self, db: AsyncSession, note_id: str) -> None:
        """Remove a note permanently. Raises NotFoundError if it does not exist."""
        note = await self._load(db, note_id)
        try:
            await db.delete(note)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise StorageError(message=str(e), context={"note_id": str(note_id)})

        logger.info("Note deleted: %s", note_id)
