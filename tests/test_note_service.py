"""
Notes API — Note Service Unit Tests
====================================

What:  Tests for NoteService (create, list, get, update, delete).
How:   Uses mock DB sessions (no real database).

What we test:
    ✅ Create validates before touching the session
    ✅ Not found and malformed ids raise NotFoundError
    ✅ Pagination totals and the page-size cap
    ✅ SQLAlchemy failures surface as StorageError
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from notes_api.exceptions import NotFoundError, StorageError, ValidationError
from notes_api.services.note_service import (
    MAX_SQL_INTEGER,
    NoteService,
    parse_note_id,
    parse_positive_int,
)


def make_note(title="Maths", content="Calcul integral"):
    note = MagicMock()
    note.id = uuid4()
    note.title = title
    note.content = content
    note.created_at = datetime.now(timezone.utc)
    return note


def db_failure():
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


class TestNoteServiceCreate:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_create_note_success(self, mock_db_session):
        """The store assigns id and created_at on insert."""
        def assign_defaults(note):
            note.id = uuid4()
            note.created_at = datetime.now(timezone.utc)

        mock_db_session.add.side_effect = assign_defaults

        result = await self.service.create_note(mock_db_session, "Maths", "Calcul integral")

        assert result.title == "Maths"
        assert result.content == "Calcul integral"
        assert result.id is not None
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_note_invalid_payload_skips_db(self, mock_db_session):
        with pytest.raises(ValidationError, match="at least 2 characters"):
            await self.service.create_note(mock_db_session, "M", "Calcul integral")

        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_note_db_failure(self, mock_db_session):
        mock_db_session.commit.side_effect = db_failure()

        with pytest.raises(StorageError, match="connection refused"):
            await self.service.create_note(mock_db_session, "Maths", "Calcul integral")


class TestNoteServiceGet:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_get_note_found(self, mock_db_session):
        note = make_note()
        mock_db_session.get.return_value = note

        result = await self.service.get_note(mock_db_session, str(note.id))

        assert result.id == note.id
        assert result.title == "Maths"
        assert result.created_at == note.created_at

    @pytest.mark.asyncio
    async def test_get_note_naive_timestamp_read_as_utc(self, mock_db_session):
        """SQLite returns created_at without tzinfo."""
        note = make_note()
        note.created_at = datetime(2024, 1, 15, 12, 0, 0, 123456)
        mock_db_session.get.return_value = note

        result = await self.service.get_note(mock_db_session, str(note.id))

        assert result.created_at == datetime(2024, 1, 15, 12, 0, 0, 123456, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_get_note_not_found(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_note(mock_db_session, str(uuid4()))

        assert exc_info.value.message == "Note non trouvée."

    @pytest.mark.asyncio
    async def test_get_note_malformed_id(self, mock_db_session):
        """An id that is not a UUID can never match; the DB is not queried."""
        with pytest.raises(NotFoundError):
            await self.service.get_note(mock_db_session, "not-a-valid-id")

        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_note_db_failure(self, mock_db_session):
        mock_db_session.get.side_effect = db_failure()

        with pytest.raises(StorageError):
            await self.service.get_note(mock_db_session, str(uuid4()))


class TestNoteServiceList:

    def setup_method(self):
        self.service = NoteService()

    @staticmethod
    def _results(total, notes):
        count_result = MagicMock()
        count_result.scalar.return_value = total
        list_result = MagicMock()
        list_result.scalars.return_value.all.return_value = notes
        return [count_result, list_result]

    @pytest.mark.asyncio
    async def test_list_notes_empty(self, mock_db_session):
        mock_db_session.execute.side_effect = self._results(0, [])

        result = await self.service.list_notes(mock_db_session)

        assert result.page == 1
        assert result.notes == []
        assert result.total_notes == 0
        assert result.total_pages == 0

    @pytest.mark.asyncio
    async def test_list_notes_page_totals(self, mock_db_session):
        notes = [make_note(title=f"Note {i}") for i in range(5)]
        mock_db_session.execute.side_effect = self._results(12, notes)

        result = await self.service.list_notes(mock_db_session, page=1, limit=5)

        assert len(result.notes) == 5
        assert result.total_notes == 12
        assert result.total_pages == 3

    @pytest.mark.asyncio
    async def test_list_notes_serializes_camel_case(self, mock_db_session):
        mock_db_session.execute.side_effect = self._results(1, [make_note()])

        result = await self.service.list_notes(mock_db_session)
        body = result.model_dump(by_alias=True)

        assert set(body) == {"page", "totalPages", "totalNotes", "notes"}
        assert "createdAt" in body["notes"][0]

    @pytest.mark.asyncio
    async def test_list_notes_page_size_cap(self, mock_db_session):
        service = NoteService(max_page_size=4)
        mock_db_session.execute.side_effect = self._results(10, [])

        result = await service.list_notes(mock_db_session, page=1, limit=50)

        assert result.total_pages == 3  # ceil(10 / 4)

    @pytest.mark.asyncio
    async def test_list_notes_past_last_page_skips_select(self, mock_db_session):
        mock_db_session.execute.side_effect = self._results(3, [])

        result = await self.service.list_notes(mock_db_session, page=2**62, limit=10)

        assert result.notes == []
        assert result.total_notes == 3
        assert mock_db_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_list_notes_db_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = db_failure()

        with pytest.raises(StorageError):
            await self.service.list_notes(mock_db_session)

    @pytest.mark.asyncio
    async def test_list_all(self, mock_db_session):
        notes = [make_note(title=f"Note {i}") for i in range(3)]
        list_result = MagicMock()
        list_result.scalars.return_value.all.return_value = notes
        mock_db_session.execute.return_value = list_result

        result = await self.service.list_all(mock_db_session)

        assert [n.title for n in result] == ["Note 0", "Note 1", "Note 2"]


class TestNoteServiceUpdateDelete:

    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_update_note_replaces_fields(self, mock_db_session):
        note = make_note()
        original_id, original_created = note.id, note.created_at
        mock_db_session.get.return_value = note

        result = await self.service.update_note(
            mock_db_session, str(note.id), "Physique", "Mecanique quantique"
        )

        assert result.title == "Physique"
        assert result.content == "Mecanique quantique"
        assert result.id == original_id
        assert result.created_at == original_created
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_note_validates_before_lookup(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.update_note(mock_db_session, str(uuid4()), "P", "Mecanique")

        mock_db_session.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_note_not_found(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.update_note(mock_db_session, str(uuid4()), "Physique", "Mecanique")

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_note(self, mock_db_session):
        note = make_note()
        mock_db_session.get.return_value = note

        await self.service.delete_note(mock_db_session, str(note.id))

        mock_db_session.delete.assert_awaited_once_with(note)
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_note_not_found(self, mock_db_session):
        mock_db_session.get.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.delete_note(mock_db_session, str(uuid4()))

        mock_db_session.delete.assert_not_awaited()


class TestParsing:

    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, 10),
            ("3", 3),
            (" 7 ", 7),
            ("abc", 10),
            ("0", 10),
            ("-2", 10),
            ("2.5", 10),
            (str(MAX_SQL_INTEGER), MAX_SQL_INTEGER),
            (str(MAX_SQL_INTEGER + 1), 10),
            ("99999999999999999999", 10),
        ],
    )
    def test_parse_positive_int(self, value, expected):
        assert parse_positive_int(value, 10) == expected

    def test_parse_note_id_accepts_uuid(self):
        note_id = uuid4()
        assert parse_note_id(str(note_id)) == note_id

    def test_parse_note_id_rejects_garbage(self):
        with pytest.raises(NotFoundError) as exc_info:
            parse_note_id("64b7f0c2e4b0a1a2b3c4d5e6")

        assert exc_info.value.message == "Note non trouvée."
        assert exc_info.value.context == {"resource_id": "64b7f0c2e4b0a1a2b3c4d5e6"}
