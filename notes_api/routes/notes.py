"""
Notes API — Notes Route Handlers
=================================

What:  CRUD endpoints for notes.
How:   FastAPI validates the body against NotePayload, the handler delegates
       to NoteService, and the response model serializes the result.

Only the paginated listing is bound to GET /notes. The unpaged variant
exists as NoteService.list_all() and has no route.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.database import get_db_session
from notes_api.dependencies import get_note_service
from notes_api.schemas.note import (
    ErrorResponse,
    MessageResponse,
    NoteListResponse,
    NotePayload,
    NoteResponse,
    NoteUpdateResponse,
)
from notes_api.services.note_service import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT_FIELD,
    NoteService,
    parse_positive_int,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])


@router.post(
    "/notes",
    status_code=201,
    response_model=NoteResponse,
    responses={
        400: {"description": "Invalid payload", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a note",
)
async def create_note(
    payload: NotePayload,
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteResponse:
    return await notes.create_note(db=db, title=payload.title, content=payload.content)


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List notes with pagination",
    description=(
        "Returns one page of notes with the total count and page count. "
        "Example: GET /notes?page=1&limit=5&sortBy=createdAt&order=desc"
    ),
)
async def list_notes(
    page: Optional[str] = Query(default=None, description="Page number, 1-based (default 1)"),
    limit: Optional[str] = Query(default=None, description="Items per page (default 10)"),
    sort_by: Optional[str] = Query(
        default=None,
        alias="sortBy",
        description="Sort field: createdAt (default), title or content",
    ),
    order: Optional[str] = Query(default=None, description="'asc' or 'desc' (default)"),
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteListResponse:
    """
    Query parameters are parsed leniently: a missing or non-numeric page or
    limit falls back to its default instead of failing the request.
    """
    return await notes.list_notes(
        db=db,
        page=parse_positive_int(page, DEFAULT_PAGE),
        limit=parse_positive_int(limit, DEFAULT_PAGE_SIZE),
        sort_by=sort_by or DEFAULT_SORT_FIELD,
        order=(order or "desc").lower(),
    )


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single note by ID",
)
async def get_note(
    note_id: str,
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteResponse:
    return await notes.get_note(db=db, note_id=note_id)


@router.put(
    "/notes/{note_id}",
    response_model=NoteUpdateResponse,
    responses={
        400: {"description": "Invalid payload", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Replace a note's title and content",
)
async def update_note(
    note_id: str,
    payload: NotePayload,
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> NoteUpdateResponse:
    note = await notes.update_note(
        db=db,
        note_id=note_id,
        title=payload.title,
        content=payload.content,
    )
    return NoteUpdateResponse(message="Note modifiée avec succès", note=note)


@router.delete(
    "/notes/{note_id}",
    response_model=MessageResponse,
    responses={
        404: {"description": "Note not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    db: AsyncSession = Depends(get_db_session),
    notes: NoteService = Depends(get_note_service),
) -> MessageResponse:
    await notes.delete_note(db=db, note_id=note_id)
    return MessageResponse(message="Note supprimée avec succès")
