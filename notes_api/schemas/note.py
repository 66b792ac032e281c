"""
Notes API — Pydantic Request/Response Schemas
==============================================

What:  Pydantic models defining the HTTP contract of the API.
How:   FastAPI validates request bodies against `NotePayload`, serializes
       responses through the response models, and generates OpenAPI docs.
Who:   Used by route handlers and by NoteService to build responses.

Wire format:
    Notes are exposed with camelCase `createdAt`. Python code uses the
    snake_case attribute; the field alias is used on output and
    `populate_by_name` lets services build models with the Python name.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from notes_api.models.note import (
    CONTENT_MAX_LENGTH,
    CONTENT_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What the client sends
# ══════════════════════════════════════════════════════════════════════════


class NotePayload(BaseModel):
    """
    Body of POST /notes and PUT /notes/{id}.

    Both fields are required on every write; there is no partial update.
    Unknown keys are rejected. The French field names used by earlier
    clients (`titre`, `contenu`) are accepted as input aliases.
    """
    title: str = Field(
        min_length=TITLE_MIN_LENGTH,
        max_length=TITLE_MAX_LENGTH,
        validation_alias=AliasChoices("title", "titre"),
        description="Note title (2-100 characters)",
    )
    content: str = Field(
        min_length=CONTENT_MIN_LENGTH,
        max_length=CONTENT_MAX_LENGTH,
        validation_alias=AliasChoices("content", "contenu"),
        description="Note body (2-1000 characters)",
    )

    model_config = {
        "extra": "forbid",
        "json_schema_extra": {
            "examples": [{"title": "Maths", "content": "Calcul integral"}],
        },
    }


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns to clients
# ══════════════════════════════════════════════════════════════════════════


class NoteResponse(BaseModel):
    """A stored note, as returned by every note route."""
    id: uuid.UUID = Field(description="Identifier assigned by the store")
    title: str
    content: str
    created_at: datetime = Field(
        alias="createdAt",
        description="Creation time (UTC ISO 8601)",
    )

    model_config = {"from_attributes": True, "populate_by_name": True}


class NoteListResponse(BaseModel):
    """
    Page of notes returned by GET /notes.

    Offset pagination: `page` is 1-based, `totalPages` is
    ceil(totalNotes / limit), and a page past the end has an empty `notes`.
    """
    page: int = Field(description="Current page (1-based)")
    total_pages: int = Field(alias="totalPages")
    total_notes: int = Field(alias="totalNotes")
    notes: List[NoteResponse]

    model_config = {"populate_by_name": True}


class NoteUpdateResponse(BaseModel):
    message: str = Field(default="Note modifiée avec succès")
    note: NoteResponse


class MessageResponse(BaseModel):
    message: str


class UploadResponse(BaseModel):
    """Returned by POST /upload with HTTP 201."""
    message: str = Field(default="Fichier uploadé avec succès")
    url: str = Field(description="Public URL of the stored file")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error envelope shared by all failing responses.

    Example:
        {"erreur": "Erreur serveur", "details": "connection refused"}
    """
    erreur: str = Field(description="Human-readable error message")
    details: Optional[str] = Field(default=None, description="Underlying error (5xx only)")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float
