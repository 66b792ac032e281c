"""
Notes API — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception carries a message and optional context dict. Global
       exception handlers (registered in main.py) catch these and return the
       JSON error envelope with the matching HTTP status code.
Who:   Raised by services and routes; caught by global handlers.

Exception Hierarchy:
    NotesApiError (base)
    ├── ValidationError   → 400 Bad Request
    ├── NotFoundError     → 404 Not Found
    ├── UploadError       → 400 Bad Request
    ├── FileStorageError  → 500 Internal Server Error
    └── StorageError      → 500 Internal Server Error

Error envelope (all handlers):
    {"erreur": "<message>"}                                  4xx
    {"erreur": "Erreur serveur", "details": "<message>"}     5xx
"""

from typing import Any, Dict, Optional

NOTE_NOT_FOUND_MESSAGE = "Note non trouvée."
NO_FILE_MESSAGE = "Aucun fichier envoyé."


class NotesApiError(Exception):
    """
    Base exception for all Notes API errors.

    Attributes:
        message:  Error description returned in the API response
        context:  Additional debug info (logged, not returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotesApiError):
    """
    Raised when a note payload fails the schema check.

    HTTP: 400 Bad Request, message is the first violated constraint, e.g.
        {"erreur": "\"title\" length must be at least 2 characters long"}
    """

    def __init__(
        self,
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotesApiError):
    """
    Raised when a requested note does not exist.

    Also raised for identifiers that are not well-formed UUIDs: such an id
    can never match a stored note.

    HTTP: 404 Not Found, {"erreur": "Note non trouvée."}
    """

    def __init__(
        self,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=NOTE_NOT_FOUND_MESSAGE, context=ctx)


class UploadError(NotesApiError):
    """
    Raised when an upload request cannot be accepted.

    When:  No file in the request, or a configured size/extension cap is violated.
    HTTP:  400 Bad Request
    """

    def __init__(
        self,
        message: str = NO_FILE_MESSAGE,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(NotesApiError):
    """
    Raised when writing an uploaded file to disk fails.

    When:  Disk full, permission denied, directory not writable, I/O error.
    HTTP:  500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(NotesApiError):
    """
    Raised when a database operation fails.

    What:    Wraps SQLAlchemy/driver errors (unreachable server, lost
             connection, constraint violation).
    HTTP:    500 Internal Server Error; the driver message is returned in
             the `details` field of the envelope.
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
