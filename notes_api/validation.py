"""
Notes API — Validation Gate
============================

What:  Turns schema violations on a note payload into one readable message.
How:   `NotePayload` (pydantic) does the checking; this module renders the
       first reported error as a sentence such as
       `"title" length must be at least 2 characters long`.
Who:   The RequestValidationError handler in main.py, and NoteService, which
       re-checks title/content before every write.

Only the first violation is reported, in pydantic's field order
(title before content).
"""

from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from notes_api.exceptions import ValidationError
from notes_api.schemas.note import NotePayload


def _field_label(loc: Sequence[Any]) -> str:
    # FastAPI prefixes body errors with "body"; it is not a field name
    parts = [str(part) for part in loc if part != "body"]
    return f'"{".".join(parts)}"' if parts else '"value"'


def describe_validation_error(errors: Sequence[Mapping[str, Any]]) -> str:
    """
    Render the first pydantic error as a human-readable message.

    Args:
        errors: `exc.errors()` from a pydantic ValidationError or a FastAPI
                RequestValidationError.

    Returns:
        A single sentence naming the field and the violated constraint.
    """
    if not errors:
        return "Invalid request"

    error = errors[0]
    label = _field_label(error.get("loc", ()))
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}

    if kind == "missing":
        return f"{label} is required"
    if kind == "string_too_short":
        if error.get("input") == "":
            return f"{label} is not allowed to be empty"
        return f"{label} length must be at least {ctx.get('min_length')} characters long"
    if kind == "string_too_long":
        return (
            f"{label} length must be less than or equal to "
            f"{ctx.get('max_length')} characters long"
        )
    if kind == "string_type":
        return f"{label} must be a string"
    if kind == "extra_forbidden":
        return f"{label} is not allowed"
    if kind in ("model_attributes_type", "model_type", "dict_type"):
        return '"value" must be of type object'
    if kind == "json_invalid":
        return "Request body is not valid JSON"
    return f"{label} {error.get('msg', 'is invalid')}"


def check_note_payload(data: Any) -> Optional[str]:
    """
    Pure check of a candidate note payload.

    Returns None when the payload is valid, otherwise the message describing
    the first violated constraint.
    """
    try:
        NotePayload.model_validate(data)
    except PydanticValidationError as exc:
        return describe_validation_error(exc.errors())
    return None


def validate_note_payload(data: Any) -> NotePayload:
    """Parse `data` into a NotePayload or raise the API's ValidationError."""
    try:
        return NotePayload.model_validate(data)
    except PydanticValidationError as exc:
        message = describe_validation_error(exc.errors())
        raise ValidationError(message=message, context={"errors": exc.error_count()})
