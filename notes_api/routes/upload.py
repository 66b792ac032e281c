"""
Notes API — Upload Route Handler
=================================

What:  POST /upload stores one file and returns its public URL.
How:   Reads the multipart form, picks the file under the `fichier` field
       (or `file`), delegates storage to FileService, and builds the URL
       from the request's scheme and host via the /uploads mount.

Request Flow:
    1. Client sends multipart/form-data with a `fichier` field
    2. No file in the form → UploadError (400, "Aucun fichier envoyé.")
    3. FileService applies configured caps and writes the file
    4. 201 Created with {"message", "url"}
"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import FormData, UploadFile

from notes_api.dependencies import get_file_service
from notes_api.exceptions import UploadError
from notes_api.schemas.note import ErrorResponse, UploadResponse
from notes_api.services.file_service import FileService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Upload"])

# Form fields checked for the uploaded file, in order
UPLOAD_FIELDS = ("fichier", "file")


def _pick_upload(form: FormData) -> Optional[UploadFile]:
    for field in UPLOAD_FIELDS:
        candidate = form.get(field)
        if isinstance(candidate, UploadFile):
            return candidate
    return None


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={
        400: {"description": "No file in the request", "model": ErrorResponse},
        500: {"description": "Could not store the file", "model": ErrorResponse},
    },
    summary="Upload a single file",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "fichier": {"type": "string", "format": "binary"},
                        },
                        "required": ["fichier"],
                    }
                }
            },
        }
    },
)
async def upload_file(
    request: Request,
    file_service: FileService = Depends(get_file_service),
) -> UploadResponse:
    async with request.form() as form:
        upload = _pick_upload(form)
        if upload is None:
            raise UploadError()

        try:
            content = await upload.read()
            logger.info(
                "Received upload: filename=%s, size=%d bytes",
                upload.filename or "unknown",
                len(content),
            )
            stored_name = await file_service.store_upload(upload.filename, content)
        finally:
            await upload.close()

    # Names may contain '#', '?' or '%'
    url = str(request.url_for("uploads", path=quote(stored_name)))
    return UploadResponse(message="Fichier uploadé avec succès", url=url)
