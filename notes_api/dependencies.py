"""
Notes API — Service Dependencies
=================================

FastAPI dependencies returning the service instances that `create_app()`
built from Settings and stored on `app.state`. Tests replace them through
`app.dependency_overrides`.
"""

from fastapi import Request

from notes_api.services.file_service import FileService
from notes_api.services.note_service import NoteService


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service
