"""
Notekeeper Backend: Notes Route Handlers
=========================================

What:  Routing table for the /api/notes resource.
How:   Each handler extracts path/query/body values, delegates to NoteService
       and returns the envelope. Bodies are validated by the Pydantic input
       structs before the handler runs.

Route Inventory:
    GET    /api/notes                          list (filter, search, sort)
    GET    /api/notes/export/all               export every note
    POST   /api/notes/import                   bulk import (all-or-nothing)
    DELETE /api/notes/trash/clear              empty the trash
    GET    /api/notes/{id}                     single note
    POST   /api/notes                          create
    PUT    /api/notes/{id}                     full update
    DELETE /api/notes/{id}/trash               move to trash
    DELETE /api/notes/{id}                     delete permanently
    PATCH  /api/notes/{id}/restore             restore from trash
    PATCH  /api/notes/{id}/toggle-important    flip important flag

Static paths are registered before the {note_id} ones so that
"export" or "trash" is never parsed as an id.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.repositories import get_note_repository
from app.repositories.note_repository import NoteRepository
from app.schemas.note import (
    ErrorEnvelope,
    MessageEnvelope,
    NoteCreate,
    NoteEnvelope,
    NoteImport,
    NoteListEnvelope,
    NoteUpdate,
)
from app.services.note_service import note_service

router = APIRouter(prefix="/api/notes", tags=["Notes"])

NOT_FOUND = {404: {"description": "Note not found", "model": ErrorEnvelope}}
BAD_REQUEST = {400: {"description": "Validation failed", "model": ErrorEnvelope}}
SERVER_ERROR = {500: {"description": "Storage failure", "model": ErrorEnvelope}}


@router.get(
    "",
    response_model=NoteListEnvelope,
    response_model_exclude_none=True,
    responses=SERVER_ERROR,
    summary="List notes",
)
async def list_notes(
    filter: Optional[str] = Query(
        default="all", description="all | important | deleted (unknown values act as all)"
    ),
    search: Optional[str] = Query(
        default="", description="Case-insensitive substring of title, content or a tag"
    ),
    sort: Optional[str] = Query(
        default="newest",
        description="newest | oldest | alpha-asc | alpha-desc | important (unknown values act as newest)",
    ),
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteListEnvelope:
    return await note_service.list_notes(repo, filter=filter, search=search, sort=sort)


@router.get(
    "/export/all",
    response_model=NoteListEnvelope,
    response_model_exclude_none=True,
    responses=SERVER_ERROR,
    summary="Export every note, trashed ones included",
)
async def export_notes(
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteListEnvelope:
    return await note_service.export_notes(repo)


@router.post(
    "/import",
    response_model=MessageEnvelope,
    response_model_exclude_none=True,
    responses={**BAD_REQUEST, **SERVER_ERROR},
    summary="Import notes as new rows in one transaction",
)
async def import_notes(
    payload: NoteImport,
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageEnvelope:
    return await note_service.import_notes(repo, payload)


@router.delete(
    "/trash/clear",
    response_model=MessageEnvelope,
    response_model_exclude_none=True,
    responses=SERVER_ERROR,
    summary="Permanently delete every trashed note",
)
async def clear_trash(
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageEnvelope:
    return await note_service.clear_trash(repo)


@router.get(
    "/{note_id}",
    response_model=NoteEnvelope,
    response_model_exclude_none=True,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Get a single note by ID",
)
async def get_note(
    note_id: int,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteEnvelope:
    return await note_service.get_note(repo, note_id)


@router.post(
    "",
    status_code=201,
    response_model=NoteEnvelope,
    response_model_exclude_none=True,
    responses={**BAD_REQUEST, **SERVER_ERROR},
    summary="Create a note",
)
async def create_note(
    payload: NoteCreate,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteEnvelope:
    return await note_service.create_note(repo, payload)


@router.put(
    "/{note_id}",
    response_model=NoteEnvelope,
    response_model_exclude_none=True,
    responses={**BAD_REQUEST, **NOT_FOUND, **SERVER_ERROR},
    summary="Replace a note's title, content, tags and important flag",
)
async def update_note(
    note_id: int,
    payload: NoteUpdate,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteEnvelope:
    return await note_service.update_note(repo, note_id, payload)


@router.delete(
    "/{note_id}/trash",
    response_model=MessageEnvelope,
    response_model_exclude_none=True,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Move a note to the trash",
)
async def trash_note(
    note_id: int,
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageEnvelope:
    return await note_service.trash_note(repo, note_id)


@router.delete(
    "/{note_id}",
    response_model=MessageEnvelope,
    response_model_exclude_none=True,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Delete a note permanently",
)
async def delete_note_permanently(
    note_id: int,
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageEnvelope:
    return await note_service.delete_note_permanently(repo, note_id)


@router.patch(
    "/{note_id}/restore",
    response_model=MessageEnvelope,
    response_model_exclude_none=True,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Restore a note from the trash",
)
async def restore_note(
    note_id: int,
    repo: NoteRepository = Depends(get_note_repository),
) -> MessageEnvelope:
    return await note_service.restore_note(repo, note_id)


@router.patch(
    "/{note_id}/toggle-important",
    response_model=NoteEnvelope,
    response_model_exclude_none=True,
    responses={**NOT_FOUND, **SERVER_ERROR},
    summary="Flip a note's important flag",
)
async def toggle_important(
    note_id: int,
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteEnvelope:
    return await note_service.toggle_important(repo, note_id)
