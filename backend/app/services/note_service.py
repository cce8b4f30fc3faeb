"""
Notekeeper Backend: Note Service (Notes Controller)
====================================================

What:  Maps validated API requests onto NoteRepository calls and wraps the
       results in response envelopes.
How:   Request bodies arrive already validated (NoteCreate, NoteUpdate,
       NoteImport); id-addressed operations first look the note up and raise
       NotFoundError when it is absent, so a missing id never reaches a
       mutating statement.
Who:   Called by the route handlers in app.routes.notes.

Error Handling Strategy:
    NotFoundError is raised here. StorageError from the repository is not
    caught; it propagates to the global handler, which translates it
    (app.error_handlers.translate_storage_error).
"""

import logging
from typing import Optional

from app.exceptions import NotFoundError
from app.repositories.note_query import NoteQuery
from app.repositories.note_repository import NoteRepository
from app.schemas.note import (
    MessageEnvelope,
    NoteCreate,
    NoteEnvelope,
    NoteImport,
    NoteListEnvelope,
    NoteRead,
    NoteUpdate,
)

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic layer for note operations.

    Stateless: the repository is passed into every call.
    """

    async def _require_note(self, repo: NoteRepository, note_id: int) -> NoteRead:
        note = await repo.get_by_id(note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id, message="Note not found")
        return note

    async def list_notes(
        self,
        repo: NoteRepository,
        filter: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> NoteListEnvelope:
        """
        List notes for GET /api/notes.

        Unknown filter or sort values fall back to the defaults
        (all, newest) instead of failing.
        """
        query = NoteQuery.from_params(filter=filter, search=search, sort=sort)
        notes = await repo.list(query)
        return NoteListEnvelope(data=notes, count=len(notes))

    async def get_note(self, repo: NoteRepository, note_id: int) -> NoteEnvelope:
        """Single note by id; trashed notes are returned too."""
        note = await self._require_note(repo, note_id)
        return NoteEnvelope(data=note)

    async def create_note(self, repo: NoteRepository, payload: NoteCreate) -> NoteEnvelope:
        note = await repo.create(payload)
        logger.info("Note %s created", note.id)
        return NoteEnvelope(message="Note created", data=note)

    async def update_note(
        self, repo: NoteRepository, note_id: int, payload: NoteUpdate
    ) -> NoteEnvelope:
        await self._require_note(repo, note_id)
        note = await repo.update(note_id, payload)
        if note is None:
            # Removed between the pre-check and the update
            raise NotFoundError(resource="note", resource_id=note_id, message="Note not found")
        logger.info("Note %s updated", note_id)
        return NoteEnvelope(message="Note updated", data=note)

    async def trash_note(self, repo: NoteRepository, note_id: int) -> MessageEnvelope:
        await self._require_note(repo, note_id)
        await repo.soft_delete(note_id)
        logger.info("Note %s moved to trash", note_id)
        return MessageEnvelope(message="Note moved to trash")

    async def delete_note_permanently(
        self, repo: NoteRepository, note_id: int
    ) -> MessageEnvelope:
        await self._require_note(repo, note_id)
        await repo.hard_delete(note_id)
        logger.info("Note %s permanently deleted", note_id)
        return MessageEnvelope(message="Note permanently deleted")

    async def restore_note(self, repo: NoteRepository, note_id: int) -> MessageEnvelope:
        await self._require_note(repo, note_id)
        await repo.restore(note_id)
        logger.info("Note %s restored", note_id)
        return MessageEnvelope(message="Note restored")

    async def toggle_important(self, repo: NoteRepository, note_id: int) -> NoteEnvelope:
        await self._require_note(repo, note_id)
        note = await repo.toggle_important(note_id)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id, message="Note not found")
        message = "Note marked as important" if note.important else "Note unmarked as important"
        return NoteEnvelope(message=message, data=note)

    async def export_notes(self, repo: NoteRepository) -> NoteListEnvelope:
        """Full backup snapshot, trashed notes included."""
        notes = await repo.export_all()
        return NoteListEnvelope(data=notes, count=len(notes))

    async def import_notes(self, repo: NoteRepository, payload: NoteImport) -> MessageEnvelope:
        """
        Insert every note of the payload as a new row, all-or-nothing.

        Raises:
            StorageError: One of the inserts failed; nothing was imported
        """
        count = await repo.import_many(payload.notes)
        return MessageEnvelope(message=f"Successfully imported {count} notes", count=count)

    async def clear_trash(self, repo: NoteRepository) -> MessageEnvelope:
        removed = await repo.clear_deleted()
        logger.info("Trash cleared: %d notes removed", removed)
        return MessageEnvelope(message="Trash cleared", count=removed)


# Stateless; one shared instance
note_service = NoteService()
