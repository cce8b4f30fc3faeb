"""
Note Repository.

Data access layer for notes. Translates the logical note operations into
parameterized SQLAlchemy Core statements and runs them through the
Database gateway. Holds no per-request state.

Existence is not checked here: update/toggle on a missing id return None
and trash/restore/delete report False. NoteService does the explicit
not-found pre-check.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import delete, insert, not_, select, update

from app.database import Database, Transaction
from app.models.note import encode_tags, notes_table as notes, utcnow
from app.repositories.note_query import NoteQuery
from app.schemas.note import NoteCreate, NoteImportItem, NoteRead, NoteUpdate

logger = logging.getLogger(__name__)


def _to_note(row) -> NoteRead:
    return NoteRead.model_validate(row)


class NoteRepository:
    """Repository for the notes table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def list(self, query: NoteQuery) -> List[NoteRead]:
        """
        List notes matching a filter/search/sort combination.

        Args:
            query: Parsed listing parameters

        Returns:
            Notes in the requested order (possibly empty)
        """
        result = await self.database.execute(query.statement(self.database.dialect_name))
        return [_to_note(row) for row in result.rows]

    async def get_by_id(self, note_id: int) -> Optional[NoteRead]:
        """Fetch a note by id, including notes in the trash."""
        result = await self.database.execute(select(notes).where(notes.c.id == note_id))
        row = result.first()
        return _to_note(row) if row else None

    async def create(self, data: NoteCreate) -> NoteRead:
        """Insert a note and return it with its assigned id."""
        now = utcnow()
        result = await self.database.execute(
            insert(notes)
            .values(
                title=data.title,
                content=data.content,
                tags=encode_tags(data.tags),
                important=data.important,
                deleted=False,
                created_at=now,
                updated_at=now,
            )
            .returning(*notes.c)
        )
        return _to_note(result.first())

    async def update(self, note_id: int, data: NoteUpdate) -> Optional[NoteRead]:
        """Replace title, content, tags and important; None if the id is absent."""
        result = await self.database.execute(
            update(notes)
            .where(notes.c.id == note_id)
            .values(
                title=data.title,
                content=data.content,
                tags=encode_tags(data.tags),
                important=data.important,
                updated_at=utcnow(),
            )
            .returning(*notes.c)
        )
        row = result.first()
        return _to_note(row) if row else None

    async def _set_deleted(self, note_id: int, deleted: bool) -> bool:
        result = await self.database.execute(
            update(notes)
            .where(notes.c.id == note_id)
            .values(deleted=deleted, updated_at=utcnow())
        )
        return result.rowcount > 0

    async def soft_delete(self, note_id: int) -> bool:
        """Move a note to the trash. Repeating it leaves the note trashed."""
        return await self._set_deleted(note_id, True)

    async def restore(self, note_id: int) -> bool:
        """Take a note out of the trash. Repeating it leaves the note restored."""
        return await self._set_deleted(note_id, False)

    async def hard_delete(self, note_id: int) -> bool:
        """Remove a note permanently."""
        result = await self.database.execute(delete(notes).where(notes.c.id == note_id))
        return result.rowcount > 0

    async def toggle_important(self, note_id: int) -> Optional[NoteRead]:
        """Flip the important flag and return the updated note."""
        result = await self.database.execute(
            update(notes)
            .where(notes.c.id == note_id)
            .values(important=not_(notes.c.important), updated_at=utcnow())
            .returning(*notes.c)
        )
        row = result.first()
        return _to_note(row) if row else None

    async def clear_deleted(self) -> int:
        """Permanently remove every note in the trash; returns how many."""
        result = await self.database.execute(delete(notes).where(notes.c.deleted.is_(True)))
        return result.rowcount

    async def export_all(self) -> List[NoteRead]:
        """Every note, trashed or not, most recently modified first."""
        result = await self.database.execute(
            select(notes).order_by(notes.c.updated_at.desc())
        )
        return [_to_note(row) for row in result.rows]

    async def import_many(self, items: Sequence[NoteImportItem]) -> int:
        """
        Insert each item as a new note inside one transaction.

        Either every item is stored or, when any insert fails, none is.

        Raises:
            StorageError: An insert was rejected; the transaction was rolled back
        """

        async def insert_all(tx: Transaction) -> int:
            now = utcnow()
            for item in items:
                await tx.execute(
                    insert(notes).values(
                        title=item.title,
                        content=item.content,
                        tags=encode_tags(item.tags),
                        important=item.important,
                        deleted=item.deleted,
                        created_at=now,
                        updated_at=now,
                    )
                )
            return len(items)

        count = await self.database.run_in_transaction(insert_all)
        logger.info("Imported %d notes", count)
        return count
