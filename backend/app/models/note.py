"""
Notekeeper Backend: Note SQLAlchemy Model
==========================================

What:  ORM model representing the `notes` table.
How:   Inherits from the shared DeclarativeBase; Alembic and
       Database.create_schema() read its metadata. NoteRepository builds
       Core statements against `Note.__table__`.

Table Design:
    - id: Integer autoincrement primary key, immutable after creation
    - title / content: NOT NULL and non-empty (ck_notes_text_not_empty)
    - tags: JSON array text, NULL when the note has no tags
    - important / deleted: flags; `deleted` implements the trash (soft delete)
    - created_at: Set once at insertion (UTC)
    - updated_at: Refreshed by every mutation; drives default ordering

Indexes:
    idx_notes_deleted, idx_notes_important: listing filters
    idx_notes_updated_at (DESC): newest/oldest ordering
    idx_notes_search: trigram GIN over (title, content) on PostgreSQL
        (requires the pg_trgm extension); plain composite index elsewhere
"""

import json
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Index, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

TITLE_MAX_LENGTH = 255


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def encode_tags(tags: Optional[Iterable[str]]) -> Optional[str]:
    """Serialize tags for storage; an empty collection is stored as NULL."""
    tags = list(tags or [])
    if not tags:
        return None
    # Keep non-ASCII characters literal so substring search can see them
    return json.dumps(tags, ensure_ascii=False)


def decode_tags(raw) -> List[str]:
    """Inverse of encode_tags(); NULL and empty text both read as no tags."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return [str(tag) for tag in raw]
    value = json.loads(raw)
    if not isinstance(value, list):
        return []
    return [str(tag) for tag in value]


class Note(Base):
    """
    A single note.

    Lifecycle:
        1. Created by POST /api/notes or bulk import (id assigned by the store)
        2. Mutated in place by update / toggle-important / trash / restore;
           each mutation bumps updated_at
        3. Removed only by permanent delete or by clearing the trash
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    important: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint("title <> '' AND content <> ''", name="ck_notes_text_not_empty"),
        Index("idx_notes_deleted", deleted),
        Index("idx_notes_important", important),
        Index("idx_notes_updated_at", updated_at.desc()),
        # Trigram GIN on PostgreSQL (needs pg_trgm); a plain composite index elsewhere
        Index(
            "idx_notes_search",
            title,
            content,
            postgresql_using="gin",
            postgresql_ops={"title": "gin_trgm_ops", "content": "gin_trgm_ops"},
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Note(id={self.id}, title='{self.title}', "
            f"important={self.important}, deleted={self.deleted})>"
        )


notes_table = Note.__table__
