"""
Notekeeper Backend: Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the API contract between browser client and backend.
How:   FastAPI validates request bodies against the input structs before any
       service code runs; failures become 400 responses (see app.error_handlers).
       Output models serialize camelCase (createdAt, updatedAt) to match the
       client.

Input structs:
    NoteCreate / NoteUpdate: title and content required and non-empty
    NoteImport:              `notes` must be an array of NoteImportItem

Envelope:
    Every response is {success, message?, data?, count?, error?}; fields that
    are None are left out of the JSON body.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.note import decode_tags


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    """Body of POST /api/notes."""

    title: str = Field(min_length=1, description="Note title (required)")
    content: str = Field(min_length=1, description="Note text (required)")
    tags: List[str] = Field(default_factory=list, description="Ordered tag labels")
    important: bool = Field(default=False, description="Important flag")

    @field_validator("tags", mode="before")
    @classmethod
    def null_tags_to_empty(cls, v):
        return [] if v is None else v

    @field_validator("important", mode="before")
    @classmethod
    def null_important_to_false(cls, v):
        return False if v is None else v


class NoteUpdate(NoteCreate):
    """
    Body of PUT /api/notes/{id}.

    Full replace: omitted tags become [] and omitted important becomes False.
    """


class NoteImportItem(BaseModel):
    """
    One entry of an import payload.

    Empty strings are rejected here. A missing title or content reaches the
    store and is rejected by its NOT NULL constraint, which aborts the whole
    import.
    """

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = Field(default=None, min_length=1)
    tags: List[str] = Field(default_factory=list)
    important: bool = False
    deleted: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def decode_stored_tags(cls, v):
        # Exports may carry tags as the stored JSON text
        if v is None or isinstance(v, str):
            return decode_tags(v)
        return v

    @field_validator("important", "deleted", mode="before")
    @classmethod
    def null_flag_to_false(cls, v):
        return False if v is None else v


class NoteImport(BaseModel):
    """Body of POST /api/notes/import."""

    notes: List[NoteImportItem] = Field(description="Notes to insert as new rows")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NoteRead(BaseModel):
    """
    Full representation of a stored note.

    Built from repository rows (snake_case column names), serialized with
    camelCase aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    title: str
    content: str
    tags: List[str] = Field(default_factory=list)
    important: bool = False
    deleted: bool = False
    created_at: datetime
    updated_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def decode_stored_tags(cls, v):
        if v is None or isinstance(v, str):
            return decode_tags(v)
        return v


class MessageEnvelope(BaseModel):
    """Envelope for operations that return no note payload."""

    success: bool = True
    message: Optional[str] = None
    count: Optional[int] = None


class NoteEnvelope(MessageEnvelope):
    """Envelope carrying a single note."""

    data: Optional[NoteRead] = None


class NoteListEnvelope(MessageEnvelope):
    """Envelope carrying a list of notes; `count` is the list length."""

    data: List[NoteRead] = Field(default_factory=list)


class ErrorEnvelope(BaseModel):
    """
    Failure envelope produced by the global exception handlers.

    `error` carries raw detail and is only populated outside production.
    """

    success: bool = False
    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """Service health and dependency status returned by GET /health."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
