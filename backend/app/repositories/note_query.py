"""
Note listing query builder.

Turns the (filter, search, sort) triple of GET /api/notes into a SELECT.
Predicates and orderings come from closed lookup tables keyed by the
NoteFilter and NoteSort enums; values are always bound parameters.

Search matching:
    The trimmed term is matched as a case-insensitive substring (ILIKE)
    against title and content. LIKE wildcards in the term are escaped, so
    "50%" matches the literal text "50%". Tags are stored as JSON array
    text and matched element by element (json_each on SQLite,
    jsonb_array_elements_text on PostgreSQL, JSON_SEARCH elsewhere): a note
    matches when one of its tags contains the term. JSON punctuation and
    text spanning two tags never match.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy import ColumnElement, Select, cast, func, literal, or_, select
from sqlalchemy.dialects.postgresql import JSONB

from app.models.note import notes_table as notes

LIKE_ESCAPE = "\\"


class NoteFilter(str, Enum):
    ALL = "all"
    IMPORTANT = "important"
    DELETED = "deleted"

    @classmethod
    def parse(cls, value: Optional[str]) -> "NoteFilter":
        """Unknown or missing values select the default listing."""
        try:
            return cls(value)
        except ValueError:
            return cls.ALL


class NoteSort(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    ALPHA_ASC = "alpha-asc"
    ALPHA_DESC = "alpha-desc"
    IMPORTANT = "important"

    @classmethod
    def parse(cls, value: Optional[str]) -> "NoteSort":
        """Unknown or missing values fall back to newest first."""
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST


_FILTER_PREDICATES: Dict[NoteFilter, Callable[[], List[ColumnElement]]] = {
    NoteFilter.ALL: lambda: [notes.c.deleted.is_(False)],
    NoteFilter.IMPORTANT: lambda: [notes.c.important.is_(True), notes.c.deleted.is_(False)],
    NoteFilter.DELETED: lambda: [notes.c.deleted.is_(True)],
}

_SORT_ORDER: Dict[NoteSort, Callable[[], Tuple[ColumnElement, ...]]] = {
    NoteSort.NEWEST: lambda: (notes.c.updated_at.desc(),),
    NoteSort.OLDEST: lambda: (notes.c.updated_at.asc(),),
    NoteSort.ALPHA_ASC: lambda: (notes.c.title.asc(),),
    NoteSort.ALPHA_DESC: lambda: (notes.c.title.desc(),),
    NoteSort.IMPORTANT: lambda: (notes.c.important.desc(), notes.c.updated_at.desc()),
}


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def tags_predicate(pattern: str, dialect_name: str) -> ColumnElement:
    """True when at least one stored tag matches the LIKE pattern."""
    if dialect_name == "postgresql":
        elements = func.jsonb_array_elements_text(cast(notes.c.tags, JSONB))
    elif dialect_name == "sqlite":
        elements = func.json_each(notes.c.tags)
    else:
        return func.json_search(func.lower(notes.c.tags), "one", func.lower(pattern)).is_not(None)
    tag = elements.table_valued("value", name="tag")
    return (
        select(literal(1))
        .select_from(tag)
        .where(tag.c.value.ilike(pattern, escape=LIKE_ESCAPE))
        .exists()
    )


def search_predicate(term: str, dialect_name: str) -> ColumnElement:
    pattern = f"%{escape_like(term)}%"
    return or_(
        notes.c.title.ilike(pattern, escape=LIKE_ESCAPE),
        notes.c.content.ilike(pattern, escape=LIKE_ESCAPE),
        tags_predicate(pattern, dialect_name),
    )


@dataclass(frozen=True)
class NoteQuery:
    """A validated listing request. Filter and search apply conjunctively."""

    filter: NoteFilter = NoteFilter.ALL
    search: str = ""
    sort: NoteSort = NoteSort.NEWEST

    @classmethod
    def from_params(
        cls,
        filter: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> "NoteQuery":
        return cls(
            filter=NoteFilter.parse(filter),
            search=(search or "").strip(),
            sort=NoteSort.parse(sort),
        )

    def predicates(self, dialect_name: str) -> List[ColumnElement]:
        predicates = _FILTER_PREDICATES[self.filter]()
        if self.search:
            predicates.append(search_predicate(self.search, dialect_name))
        return predicates

    def order_by(self) -> Tuple[ColumnElement, ...]:
        return _SORT_ORDER[self.sort]()

    def statement(self, dialect_name: str) -> Select:
        """SELECT for this listing; tag search depends on the backend's JSON functions."""
        return (
            select(notes)
            .where(*self.predicates(dialect_name))
            .order_by(*self.order_by())
        )
