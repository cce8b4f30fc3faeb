# Repositories package init
"""
Notekeeper Backend: Repositories Layer
=======================================

What:  Data access objects that turn note operations into SQL statements.
How:   Each repository receives the Database gateway in its constructor and
       is handed to route handlers through `get_note_repository`.

Inventory:
    - note_query.py:       Filter/search/sort query builder for listings
    - note_repository.py:  NoteRepository (list, get, create, update, trash,
                           restore, permanent delete, toggle, clear, export, import)
"""

from fastapi import Depends

from app.database import Database, get_database
from app.repositories.note_repository import NoteRepository


def get_note_repository(database: Database = Depends(get_database)) -> NoteRepository:
    """FastAPI dependency building a NoteRepository over the shared gateway."""
    return NoteRepository(database)
