# Routes package init
"""
Notekeeper Backend: API Routes Package
=======================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - notes.py:   /api/notes resource (CRUD, trash, import/export)
    - health.py:  GET /health (service health), GET / (endpoint banner)

Routes handle HTTP concerns only: they extract data from the request, call
NoteService, and return the envelope with the right status code.
"""
