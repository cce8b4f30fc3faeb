# Services package init
"""
Notekeeper Backend: Services Layer
===================================

What:  Business logic between routes (HTTP) and repositories (persistence).
How:   Services receive the repository from the route handler, check that
       addressed notes exist, and wrap results in response envelopes.

Service Inventory:
    - NoteService: list, get, create, update, trash, restore, permanent
      delete, toggle important, export, import and clear trash
"""
