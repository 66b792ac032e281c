# Services package init
"""
Notes API — Services Layer
===========================

What:  Logic between the routes (HTTP) and the database / filesystem.
How:   Services are created once in create_app(), kept on app.state, and
       handed to routes through FastAPI dependencies.

Service Inventory:
    - NoteService: note CRUD and paginated listing over an AsyncSession
    - FileService: upload naming, optional caps, and storage on disk
"""
