# Routes package init
"""
Notes API — Routes Package
===========================

Route Inventory:
    - notes.py:   POST   /notes              (create)
                  GET    /notes              (paginated list)
                  GET    /notes/{id}         (detail)
                  PUT    /notes/{id}         (replace title/content)
                  DELETE /notes/{id}         (delete)
    - upload.py:  POST   /upload             (single file upload)
    - health.py:  GET    /health             (service health check)

Uploaded files are served by the StaticFiles mount at /uploads (main.py).

Routes stay thin: extract request data, call a service, pick the status
code. Errors are raised as exceptions and rendered by the global handlers.
"""
