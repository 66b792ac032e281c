# Middleware package init
"""
Notes API — Middleware Package
===============================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [Security Headers] → [GZip] → [CORS]
            → [Server Error] → Route

    1. Request ID first so every later log line can carry it
    2. Logging writes "METHOD path" before dispatch and the outcome after
    3. Security headers are added to every response, errors included
    4. Server Error innermost, so unhandled exceptions become a 500 that
       still carries the headers and log lines above
"""
