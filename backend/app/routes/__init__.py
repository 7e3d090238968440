# Routes package init
"""
VoiceNote Backend — API Routes Package
=======================================

Route Inventory:
    - transcribe.py:   POST /api/transcribe        (audio → text)
    - notes.py:        POST /api/create-note       (text → polished Notion page)
    - notion_auth.py:  GET  /api/notion/callback   (OAuth code → access token)
    - health.py:       GET  /  and  GET /health    (liveness / configuration status)

Routes stay thin: they extract request data, call a service and shape the
response. Errors are raised as exceptions and formatted by the global
handlers in main.py.
"""
