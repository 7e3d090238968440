# Middleware package init
"""
VoiceNote Backend — Middleware Package
=======================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Access Log] → [CORS] → Route Handler

    1. Request ID first: every later log line can carry the correlation ID
    2. Access log: records status and duration once the response exists
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
