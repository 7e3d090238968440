"""
VoiceNote Backend — Application Package Initializer
====================================================

What: Marks the `app` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is a thin HTTP layer over an orchestration pipeline:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Pipeline Orchestration) │  ← intake, transcribe, polish,
    │                                     │    title, publish, OAuth
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← dataclasses + Pydantic
    └─────────────────────────────────────┘

    Nothing is persisted: every entity lives for exactly one request.
"""

__version__ = "1.0.0"
