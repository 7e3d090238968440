# Services package init
"""
VoiceNote Backend — Services Layer
===================================

What:  Pipeline logic sitting between routes (HTTP) and the remote services.

Service Inventory:
    - FileService: Audio intake validation, transient storage, cleanup
    - LLMService (abstract): Transcription / polishing / titling contract
    - GeminiService: Concrete implementation using Google Gemini
    - NotionService: Page creation with the caller's Notion token
    - NotionOAuthService: Authorization-code → access-token exchange
    - NoteService: Orchestrates the transcribe and create-note pipelines
"""
