"""
QuillMind Backend — Application Package Initializer
=====================================================

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Ownership, Business)    │  ← tokens, ownership, CRUD, AI
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Client side (no server imports):
        quillmind.tree    — flat, immutable projection of projects and files
        quillmind.client  — typed httpx client and optimistic sync helpers
"""

__version__ = "1.0.0"
