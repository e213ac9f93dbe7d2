"""
QuillMind Client — HTTP API Client and Tree Sync
==================================================

What:  A typed async client for the /api routes and the helpers that keep a
       TreeStore in step with the server.
"""

from quillmind.client.api_client import ApiError, QuillMindClient, is_token_expired
from quillmind.client.sync import (
    create_file,
    create_project,
    delete_file,
    delete_project,
    load_forest,
    open_file,
    persist_file_content,
)

__all__ = [
    "ApiError",
    "QuillMindClient",
    "create_file",
    "create_project",
    "delete_file",
    "delete_project",
    "is_token_expired",
    "load_forest",
    "open_file",
    "persist_file_content",
]
