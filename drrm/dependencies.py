"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Request

from drrm.config import Settings
from drrm.db import DbConfig, create_db_handle
from drrm.storage import DbStorage, Storage


def build_storage(settings: Settings) -> DbStorage:
    """
    Open the backend selected by ``settings`` and wrap it in the storage
    adapter. Raises ``BackendUnavailableError`` if no backend can be opened.
    """
    handle = create_db_handle(DbConfig.from_settings(settings))
    return DbStorage(handle)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
