"""
Request-scoped access to the process-wide handles built in the lifespan.
"""

from __future__ import annotations

from fastapi import Request

from .db import DatabaseHandle
from .storage import StorageBackend


def get_db(request: Request) -> DatabaseHandle:
    return request.app.state.db


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage
