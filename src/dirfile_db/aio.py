"""Async adapter for DirfileDB using thread pool execution.

Each coroutine runs the matching DirfileDB method through asyncio.to_thread(),
so the event loop is free while the filesystem call is in flight. Scans still
read one file at a time; nothing is parallelized. Collection create/delete
are additionally serialized with an asyncio.Lock.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from dirfile_db.db import DirfileDB

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from dirfile_db.config import DirfileConfig
    from dirfile_db.models import Metadata


class AsyncDirfileDB:
    """Coroutine interface over a synchronous DirfileDB handle."""

    def __init__(self, db: DirfileDB) -> None:
        self._db = db
        self._registry_lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        root_dir: Path | str | None = None,
        *,
        config: DirfileConfig | None = None,
    ) -> AsyncDirfileDB:
        """Create or load the database at root_dir without blocking the loop."""
        db = await asyncio.to_thread(DirfileDB, root_dir, config=config)
        return cls(db)

    @property
    def sync(self) -> DirfileDB:
        return self._db

    async def init(self) -> Metadata:
        async with self._registry_lock:
            return await asyncio.to_thread(self._db.init)

    async def new_collection(self, name: str) -> Path:
        async with self._registry_lock:
            return await asyncio.to_thread(self._db.new_collection, name)

    def list_collections(self) -> list[str]:
        return self._db.list_collections()

    async def delete_collection(self, name: str) -> None:
        async with self._registry_lock:
            await asyncio.to_thread(self._db.delete_collection, name)

    async def create(self, collection: str, data: Mapping[str, Any]) -> str:
        return await asyncio.to_thread(self._db.create, collection, data)

    async def find(self, collection: str, query: Mapping[str, Any] | None) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._db.find, collection, query)

    async def find_all(self, collection: str, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._db.find_all, collection, query)

    async def update(self, collection: str, new_data: Mapping[str, Any]) -> dict[str, Any]:
        return await asyncio.to_thread(self._db.update, collection, new_data)

    async def delete(self, collection: str, query: Mapping[str, Any] | None) -> None:
        await asyncio.to_thread(self._db.delete, collection, query)

    async def delete_all(self, collection: str, query: Mapping[str, Any] | None) -> None:
        await asyncio.to_thread(self._db.delete_all, collection, query)

    def get_root_dir(self) -> str:
        return self._db.get_root_dir()

    def get_metadata(self) -> Metadata:
        return self._db.get_metadata()

    def get_collection(self, name: str) -> Path | None:
        return self._db.get_collection(name)
