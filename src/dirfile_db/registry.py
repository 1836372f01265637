"""In-memory collection index, kept in step with the metadata file.

A collection is the directory root/<name>. The registry maps names to those
paths for O(1) resolution and rewrites the metadata collection list after
every mutation. Mutations hold a re-entrant lock across the directory change
and the metadata rewrite; document operations do not take it.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import threading
from typing import TYPE_CHECKING

from dirfile_db.errors import CollectionError, StorageError
from dirfile_db.models import METADATA_FILENAME

if TYPE_CHECKING:
    from pathlib import Path

    from dirfile_db.metadata import MetadataManager

logger = logging.getLogger("dirfile_db.registry")


def validate_collection_name(name: str) -> None:
    if not isinstance(name, str) or not name or name in {".", ".."}:
        msg = f"invalid collection name: {name!r}"
        raise CollectionError(msg)
    if "/" in name or "\\" in name or "\0" in name or name.startswith(METADATA_FILENAME):
        msg = f"invalid collection name: {name!r}"
        raise CollectionError(msg)


class CollectionRegistry:
    """name -> path lookup for the collections of one database."""

    def __init__(self, metadata: MetadataManager) -> None:
        self._meta = metadata
        self._collections: dict[str, Path] = {}
        self._lock = threading.RLock()

    @property
    def root(self) -> Path:
        return self._meta.root

    def path_for(self, name: str) -> Path:
        return self.root / name

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> Path | None:
        """Path of the named collection, or None if it is not registered."""
        return self._collections.get(name)

    def require(self, name: str) -> Path:
        path = self.resolve(name)
        if path is None:
            msg = f"collection does not exist: {name}"
            raise CollectionError(msg)
        return path

    def list(self) -> list[str]:
        return list(self._collections)

    def __contains__(self, name: object) -> bool:
        return name in self._collections

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def create(self, name: str) -> Path:
        """Create root/<name> and register it. Raises if it already exists."""
        validate_collection_name(name)
        with self._lock:
            if name in self._collections:
                msg = f"collection already exists: {name}"
                raise CollectionError(msg)

            path = self.path_for(name)
            existed = path.exists()
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                msg = f"failed to create collection {name}: {exc}"
                raise StorageError(msg) from exc

            self._collections[name] = path
            try:
                self._sync_metadata()
            except StorageError:
                del self._collections[name]
                if not existed:
                    with contextlib.suppress(OSError):
                        path.rmdir()
                raise
        logger.info("collection created: %s", path)
        return path

    def delete(self, name: str) -> None:
        """Remove root/<name> recursively and drop it from the index."""
        with self._lock:
            path = self.require(name)
            try:
                shutil.rmtree(path)
            except FileNotFoundError:
                pass
            except OSError as exc:
                msg = f"failed to delete collection {name}: {exc}"
                raise StorageError(msg) from exc

            del self._collections[name]
            self._sync_metadata()
        logger.info("collection deleted: %s", path)

    def _sync_metadata(self) -> None:
        self._meta.update(collections=dict(self._collections))

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self, collections: dict[str, Path]) -> None:
        """Replace the in-memory index with collections from the metadata record."""
        with self._lock:
            self._collections = dict(collections)

    def discover(self) -> list[str]:
        """Reconcile the index with the subdirectories actually present under root.

        Listed collections keep their metadata order; unlisted subdirectories
        are appended in directory-listing order; entries whose directory has
        gone are dropped. Rewrites metadata if anything changed. Returns the
        names of adopted collections.
        """
        with self._lock:
            try:
                found = {
                    entry.name: self.path_for(entry.name)
                    for entry in self.root.iterdir()
                    if entry.is_dir()
                }
            except OSError as exc:
                msg = f"failed to scan database root {self.root}: {exc}"
                raise StorageError(msg) from exc

            rebuilt = {name: found[name] for name in self._collections if name in found}
            dropped = [name for name in self._collections if name not in found]
            adopted = [name for name in found if name not in rebuilt]
            for name in adopted:
                rebuilt[name] = found[name]

            changed = rebuilt != self._collections
            self._collections = rebuilt
            if changed:
                if adopted:
                    logger.info("adopted unregistered collections: %s", ", ".join(adopted))
                if dropped:
                    logger.info("dropped missing collections: %s", ", ".join(dropped))
                self._sync_metadata()
            return adopted
