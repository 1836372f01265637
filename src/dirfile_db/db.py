"""DirfileDB: the public handle on one database directory.

    db = DirfileDB("data")              # creates data/ or loads it
    db.new_collection("users")
    db.create("users", {"_id": "u1", "name": "Ann"})
    db.update("users", {"_id": "u1", "age": 30})
    db.find("users", {"_id": "u1"})     # {"_id": "u1", "name": "Ann", "age": 30}

A handle assumes it is the only writer. Document writes are not locked, so
two handles (or threads) writing the same id race and the last write wins.
Collection create/delete are serialized within the handle and metadata is
written via tmp file + rename under flock.
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dirfile_db.errors import DirfileDBError
from dirfile_db.metadata import MetadataManager
from dirfile_db.models import VERSION, Metadata
from dirfile_db.registry import CollectionRegistry
from dirfile_db.store import DocumentStore

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from dirfile_db.config import DirfileConfig

logger = logging.getLogger("dirfile_db.db")

DEFAULT_ROOT_DIR = "./defaultDB"


@contextlib.contextmanager
def _logged(action: str) -> Iterator[None]:
    try:
        yield
    except DirfileDBError as exc:
        logger.warning("failed to %s: %s", action, exc)
        raise
    except Exception:
        logger.exception("failed to %s", action)
        raise


class DirfileDB:
    """Filesystem-backed document database rooted at one directory."""

    def __init__(
        self,
        root_dir: Path | str | None = None,
        *,
        config: DirfileConfig | None = None,
        version: str = VERSION,
    ) -> None:
        if root_dir is None:
            root_dir = config.root_dir if config is not None else DEFAULT_ROOT_DIR
        self._root_dir = str(root_dir)
        self._meta = MetadataManager(self._root_dir, version=version)
        self._registry = CollectionRegistry(self._meta)
        self._documents = DocumentStore(self._registry)
        self.init()

    # ------------------------------------------------------------------
    # Init
    # ------------------------------------------------------------------

    def init(self) -> Metadata:
        """Create the database if root is missing, otherwise load and validate it."""
        with _logged("initialize database"):
            metadata, created = self._meta.initialize()
            self._registry.load(metadata.collections)
            if created:
                logger.info("initialized database at: %s", self._root_dir)
            else:
                self._registry.discover()
                logger.info("loaded database from: %s", self._root_dir)
        return self._meta.metadata

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def new_collection(self, name: str) -> Path:
        with _logged(f"create collection {name}"):
            return self._registry.create(name)

    def list_collections(self) -> list[str]:
        return self._registry.list()

    def delete_collection(self, name: str) -> None:
        with _logged(f"delete collection {name}"):
            self._registry.delete(name)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def create(self, collection: str, data: Mapping[str, Any]) -> str:
        """Store data as a document and return its id."""
        with _logged(f"add data to {collection}"):
            return self._documents.create(collection, data)

    def find(self, collection: str, query: Mapping[str, Any] | None) -> dict[str, Any] | None:
        with _logged(f"find data in {collection}"):
            return self._documents.find(collection, query)

    def find_all(self, collection: str, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        with _logged(f"find data in {collection}"):
            return self._documents.find_all(collection, query)

    def update(self, collection: str, new_data: Mapping[str, Any]) -> dict[str, Any]:
        with _logged(f"update data in {collection}"):
            return self._documents.update(collection, new_data)

    def delete(self, collection: str, query: Mapping[str, Any] | None) -> None:
        with _logged(f"delete document from {collection}"):
            self._documents.delete(collection, query)

    def delete_all(self, collection: str, query: Mapping[str, Any] | None) -> None:
        with _logged(f"delete document(s) from {collection}"):
            self._documents.delete_all(collection, query)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_root_dir(self) -> str:
        return self._root_dir

    def get_metadata(self) -> Metadata:
        return self._meta.metadata

    def get_collection(self, name: str) -> Path | None:
        return self._registry.resolve(name)
