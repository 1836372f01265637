"""Document CRUD over the JSON files of a collection directory.

A document lives at <collection>/<id>.json. Its id is data["_id"] when the
caller supplies one, otherwise a fresh UUID. Reads are full directory scans,
one file at a time, in directory-listing order (not sorted), so "first match"
depends on the filesystem.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from dirfile_db.errors import DocumentError, StorageError
from dirfile_db.models import DOCUMENT_SUFFIX, UNDEFINED, dumps, new_id
from dirfile_db.query import matches

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping
    from pathlib import Path

    from dirfile_db.registry import CollectionRegistry

logger = logging.getLogger("dirfile_db.store")


def _is_blank(value: Any) -> bool:
    return value is None or value is UNDEFINED or value == ""


def _document_id(value: Any) -> str:
    doc_id = str(value)
    if not doc_id or doc_id in {".", ".."} or any(c in doc_id for c in "/\\\0"):
        msg = f"invalid document _id: {value!r}"
        raise DocumentError(msg)
    return doc_id


class DocumentStore:
    """Create, read, update and delete documents in registered collections."""

    def __init__(self, registry: CollectionRegistry) -> None:
        self.registry = registry

    def _document_path(self, collection: str, doc_id: Any) -> Path:
        return self.registry.require(collection) / f"{_document_id(doc_id)}{DOCUMENT_SUFFIX}"

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    def create(self, collection: str, data: Mapping[str, Any]) -> str:
        """Write data as a new document and return its id.

        An existing document with the same id is overwritten.
        """
        raw_id = data.get("_id")
        doc_id = new_id() if _is_blank(raw_id) else raw_id
        path = self._document_path(collection, doc_id)
        self._write(path, data, collection)
        logger.debug("document created: %s/%s", collection, path.stem)
        return path.stem

    def update(self, collection: str, new_data: Mapping[str, Any]) -> dict[str, Any]:
        """Shallow-merge new_data into the stored document and return the result."""
        self.registry.require(collection)
        doc_id = new_data.get("_id")
        if _is_blank(doc_id):
            msg = "missing required _id parameter"
            raise DocumentError(msg)

        path = self._document_path(collection, doc_id)
        try:
            document = self._read(path)
        except FileNotFoundError as exc:
            msg = f"document {doc_id} not found in {collection}"
            raise DocumentError(msg) from exc
        except OSError as exc:
            msg = f"failed to read document {path.name} in {collection}: {exc}"
            raise StorageError(msg) from exc

        document.update(new_data)
        self._write(path, document, collection)
        logger.debug("document updated: %s/%s", collection, path.stem)
        return json.loads(dumps(document))

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def find(self, collection: str, query: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """First document matching query, or None."""
        for _path, document in self._scan(collection, query):
            return document
        return None

    def find_all(self, collection: str, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Every document matching query; no query matches all."""
        return [document for _path, document in self._scan(collection, query)]

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(self, collection: str, query: Mapping[str, Any] | None) -> None:
        self._perform_delete(collection, query, delete_all=False)

    def delete_all(self, collection: str, query: Mapping[str, Any] | None) -> None:
        self._perform_delete(collection, query, delete_all=True)

    def _perform_delete(self, collection: str, query: Mapping[str, Any] | None, *, delete_all: bool) -> None:
        removed = 0
        for path, _document in self._scan(collection, query):
            try:
                path.unlink()
            except OSError as exc:
                msg = f"failed to delete document {path.name} from {collection}: {exc}"
                raise StorageError(msg) from exc
            removed += 1
            if not delete_all:
                break
        logger.debug("deleted %d document(s) from %s", removed, collection)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _scan(self, collection: str, query: Mapping[str, Any] | None) -> Iterator[tuple[Path, dict[str, Any]]]:
        """Yield (path, document) for each matching file, reading one file at a time."""
        collection_path = self.registry.require(collection)
        try:
            files = [p for p in collection_path.iterdir() if p.suffix == DOCUMENT_SUFFIX and p.is_file()]
        except OSError as exc:
            msg = f"failed to list documents in {collection}: {exc}"
            raise StorageError(msg) from exc
        logger.debug("scanning %d document(s) in %s", len(files), collection)

        for path in files:
            try:
                document = self._read(path)
            except OSError as exc:
                msg = f"failed to read document {path.name} in {collection}: {exc}"
                raise StorageError(msg) from exc
            if matches(document, query):
                yield path, document

    def _read(self, path: Path) -> dict[str, Any]:
        with path.open(encoding="utf-8") as f:
            try:
                document = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                msg = f"corrupt document file {path}: {exc}"
                raise DocumentError(msg) from exc
        if not isinstance(document, dict):
            msg = f"document file {path} does not hold a JSON object"
            raise DocumentError(msg)
        return document

    def _write(self, path: Path, data: Mapping[str, Any], collection: str) -> None:
        try:
            path.write_text(dumps(dict(data)), encoding="utf-8")
        except OSError as exc:
            msg = f"failed to write document {path.name} to {collection}: {exc}"
            raise StorageError(msg) from exc
