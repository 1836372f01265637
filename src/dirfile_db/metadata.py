"""Persist and validate metadata-dirfile-db.json.

The metadata file proves a directory is a dirfile-db database of the running
engine version and is the authoritative list of collections:

    {
      "_id": "3f0c...",
      "dbSignature": "DirfileDB",
      "version": "0.1.0",
      "collections": [["users", "db/users"], ...]
    }

Collections are stored as [name, path] pairs rather than an object so the
order survives a round trip and any JSON reader can rebuild the mapping.
"""

from __future__ import annotations

import contextlib
import dataclasses
import fcntl
import json
import logging
from pathlib import Path
from typing import Any

from dirfile_db.errors import InitializationError, StorageError
from dirfile_db.models import DB_SIGNATURE, METADATA_FILENAME, VERSION, Metadata, dumps, new_id

logger = logging.getLogger("dirfile_db.metadata")


class MetadataManager:
    """Sole reader/writer of the metadata file under a database root."""

    def __init__(self, root: Path | str, version: str = VERSION) -> None:
        self.root = Path(root)
        self.version = version
        self._metadata: Metadata | None = None

    @property
    def path(self) -> Path:
        return self.root / METADATA_FILENAME

    @property
    def metadata(self) -> Metadata:
        if self._metadata is None:
            msg = f"metadata for {self.root} has not been initialized"
            raise InitializationError(msg)
        return self._metadata

    # ------------------------------------------------------------------
    # Init
    # ------------------------------------------------------------------

    def initialize(self) -> tuple[Metadata, bool]:
        """Create a new database at root, or load and validate the existing one.

        Returns (metadata, created).
        """
        try:
            is_dir = self.root.is_dir()
            if not is_dir and self.root.exists():
                msg = f"root path is not a directory: {self.root}"
                raise InitializationError(msg)
            if not is_dir:
                self.root.mkdir(parents=True)
        except (OSError, ValueError) as exc:
            msg = f"invalid root directory {self.root!r}: {exc}"
            raise InitializationError(msg) from exc

        if not is_dir:
            metadata = Metadata(
                id=new_id(),
                db_signature=DB_SIGNATURE,
                version=self.version,
            )
            self._write(metadata)
            self._metadata = metadata
            return self._metadata, True

        metadata = self._read()
        if metadata.db_signature != DB_SIGNATURE:
            msg = f"root directory exists, but could not validate instance metadata: {self.root}"
            raise InitializationError(msg)
        if metadata.version != self.version:
            msg = f"metadata version {metadata.version} does not match engine version {self.version}"
            raise InitializationError(msg)
        self._metadata = metadata
        return metadata, False

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    def update(self, **changes: Any) -> Metadata:
        """Merge changes into the in-memory record and rewrite the whole file."""
        updated = dataclasses.replace(self.metadata, **changes)
        self._write(updated)
        self._metadata = updated
        return updated

    def _read(self) -> Metadata:
        try:
            with self.path.open(encoding="utf-8") as f:
                fcntl.flock(f, fcntl.LOCK_SH)
                raw = json.load(f)
            return Metadata.from_file_dict(raw)
        except FileNotFoundError as exc:
            msg = f"failed to read metadata file: {self.path} does not exist"
            raise InitializationError(msg) from exc
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            msg = f"failed to read metadata file {self.path}: {exc}"
            raise InitializationError(msg) from exc

    def _write(self, metadata: Metadata) -> None:
        """Write to a tmp file under exclusive flock, then rename over the real file.

        On failure the tmp file is removed and the previous file is left as it was.
        """
        tmp = self.path.with_suffix(".json.tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                fcntl.flock(f, fcntl.LOCK_EX)
                f.write(dumps(metadata.to_file_dict()))
            tmp.replace(self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            msg = f"failed to write metadata file {self.path}: {exc}"
            raise StorageError(msg) from exc
        logger.debug("metadata written: %s (%d collections)", self.path, len(metadata.collections))
