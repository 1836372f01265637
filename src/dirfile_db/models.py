"""Data models and JSON helpers shared by the metadata and document layers."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

DB_SIGNATURE = "DirfileDB"
METADATA_FILENAME = "metadata-dirfile-db.json"
DOCUMENT_SUFFIX = ".json"


def engine_version() -> str:
    """Version of the installed dirfile-db distribution, stamped into new metadata."""
    try:
        return version("dirfile-db")
    except PackageNotFoundError:
        return "0.0.0+unknown"


VERSION = engine_version()


class _Undefined:
    """Marker for a field that is present but has no value."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


def new_id() -> str:
    """Generate a fresh identifier for a database or document."""
    return str(uuid.uuid4())


def replace_undefined(value: Any) -> Any:
    """Return None for UNDEFINED, otherwise the value unchanged.

    Containers are walked so nested UNDEFINED values become null too.
    """
    if value is UNDEFINED:
        return None
    if isinstance(value, dict):
        return {k: replace_undefined(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [replace_undefined(v) for v in value]
    return value


def dumps(data: Any) -> str:
    return json.dumps(replace_undefined(data), indent=2, ensure_ascii=False)


@dataclass
class Metadata:
    """In-memory form of metadata-dirfile-db.json."""

    id: str
    db_signature: str
    version: str
    collections: dict[str, Path] = field(default_factory=dict)

    @classmethod
    def from_file_dict(cls, d: dict[str, Any]) -> Metadata:
        """Build from the on-disk form, where collections is a list of [name, path] pairs."""
        return cls(
            id=d["_id"],
            db_signature=d["dbSignature"],
            version=d["version"],
            collections={str(name): Path(path) for name, path in d.get("collections") or []},
        )

    def to_file_dict(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "dbSignature": self.db_signature,
            "version": self.version,
            "collections": [[name, str(path)] for name, path in self.collections.items()],
        }
