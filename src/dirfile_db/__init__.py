"""Directory/file document store: a database is a directory, a collection a
subdirectory, a document one JSON file.

Layout:
    <root>/
        metadata-dirfile-db.json  # {"_id", "dbSignature", "version", "collections": [[name, path], ...]}
        <collection>/
            <_id>.json            # one document; UNDEFINED fields are written as null

Queries are flat equality conjunctions: {"name": "Ann", "age": 30}. Every read
scans the collection directory; there is no index and no cache.
"""

from dirfile_db.aio import AsyncDirfileDB
from dirfile_db.config import DirfileConfig, init_config, load_config
from dirfile_db.db import DirfileDB
from dirfile_db.errors import (
    CollectionError,
    DirfileDBError,
    DocumentError,
    InitializationError,
    StorageError,
)
from dirfile_db.models import DB_SIGNATURE, METADATA_FILENAME, UNDEFINED, VERSION, Metadata, replace_undefined
from dirfile_db.query import matches

__all__ = [
    "DB_SIGNATURE",
    "METADATA_FILENAME",
    "UNDEFINED",
    "VERSION",
    "AsyncDirfileDB",
    "CollectionError",
    "DirfileConfig",
    "DirfileDB",
    "DirfileDBError",
    "DocumentError",
    "InitializationError",
    "Metadata",
    "StorageError",
    "init_config",
    "load_config",
    "matches",
    "replace_undefined",
]
