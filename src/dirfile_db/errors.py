"""Exception hierarchy for dirfile-db.

    DirfileDBError
        InitializationError   root invalid, metadata missing/corrupt, signature or version mismatch
        CollectionError       collection already exists / does not exist / bad name
        DocumentError         missing _id, unknown document, corrupt document file
        StorageError          filesystem failure (also an OSError), wrapped with context
"""

from __future__ import annotations


class DirfileDBError(Exception):
    """Base class for every error raised by dirfile-db."""


class InitializationError(DirfileDBError):
    pass


class CollectionError(DirfileDBError):
    pass


class DocumentError(DirfileDBError):
    pass


class StorageError(DirfileDBError, OSError):
    """An underlying filesystem call failed; the original error is __cause__."""
