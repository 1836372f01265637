"""
Pytest configuration and shared fixtures
"""
import json

import pytest

from dirfile_db import DirfileDB, METADATA_FILENAME


@pytest.fixture
def db_root(tmp_path):
    """A database root that does not exist yet."""
    return tmp_path / "db"


@pytest.fixture
def db(db_root):
    """Fresh database with an empty 'users' collection."""
    handle = DirfileDB(db_root)
    handle.new_collection("users")
    return handle


@pytest.fixture
def read_metadata():
    """Parse the metadata file under a database root."""
    def _read(root):
        return json.loads((root / METADATA_FILENAME).read_text(encoding="utf-8"))
    return _read
