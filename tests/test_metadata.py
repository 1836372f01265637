"""
Tests for metadata initialization, validation and persistence
"""
import json

import pytest

from dirfile_db import DB_SIGNATURE, METADATA_FILENAME, VERSION, DirfileDB, InitializationError, StorageError
from dirfile_db.metadata import MetadataManager
from dirfile_db.models import Metadata


class TestInitialize:
    """Tests for creating a new database"""

    def test_creates_root_and_metadata(self, db_root, read_metadata):
        manager = MetadataManager(db_root)
        metadata, created = manager.initialize()

        assert created is True
        assert db_root.is_dir()
        raw = read_metadata(db_root)
        assert raw == {
            "_id": metadata.id,
            "dbSignature": DB_SIGNATURE,
            "version": VERSION,
            "collections": [],
        }

    def test_creates_nested_root(self, tmp_path):
        root = tmp_path / "a" / "b" / "db"
        MetadataManager(root).initialize()
        assert (root / METADATA_FILENAME).exists()

    def test_loads_existing(self, db_root):
        first, _ = MetadataManager(db_root).initialize()
        second, created = MetadataManager(db_root).initialize()

        assert created is False
        assert second.id == first.id

    def test_no_tmp_file_left_behind(self, db_root):
        MetadataManager(db_root).initialize()
        assert [p.name for p in db_root.iterdir()] == [METADATA_FILENAME]


class TestValidation:
    """Tests for rejecting directories that are not valid databases"""

    def test_existing_dir_without_metadata(self, tmp_path):
        with pytest.raises(InitializationError, match="does not exist"):
            MetadataManager(tmp_path).initialize()

    def test_corrupt_metadata(self, db_root):
        db_root.mkdir()
        (db_root / METADATA_FILENAME).write_text("{not json")
        with pytest.raises(InitializationError, match="failed to read metadata"):
            MetadataManager(db_root).initialize()

    def test_metadata_missing_fields(self, db_root):
        db_root.mkdir()
        (db_root / METADATA_FILENAME).write_text(json.dumps({"dbSignature": DB_SIGNATURE}))
        with pytest.raises(InitializationError):
            MetadataManager(db_root).initialize()

    def test_wrong_signature(self, db_root):
        db_root.mkdir()
        (db_root / METADATA_FILENAME).write_text(json.dumps({
            "_id": "x", "dbSignature": "SomethingElse", "version": VERSION, "collections": [],
        }))
        with pytest.raises(InitializationError, match="could not validate"):
            MetadataManager(db_root).initialize()

    def test_version_mismatch(self, db_root):
        MetadataManager(db_root, version="1.0.0").initialize()
        with pytest.raises(InitializationError, match="version"):
            MetadataManager(db_root, version="2.0.0").initialize()

    def test_root_is_a_file(self, tmp_path):
        root = tmp_path / "file"
        root.write_text("")
        with pytest.raises(InitializationError, match="not a directory"):
            MetadataManager(root).initialize()

    def test_invalid_root_path(self, tmp_path):
        with pytest.raises(InitializationError, match="invalid root"):
            DirfileDB(str(tmp_path / "bad\0name"))


class TestUpdate:
    """Tests for metadata updates"""

    def test_update_rewrites_file(self, db_root, read_metadata):
        manager = MetadataManager(db_root)
        manager.initialize()
        manager.update(collections={"users": db_root / "users", "posts": db_root / "posts"})

        raw = read_metadata(db_root)
        assert raw["collections"] == [
            ["users", str(db_root / "users")],
            ["posts", str(db_root / "posts")],
        ]

    def test_update_keeps_unchanged_fields(self, db_root):
        manager = MetadataManager(db_root)
        original, _ = manager.initialize()
        updated = manager.update(collections={"users": db_root / "users"})
        assert updated.id == original.id
        assert updated.version == original.version

    def test_failed_write_keeps_previous_record(self, db_root, read_metadata):
        manager = MetadataManager(db_root)
        original, _ = manager.initialize()
        manager.path.unlink()
        manager.path.mkdir()
        (manager.path / "occupied").write_text("")

        with pytest.raises(StorageError, match="failed to write metadata"):
            manager.update(collections={"users": db_root / "users"})

        assert manager.metadata == original
        assert not manager.path.with_suffix(".json.tmp").exists()

    def test_metadata_before_initialize(self, db_root):
        with pytest.raises(InitializationError):
            _ = MetadataManager(db_root).metadata


class TestMetadataModel:
    """Tests for the on-disk collection pair format"""

    def test_round_trip_preserves_order(self, tmp_path):
        meta = Metadata(id="i", db_signature=DB_SIGNATURE, version="1")
        meta.collections["b"] = tmp_path / "b"
        meta.collections["a"] = tmp_path / "a"

        loaded = Metadata.from_file_dict(meta.to_file_dict())
        assert list(loaded.collections) == ["b", "a"]
        assert loaded == meta

    def test_collections_are_pairs_not_object(self, tmp_path):
        meta = Metadata(id="i", db_signature=DB_SIGNATURE, version="1", collections={"a": tmp_path / "a"})
        assert meta.to_file_dict()["collections"] == [["a", str(tmp_path / "a")]]
