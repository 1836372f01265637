"""
Unit tests for config module
"""
from pathlib import Path

import pytest

from dirfile_db import DirfileDB
from dirfile_db.config import DirfileConfig, init_config, load_config


class TestLoadConfig:
    """Tests for load_config"""

    def test_defaults_without_file(self, tmp_path):
        cfg = load_config(tmp_path)
        assert cfg.root == tmp_path
        assert cfg.root_dir == tmp_path / "defaultDB"
        assert cfg.logging.level == "WARNING"

    def test_reads_toml(self, tmp_path):
        (tmp_path / "dirfile.toml").write_text('[db]\nroot_dir = "data"\n\n[logging]\nlevel = "debug"\n')
        cfg = load_config(tmp_path)
        assert cfg.root_dir == tmp_path / "data"
        assert cfg.logging.level == "DEBUG"

    def test_env_overrides_root_dir(self, tmp_path):
        (tmp_path / "dirfile.toml").write_text('[db]\nroot_dir = "data"\n')
        (tmp_path / ".env").write_text("# local\nDIRFILE_DB_ROOT='other'\n")
        assert load_config(tmp_path).root_dir == tmp_path / "other"

    def test_searches_upward(self, tmp_path, monkeypatch):
        (tmp_path / "dirfile.toml").write_text('[db]\nroot_dir = "data"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        cfg = load_config()
        assert cfg.root == tmp_path
        assert cfg.root_dir == tmp_path / "data"


class TestInitConfig:
    """Tests for init_config"""

    def test_writes_loadable_file(self, tmp_path):
        path = init_config(tmp_path, root_dir="store")
        assert path == tmp_path / "dirfile.toml"
        assert load_config(tmp_path).root_dir == tmp_path / "store"

    def test_refuses_to_overwrite(self, tmp_path):
        init_config(tmp_path)
        with pytest.raises(FileExistsError):
            init_config(tmp_path)


class TestDirfileDBConfig:
    """Tests for opening a database from config"""

    def test_uses_config_root_dir(self, tmp_path):
        cfg = DirfileConfig(root=tmp_path, root_dir=tmp_path / "cfgdb")
        db = DirfileDB(config=cfg)
        assert Path(db.get_root_dir()) == tmp_path / "cfgdb"
        assert (tmp_path / "cfgdb").is_dir()

    def test_explicit_root_wins_over_config(self, tmp_path):
        cfg = DirfileConfig(root=tmp_path, root_dir=tmp_path / "cfgdb")
        db = DirfileDB(tmp_path / "explicit", config=cfg)
        assert Path(db.get_root_dir()) == tmp_path / "explicit"
        assert not (tmp_path / "cfgdb").exists()

    def test_default_root_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        db = DirfileDB()
        assert db.get_root_dir() == "./defaultDB"
        assert (tmp_path / "defaultDB").is_dir()
