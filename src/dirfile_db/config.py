"""DirfileConfig: project-local config for a dirfile-db database.

Default layout (all relative to the project root):

    dirfile.toml          # project config
    .env                  # optional: DIRFILE_DB_ROOT overrides [db].root_dir
    defaultDB/            # database root
        metadata-dirfile-db.json
        <collection>/
            <id>.json

dirfile.toml example:

    [db]
    root_dir = "defaultDB"

    [logging]
    level = "WARNING"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_CONFIG_FILENAME = "dirfile.toml"
_DEFAULT_ROOT_DIR = "defaultDB"
_DEFAULT_LOG_LEVEL = "WARNING"
_ROOT_ENV_VAR = "DIRFILE_DB_ROOT"


@dataclass
class LoggingConfig:
    level: str = _DEFAULT_LOG_LEVEL


@dataclass
class DirfileConfig:
    """Resolved configuration for a dirfile-db project."""

    root: Path                      # directory that contains dirfile.toml
    root_dir: Path = field(default_factory=lambda: Path(_DEFAULT_ROOT_DIR))
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def config_path(self) -> Path:
        return self.root / _CONFIG_FILENAME


def _load_env(root: Path) -> dict[str, str]:
    """Parse a simple KEY=VALUE .env file."""
    env_file = root / ".env"
    if not env_file.exists():
        return {}
    env: dict[str, str] = {}
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            k, _, v = line.partition("=")
            env[k.strip()] = v.strip().strip('"').strip("'")
    return env


def load_config(root: Path | str | None = None) -> DirfileConfig:
    """Load dirfile.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    env = _load_env(root_path)
    db_section = raw.get("db", {})
    log_section = raw.get("logging", {})

    root_dir = env.get(_ROOT_ENV_VAR) or str(db_section.get("root_dir", _DEFAULT_ROOT_DIR))

    return DirfileConfig(
        root=root_path,
        root_dir=root_path / root_dir,
        logging=LoggingConfig(
            level=str(log_section.get("level", _DEFAULT_LOG_LEVEL)).upper(),
        ),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for dirfile.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, root_dir: str | None = None) -> Path:
    """Write a default dirfile.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"dirfile.toml already exists at {config_path}"
        raise FileExistsError(msg)

    content = f"""\
[db]
root_dir = "{root_dir or _DEFAULT_ROOT_DIR}"   # relative to this file; or set {_ROOT_ENV_VAR} in .env

# [logging]
# level = "{_DEFAULT_LOG_LEVEL}"   # DEBUG | INFO | WARNING | ERROR
"""
    config_path.write_text(content)
    return config_path
