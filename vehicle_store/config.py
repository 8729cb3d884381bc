"""
Configuration for the vehicle store.

Values come from code, environment variables or the ``vehicle_store``
section of a YAML settings file:

```yaml
vehicle_store:
  data_dir: ~/.local/share/vehicle_store
  db_filename: lite.db
  autocomplete_limit: 5
  case_sensitive_autocomplete: true
  push_local_edits: false
```
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

APP_NAME = "vehicle_store"


def default_data_dir() -> Path:
    """Per-user local application data directory."""
    if sys.platform == "win32":
        base = os.environ.get("LOCALAPPDATA")
        if base:
            return Path(base) / APP_NAME
    base = os.environ.get("XDG_DATA_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class StoreConfig:
    """Configuration for the local vehicle store."""

    data_dir: Path = field(default_factory=default_data_dir)
    db_filename: str = "lite.db"
    blob_dir_name: str = "protected"
    autocomplete_limit: int = 5
    case_sensitive_autocomplete: bool = True
    push_local_edits: bool = False
    seed_count: int = 100

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir).expanduser()

    @property
    def db_path(self) -> Path:
        """Full path of the database file."""
        return self.data_dir / self.db_filename

    @property
    def blob_dir(self) -> Path:
        """Directory of the protected blob store."""
        return self.data_dir / self.blob_dir_name

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Create config from environment variables."""
        config = cls()

        data_dir = os.environ.get("VEHICLE_STORE_DATA_DIR")
        if data_dir:
            config.data_dir = Path(data_dir).expanduser()

        config.db_filename = os.environ.get("VEHICLE_STORE_DB_FILENAME", config.db_filename)

        push = os.environ.get("VEHICLE_STORE_PUSH_LOCAL_EDITS")
        if push is not None:
            config.push_local_edits = _parse_bool(push)

        limit = os.environ.get("VEHICLE_STORE_AUTOCOMPLETE_LIMIT")
        if limit:
            config.autocomplete_limit = int(limit)

        return config

    @classmethod
    def from_file(cls, path: Path) -> StoreConfig:
        """Create config from the ``vehicle_store`` section of a YAML file.

        A missing file or section yields the defaults; unknown keys are ignored.
        """
        section = _load_section(Path(path))
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in section.items() if k in known}

        ignored = sorted(set(section) - known)
        if ignored:
            logger.warning(f"Ignoring unknown vehicle_store settings: {ignored}")

        return cls(**values)


def _load_section(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    content = yaml.safe_load(path.read_text()) or {}
    section = content.get(APP_NAME) or {}
    if not isinstance(section, dict):
        raise ValueError(f"'{APP_NAME}' section in {path} must be a mapping")
    return section
