"""Runtime settings, read from the environment.

The CLI exposes the same settings as options (with ``envvar=``), so a
flag overrides the environment and the environment overrides defaults.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

STORAGE_BACKENDS = ("json", "sql")
LOG_FORMATS = ("console", "json")


@dataclass(frozen=True)
class Settings:
    storage: str = "json"
    data_dir: Path = DEFAULT_DATA_DIR
    database_url: str | None = None
    log_level: str = "WARNING"
    log_format: str = "console"

    def __post_init__(self) -> None:
        if self.storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend '{self.storage}'; "
                f"expected one of {', '.join(STORAGE_BACKENDS)}"
            )
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format '{self.log_format}'")

    @property
    def json_path(self) -> Path:
        return self.data_dir / "cafe.json"

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or f"sqlite:///{self.data_dir / 'cafe.db'}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        return cls(
            storage=env.get("CAFE_STORAGE", "json").lower(),
            data_dir=Path(env.get("CAFE_DATA_DIR", str(DEFAULT_DATA_DIR))),
            database_url=env.get("CAFE_DATABASE_URL") or None,
            log_level=env.get("CAFE_LOG_LEVEL", "WARNING").upper(),
            log_format=env.get("CAFE_LOG_FORMAT", "console").lower(),
        )
