"""MemoConfig: data directory and logging settings for the memo store.

Settings come from an optional TOML file and are then overridden by
environment variables:

    [memos]
    data_dir = "./data"     # memos live in <data_dir>/memos/
    debug = false
    log_level = "INFO"

Environment variables (take precedence over the file):
    MEMOS_DATA_DIR   – data directory
    MEMOS_DEBUG      – "1", "true", "yes" or "on" enable debug logging
    MEMOS_LOG_LEVEL  – DEBUG, INFO, WARNING, ERROR or CRITICAL
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from memos.errors import MemoIOError
from memos.logging_setup import setup_logging
from memos.store import MemoStore

logger = logging.getLogger(__name__)

_DEFAULT_DATA_DIR = "./data"
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_TRUTHY = {"1", "true", "yes", "on"}


def _parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


@dataclass
class MemoConfig:
    data_dir: Path = field(default_factory=lambda: Path(_DEFAULT_DATA_DIR))
    debug: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir).expanduser()
        self.log_level = self.log_level.upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"unknown log level: {self.log_level!r}")

    @property
    def memos_dir(self) -> Path:
        return self.data_dir / "memos"

    def ensure_dirs(self) -> None:
        """Create ``<data_dir>/memos`` if it is missing."""
        try:
            self.memos_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise MemoIOError(f"cannot create {self.memos_dir}: {exc}", operation="init") from exc


def load_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> MemoConfig:
    """Build a :class:`MemoConfig` from *path* (optional) and *env*."""
    env = os.environ if env is None else env
    raw: dict[str, object] = {}

    if path is not None:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
        section = data.get("memos", {})
        raw.update({k: v for k, v in section.items() if k in {"data_dir", "debug", "log_level"}})

    if env.get("MEMOS_DATA_DIR"):
        raw["data_dir"] = env["MEMOS_DATA_DIR"]
    if env.get("MEMOS_DEBUG"):
        raw["debug"] = env["MEMOS_DEBUG"]
    if env.get("MEMOS_LOG_LEVEL"):
        raw["log_level"] = env["MEMOS_LOG_LEVEL"]

    return MemoConfig(
        data_dir=Path(str(raw.get("data_dir", _DEFAULT_DATA_DIR))),
        debug=_parse_bool(raw.get("debug", False)),
        log_level=str(raw.get("log_level", "INFO")),
    )


def open_store(config: MemoConfig) -> MemoStore:
    """Configure logging, create the data layout and open the store."""
    setup_logging(config.log_level, debug=config.debug)
    config.ensure_dirs()
    store = MemoStore(config.memos_dir)
    logger.info("Memo store ready at %s", config.memos_dir)
    return store
