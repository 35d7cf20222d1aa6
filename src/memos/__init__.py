"""Ramblog memo store library."""

from memos.codec import format_memo, parse_memo
from memos.config import MemoConfig, load_config, open_store
from memos.db import MemoDB
from memos.errors import (
    MemoConflictError,
    MemoFormatError,
    MemoIOError,
    MemoNotFoundError,
    MemoStoreError,
)
from memos.memo import Memo, MemoDraft, MemoPatch
from memos.store import MemoStore

__all__ = [
    "Memo",
    "MemoDraft",
    "MemoPatch",
    "MemoStore",
    "MemoDB",
    "MemoConfig",
    "load_config",
    "open_store",
    "parse_memo",
    "format_memo",
    "MemoStoreError",
    "MemoNotFoundError",
    "MemoFormatError",
    "MemoIOError",
    "MemoConflictError",
]
