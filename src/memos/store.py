"""MemoStore: file-backed persistence for memos.

One ``<id>.md`` file per memo in a single directory. IDs are
``YYYY-MM-DD-N`` where ``N`` is ``max(N in use that day) + 1``; the per-date
maxima live in an in-memory cache that is rebuilt from the directory at
startup and corrected on delete. Every listing and cache rebuild is a full
directory scan, which bounds how large a memo directory can reasonably grow.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from pathlib import Path

from memos.codec import format_memo, normalize_content, parse_memo
from memos.errors import MemoConflictError, MemoIOError, MemoNotFoundError
from memos.fs import atomic_write_text, write_new_text
from memos.memo import Memo, MemoDraft, MemoPatch, make_memo_id, parse_memo_id
from memos.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

_MEMO_FILE_RE = re.compile(r"((\d{4}-\d{2}-\d{2})-([1-9]\d*))\.md")
_MEMO_SUFFIX = ".md"


def _local_now() -> datetime:
    return datetime.now().astimezone()


class MemoStore:
    """Thread-safe CRUD over a directory of memo files."""

    #: Upper bound on IDs tried by a single ``create`` before giving up
    MAX_ID_ATTEMPTS = 64

    def __init__(self, memos_dir: Path, *, clock: Callable[[], datetime] | None = None) -> None:
        self.memos_dir = Path(memos_dir)
        self._clock = clock or _local_now
        self._lock = ReadWriteLock()
        self._max_seq: dict[str, int] = {}

        try:
            self.memos_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise MemoIOError(f"cannot create memo directory {self.memos_dir}: {exc}", operation="init") from exc

        self.rebuild_cache()

    @classmethod
    def from_data_dir(cls, data_dir: Path, **kwargs) -> MemoStore:
        """Open the store rooted at ``<data_dir>/memos``."""
        return cls(Path(data_dir) / "memos", **kwargs)

    # ------------------------------------------------------------------
    # Directory scan / cache
    # ------------------------------------------------------------------

    def _iter_memo_files(self) -> Iterator[tuple[str, str, int, Path]]:
        """Yield ``(memo_id, date_str, seq, path)`` for every memo file.

        Filenames that do not look like ``<id>.md`` are skipped.
        """
        with os.scandir(self.memos_dir) as entries:
            names = sorted(e.name for e in entries if e.is_file())
        for name in names:
            match = _MEMO_FILE_RE.fullmatch(name)
            if not match:
                continue
            yield match.group(1), match.group(2), int(match.group(3)), self.memos_dir / name

    def _scan_max(self, date_str: str | None = None) -> dict[str, int]:
        maxima: dict[str, int] = {}
        for _, day, seq, _ in self._iter_memo_files():
            if date_str is not None and day != date_str:
                continue
            if seq > maxima.get(day, 0):
                maxima[day] = seq
        return maxima

    def rebuild_cache(self) -> None:
        """Replace the per-date cache with a fresh scan of the directory."""
        with self._lock.write_locked():
            try:
                self._max_seq = self._scan_max()
            except OSError as exc:
                raise MemoIOError(f"cannot scan {self.memos_dir}: {exc}", operation="scan") from exc
        logger.debug("Rebuilt sequence cache for %d dates in %s", len(self._max_seq), self.memos_dir)

    def _rescan_date(self, date_str: str) -> None:
        try:
            self._max_seq[date_str] = self._scan_max(date_str).get(date_str, 0)
        except OSError as exc:
            # A stale high value only leaves a gap; it can never cause a collision
            logger.warning("Rescan of %s failed, keeping cached maximum: %s", date_str, exc)

    def max_sequence(self, date_str: str) -> int:
        """Highest sequence number currently cached for *date_str* (0 if none)."""
        with self._lock.read_locked():
            return self._max_seq.get(date_str, 0)

    # ------------------------------------------------------------------
    # File helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _path(self, memo_id: str) -> Path:
        return self.memos_dir / f"{memo_id}{_MEMO_SUFFIX}"

    def _checked_path(self, memo_id: str, operation: str) -> Path:
        try:
            parse_memo_id(memo_id)
        except (TypeError, ValueError) as exc:
            raise MemoNotFoundError("memo not found", memo_id=memo_id, operation=operation) from exc
        return self._path(memo_id)

    def _read(self, memo_id: str, operation: str) -> Memo:
        path = self._checked_path(memo_id, operation)
        try:
            # newline="" keeps a lone \r in the body intact
            with open(path, encoding="utf-8", newline="") as fh:
                text = fh.read()
        except FileNotFoundError as exc:
            raise MemoNotFoundError("memo not found", memo_id=memo_id, operation=operation) from exc
        except OSError as exc:
            raise MemoIOError(f"cannot read memo file: {exc}", memo_id=memo_id, operation=operation) from exc
        return parse_memo(text, memo_id)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(self, draft: MemoDraft) -> Memo:
        """Persist a new memo and return it with its assigned ID and timestamps."""
        with self._lock.write_locked():
            now = self._clock()
            day = now.strftime("%Y-%m-%d")
            for _ in range(self.MAX_ID_ATTEMPTS):
                previous = self._max_seq.get(day, 0)
                seq = previous + 1
                self._max_seq[day] = seq
                memo = Memo(
                    id=make_memo_id(day, seq),
                    title=draft.title,
                    tags=list(draft.tags),
                    content=normalize_content(draft.content),
                    created_at=now,
                    updated_at=now,
                )
                try:
                    write_new_text(self._path(memo.id), format_memo(memo))
                except FileExistsError:
                    logger.warning("Memo file for %s already exists, trying next number", memo.id)
                    continue
                except OSError as exc:
                    self._max_seq[day] = previous
                    raise MemoIOError(f"cannot write memo file: {exc}", memo_id=memo.id, operation="create") from exc
                logger.info("Created memo %s", memo.id)
                return memo

        raise MemoConflictError(
            f"no free memo id for {day} after {self.MAX_ID_ATTEMPTS} attempts", operation="create"
        )

    def get(self, memo_id: str) -> Memo:
        with self._lock.read_locked():
            return self._read(memo_id, "get")

    def update(self, memo_id: str, patch: MemoPatch) -> None:
        """Apply *patch* to an existing memo and bump ``updated_at``."""
        with self._lock.write_locked():
            memo = self._read(memo_id, "update")
            patch.apply(memo)
            memo.content = normalize_content(memo.content)
            # updated_at must move forward even if the clock has not ticked
            memo.updated_at = max(self._clock(), memo.updated_at + timedelta(microseconds=1))
            try:
                atomic_write_text(self._path(memo_id), format_memo(memo))
            except OSError as exc:
                raise MemoIOError(f"cannot write memo file: {exc}", memo_id=memo_id, operation="update") from exc
        logger.info("Updated memo %s", memo_id)

    def delete(self, memo_id: str) -> None:
        """Remove a memo; recompute its date's maximum if it held it."""
        with self._lock.write_locked():
            path = self._checked_path(memo_id, "delete")
            try:
                path.unlink()
            except FileNotFoundError as exc:
                raise MemoNotFoundError("memo not found", memo_id=memo_id, operation="delete") from exc
            except OSError as exc:
                raise MemoIOError(f"cannot delete memo file: {exc}", memo_id=memo_id, operation="delete") from exc

            day, seq = parse_memo_id(memo_id)
            if seq >= self._max_seq.get(day, 0):
                self._rescan_date(day)
        logger.info("Deleted memo %s", memo_id)

    def list_memos(self) -> list[Memo]:
        """Return every memo; a single unreadable memo aborts the listing."""
        with self._lock.read_locked():
            try:
                files = list(self._iter_memo_files())
            except OSError as exc:
                raise MemoIOError(f"cannot list {self.memos_dir}: {exc}", operation="list") from exc
            return [self._read(memo_id, "list") for memo_id, _, _, _ in files]

    def tags(self) -> list[str]:
        """Sorted unique tags across all memos."""
        return sorted({tag for memo in self.list_memos() for tag in memo.tags})
