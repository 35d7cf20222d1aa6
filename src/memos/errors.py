"""Error taxonomy raised by the memo store.

``MemoNotFoundError`` is the only error a caller should surface as "not
found"; everything else is a server-side failure.
"""

from __future__ import annotations


class MemoStoreError(Exception):
    """Base class for every error the store raises."""

    def __init__(self, message: str, *, memo_id: str | None = None, operation: str | None = None) -> None:
        super().__init__(message)
        self.memo_id = memo_id
        self.operation = operation

    def __str__(self) -> str:
        msg = super().__str__()
        context = " ".join(
            f"{k}={v}" for k, v in (("op", self.operation), ("id", self.memo_id)) if v
        )
        return f"{msg} ({context})" if context else msg


class MemoNotFoundError(MemoStoreError, LookupError):
    """The referenced memo ID has no backing file."""


class MemoFormatError(MemoStoreError, ValueError):
    """On-disk content violates the front-matter framing or metadata shape."""


class MemoIOError(MemoStoreError, OSError):
    """An underlying filesystem operation failed."""


class MemoConflictError(MemoIOError):
    """No free memo ID could be found within the retry budget."""
