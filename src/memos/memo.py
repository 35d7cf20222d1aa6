"""Core Memo dataclasses and the memo ID grammar."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

#: ``YYYY-MM-DD-N``: creation date plus a positive per-date sequence number
#: without leading zeros
MEMO_ID_RE = re.compile(r"(\d{4}-\d{2}-\d{2})-([1-9]\d*)")


def parse_memo_id(memo_id: str) -> tuple[str, int]:
    """Split *memo_id* into ``(date_str, seq)``.

    Raises ``ValueError`` when the ID does not follow ``YYYY-MM-DD-N``.
    """
    match = MEMO_ID_RE.fullmatch(memo_id)
    if not match:
        raise ValueError(f"malformed memo id: {memo_id!r}")
    return match.group(1), int(match.group(2))


def make_memo_id(date_str: str, seq: int) -> str:
    return f"{date_str}-{seq}"


@dataclass
class Memo:
    """A single persisted Markdown memo."""

    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)

    @property
    def date(self) -> str:
        """Creation date encoded in the ID (``YYYY-MM-DD``)."""
        return parse_memo_id(self.id)[0]

    @property
    def seq(self) -> int:
        return parse_memo_id(self.id)[1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "tags": list(self.tags),
            "content": self.content,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass
class MemoDraft:
    """Caller-supplied fields for a new memo."""

    title: str = ""
    content: str = ""
    tags: list[str] = field(default_factory=list)


@dataclass
class MemoPatch:
    """Sparse update: ``None`` or empty values leave the stored field alone."""

    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoPatch:
        return cls(
            title=data.get("title"),
            content=data.get("content"),
            tags=data.get("tags"),
        )

    def apply(self, memo: Memo) -> None:
        """Overwrite the fields of *memo* that this patch sets."""
        if self.title:
            memo.title = self.title
        if self.tags:
            memo.tags = list(self.tags)
        if self.content:
            memo.content = self.content
