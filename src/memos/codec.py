"""YAML front-matter codec for memo files.

A memo file looks like::

    ---
    id: 2024-01-01-1
    title: Test
    tags:
      - x
    created_at: '2024-01-01T09:00:00+00:00'
    updated_at: '2024-01-01T09:00:00+00:00'
    ---

    hello

The metadata block is plain YAML; the body after the closing delimiter is the
Markdown content with leading/trailing blank lines trimmed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import yaml

from memos.errors import MemoFormatError
from memos.memo import Memo

DELIMITER = "---"


class _IndentedDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their key."""

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        return super().increase_indent(flow, False)


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    # Plain and single-quoted scalars fold line separators such as \x85
    if not data.isprintable():
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style='"')
    return dumper.represent_str(data)


_IndentedDumper.add_representer(str, _represent_str)


def _strip_cr(line: str) -> str:
    return line[:-1] if line.endswith("\r") else line


def normalize_content(text: str) -> str:
    """Drop leading and trailing blank lines from *text*."""
    lines = [_strip_cr(line) for line in text.split("\n")]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def split_frontmatter(text: str, memo_id: str | None = None) -> tuple[str, str]:
    """Split memo file *text* into ``(metadata_yaml, body)``.

    Unlike a lenient front-matter reader this is strict: the very first line
    must be the delimiter and a closing delimiter line must follow.
    """
    lines = text.split("\n")
    if _strip_cr(lines[0]) != DELIMITER:
        raise MemoFormatError("missing opening front-matter delimiter", memo_id=memo_id, operation="parse")

    for idx in range(1, len(lines)):
        if _strip_cr(lines[idx]) == DELIMITER:
            return "".join(f"{line}\n" for line in lines[1:idx]), "\n".join(lines[idx + 1 :])

    raise MemoFormatError("missing closing front-matter delimiter", memo_id=memo_id, operation="parse")


def _coerce_timestamp(value: Any, key: str, memo_id: str | None) -> datetime:
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise MemoFormatError(f"invalid {key}: {value!r}", memo_id=memo_id, operation="parse") from exc
    if not isinstance(value, datetime):
        raise MemoFormatError(f"missing or invalid {key}", memo_id=memo_id, operation="parse")
    # Naive timestamps are local time
    return value if value.tzinfo is not None else value.astimezone()


def _coerce_tags(value: Any, memo_id: str | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(",") if t.strip()]
    if not isinstance(value, list):
        raise MemoFormatError("tags must be a list", memo_id=memo_id, operation="parse")
    tags: list[str] = []
    for tag in value:
        if isinstance(tag, (dict, list)) or tag is None:
            raise MemoFormatError(f"invalid tag: {tag!r}", memo_id=memo_id, operation="parse")
        tags.append(str(tag))
    return tags


def parse_memo(text: str, memo_id: str | None = None) -> Memo:
    """Decode memo file *text*.

    *memo_id* is the ID implied by the filename; it is used when the metadata
    has no ``id`` and must agree with it otherwise.
    """
    meta_text, body = split_frontmatter(text, memo_id)
    try:
        meta = yaml.safe_load(meta_text)
    except yaml.YAMLError as exc:
        raise MemoFormatError(f"invalid YAML metadata: {exc}", memo_id=memo_id, operation="parse") from exc

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise MemoFormatError("metadata is not a mapping", memo_id=memo_id, operation="parse")

    stored_id = meta.get("id")
    if stored_id is None:
        stored_id = memo_id
    if not stored_id:
        raise MemoFormatError("metadata has no id", memo_id=memo_id, operation="parse")
    stored_id = str(stored_id)
    if memo_id is not None and stored_id != memo_id:
        raise MemoFormatError(f"metadata id {stored_id!r} does not match file", memo_id=memo_id, operation="parse")

    title = meta.get("title")
    if title is None:
        title = ""
    elif isinstance(title, (dict, list)):
        raise MemoFormatError("title must be a string", memo_id=stored_id, operation="parse")

    return Memo(
        id=stored_id,
        title=str(title),
        tags=_coerce_tags(meta.get("tags"), stored_id),
        content=normalize_content(body),
        created_at=_coerce_timestamp(meta.get("created_at"), "created_at", stored_id),
        updated_at=_coerce_timestamp(meta.get("updated_at"), "updated_at", stored_id),
    )


def format_memo(memo: Memo) -> str:
    """Encode *memo* as front-matter + body text (inverse of :func:`parse_memo`)."""
    meta = {
        "id": memo.id,
        "title": memo.title,
        "tags": list(memo.tags),
        "created_at": memo.created_at.isoformat(),
        "updated_at": memo.updated_at.isoformat(),
    }
    meta_text = yaml.dump(
        meta,
        Dumper=_IndentedDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return f"{DELIMITER}\n{meta_text}{DELIMITER}\n\n{memo.content}\n"
