"""MemoDB — read-only analytical view over a memo store snapshot.

Uses DuckDB (in-memory) as a query engine over memo metadata and bodies and
returns :mod:`polars` DataFrames, which the notebook UI renders directly.
The memo files stay the only source of truth; call :meth:`MemoDB.refresh`
after mutating the store to pick up changes.

Usage::

    db = MemoDB(store)

    # Free-form SQL
    df = db.query("SELECT id, title FROM memos WHERE list_contains(tags, 'work')")

    # Pre-built views
    table    = db.table_view(tag="work", search="standup")
    heatmap  = db.daily_counts(start=date(2024, 1, 1))
    calendar = db.month_view(2024, 1)
    tags     = db.tag_counts()
"""

from __future__ import annotations

from datetime import date, timezone
from typing import TYPE_CHECKING, Any

import duckdb
import polars as pl

if TYPE_CHECKING:
    from datetime import datetime

    from memos.store import MemoStore

_DEFAULT_COLUMNS = ["id", "day", "title", "tags", "created_at", "updated_at"]
_ORDERABLE = {"id", "day", "seq", "title", "created_at", "updated_at"}


def _utc_naive(value: "datetime") -> "datetime":
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class MemoDB:
    """In-memory DuckDB database over a snapshot of the store's memos."""

    def __init__(self, store: "MemoStore") -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(store)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, store: "MemoStore") -> None:
        """(Re-)populate the database from ``store.list_memos()``."""
        self._create_schema()
        self._load_memos(store)

    def _create_schema(self) -> None:
        # Timestamps are stored as naive UTC
        self.conn.execute("""
            CREATE OR REPLACE TABLE memos (
                id          VARCHAR PRIMARY KEY,
                day         DATE,
                seq         INTEGER,
                title       VARCHAR,
                tags        VARCHAR[],
                content     TEXT,
                created_at  TIMESTAMP,
                updated_at  TIMESTAMP
            )
        """)

    def _load_memos(self, store: "MemoStore") -> None:
        rows = [
            (
                memo.id,
                date.fromisoformat(memo.date),
                memo.seq,
                memo.title,
                memo.tags,
                memo.content,
                _utc_naive(memo.created_at),
                _utc_naive(memo.updated_at),
            )
            for memo in store.list_memos()
        ]
        if rows:
            self.conn.executemany("INSERT OR REPLACE INTO memos VALUES (?,?,?,?,?,?,?,?)", rows)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql).pl()

    def count(self) -> int:
        return self.conn.execute("SELECT COUNT(*) FROM memos").fetchone()[0]

    # ------------------------------------------------------------------
    # Pre-built views
    # ------------------------------------------------------------------

    def table_view(
        self,
        *,
        tag: str | None = None,
        search: str | None = None,
        day: date | None = None,
        columns: list[str] | None = None,
        order_by: str = "created_at",
    ) -> pl.DataFrame:
        """Return memos as a Polars DataFrame, optionally filtered.

        Parameters
        ----------
        tag:
            Only include memos carrying this tag.
        search:
            Case-insensitive substring filter on title or content.
        day:
            Only include memos created on this date.
        columns:
            Which columns to include. Defaults to ``id, day, title, tags,
            created_at, updated_at``.
        order_by:
            Column to sort by; unknown names raise ``ValueError``.
        """
        if order_by not in _ORDERABLE:
            raise ValueError(f"cannot order by {order_by!r}")
        cols = columns or _DEFAULT_COLUMNS
        unknown = set(cols) - _ORDERABLE - {"tags", "content"}
        if unknown:
            raise ValueError(f"unknown columns: {sorted(unknown)}")

        where_clauses: list[str] = []
        params: list[Any] = []
        if tag:
            where_clauses.append("list_contains(tags, ?)")
            params.append(tag)
        if search:
            where_clauses.append("(title ILIKE ? OR content ILIKE ?)")
            params.extend([f"%{search}%", f"%{search}%"])
        if day:
            where_clauses.append("day = ?")
            params.append(day)

        where = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""
        sql = f"SELECT {', '.join(cols)} FROM memos {where} ORDER BY {order_by}, id"
        return self.conn.execute(sql, params).pl()

    def tag_counts(self) -> pl.DataFrame:
        """Return a tag → count table sorted by frequency."""
        return self.conn.execute(
            """
            SELECT tag, COUNT(*) AS memo_count
            FROM (SELECT unnest(tags) AS tag FROM memos)
            GROUP BY tag
            ORDER BY memo_count DESC, tag
            """
        ).pl()

    def daily_counts(self, *, start: date | None = None, end: date | None = None) -> pl.DataFrame:
        """Memos created per day (inclusive range), for the activity heatmap."""
        where_clauses: list[str] = []
        params: list[Any] = []
        if start:
            where_clauses.append("day >= ?")
            params.append(start)
        if end:
            where_clauses.append("day <= ?")
            params.append(end)
        where = f"WHERE {' AND '.join(where_clauses)}" if where_clauses else ""
        return self.conn.execute(
            f"SELECT day, COUNT(*) AS memo_count FROM memos {where} GROUP BY day ORDER BY day",
            params,
        ).pl()

    def month_view(self, year: int, month: int) -> dict[int, list[dict[str, Any]]]:
        """Group one month's memos by day-of-month for a calendar layout.

        Returns
        -------
        dict mapping day-of-month → list of ``{id, title, tags}`` dicts, in
        creation order. Days without memos are absent.
        """
        first = date(year, month, 1)
        following = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        df = self.conn.execute(
            """
            SELECT id, title, tags, day, seq
            FROM memos
            WHERE day >= ? AND day < ?
            ORDER BY day, seq
            """,
            [first, following],
        ).pl()

        days: dict[int, list[dict[str, Any]]] = {}
        for row in df.to_dicts():
            dom = row.pop("day").day
            row.pop("seq")
            days.setdefault(dom, []).append(row)
        return days

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def schema_info(self) -> pl.DataFrame:
        """Return DuckDB DESCRIBE output for the memos table."""
        return self.conn.execute("DESCRIBE memos").pl()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "MemoDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
