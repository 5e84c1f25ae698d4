# easydb — placeholder-driven SQL helpers for MySQL
# Copyright (C) 2024-2026 Dr Horst Herb
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Forward-only result cursor.

:class:`Result` wraps one DB-API cursor and offers the extraction modes
callers usually want (single value, single row, all rows, one column,
key/value pairs, keyed rows).  Every draining call releases the cursor
before it returns, so an explicit :meth:`Result.free` is only needed after
partial reads with :meth:`Result.fetch_row` / :meth:`Result.fetch_assoc`.

Usage::

    res = query(conn, "SELECT id, name FROM users WHERE active = ?i", 1)
    names = res.fetch_pairs()     # {1: "alice", 2: "bob"}
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


def _as_tuple(row: Any) -> tuple:
    # Dict-returning cursors hand back mappings; column order is kept.
    if isinstance(row, Mapping):
        return tuple(row.values())
    return tuple(row)


class Result:
    """Single-pass view over the rows of one executed statement.

    Fetching from a freed or exhausted cursor returns ``None`` (or an empty
    collection for the draining calls).  Column order is the server's.
    """

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor
        description = getattr(cursor, "description", None) or ()
        self._columns: tuple[str, ...] = tuple(d[0] for d in description)
        self._freed = False
        if not self._columns:
            # INSERT / UPDATE / DDL: nothing to read.
            self.free()

    @property
    def columns(self) -> tuple[str, ...]:
        return self._columns

    @property
    def freed(self) -> bool:
        return self._freed

    def _next(self) -> tuple | None:
        if self._freed:
            return None
        row = self._cursor.fetchone()
        return None if row is None else _as_tuple(row)

    def _drain(self) -> list[tuple]:
        if self._freed:
            return []
        try:
            return [_as_tuple(row) for row in self._cursor.fetchall()]
        finally:
            self.free()

    # --- Row-at-a-time ------------------------------------------------------

    def fetch_row(self) -> tuple | None:
        """Return the next row as a tuple, or ``None`` at the end."""
        return self._next()

    def fetch_assoc(self) -> dict[str, Any] | None:
        """Return the next row as ``{column: value}``, or ``None`` at the end."""
        row = self._next()
        if row is None:
            return None
        return dict(zip(self._columns, row))

    # --- Draining -----------------------------------------------------------

    def fetch_one(self) -> Any:
        """Return the first cell of the first row, or ``None`` if there are no rows.

        The cursor is released afterwards.
        """
        try:
            row = self._next()
        finally:
            self.free()
        return None if row is None else row[0]

    def fetch_all(self) -> list[dict[str, Any]]:
        """Return all remaining rows as dicts."""
        return [dict(zip(self._columns, row)) for row in self._drain()]

    def fetch_column(self) -> list[Any]:
        """Return the first column of every remaining row."""
        return [row[0] for row in self._drain()]

    def fetch_pairs(self) -> dict[Any, Any]:
        """Map column 0 to column 1 for every remaining row.

        Later rows overwrite earlier ones that share a key.

        Raises:
            ValueError: If the result has fewer than two columns.
        """
        if not self._freed and len(self._columns) < 2:
            self.free()
            raise ValueError("fetch_pairs() needs at least two columns")
        return {row[0]: row[1] for row in self._drain()}

    def fetch_all_keyed(self) -> dict[Any, dict[str, Any]]:
        """Map column 0 to a dict of the remaining columns for every row.

        Later rows overwrite earlier ones that share a key.
        """
        rest = self._columns[1:]
        return {row[0]: dict(zip(rest, row[1:])) for row in self._drain()}

    def free(self) -> None:
        """Release the cursor.  Safe to call any number of times."""
        if self._freed:
            return
        self._freed = True
        self._cursor.close()

    # --- Protocols ----------------------------------------------------------

    def __iter__(self) -> Iterator[dict[str, Any]]:
        try:
            while True:
                row = self.fetch_assoc()
                if row is None:
                    break
                yield row
        finally:
            self.free()

    def __enter__(self) -> Result:
        return self

    def __exit__(self, *exc: object) -> None:
        self.free()

    def __repr__(self) -> str:
        state = "freed" if self._freed else "open"
        return f"Result(columns={list(self._columns)!r}, {state})"
