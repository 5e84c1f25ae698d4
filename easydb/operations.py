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

"""Pure-function query helpers and CRUD statement builders.

All functions take a :class:`~easydb.connection.Connection` as their first
argument.  Templates use the placeholder syntax of
:mod:`easydb.placeholders`; values are always quoted by
:mod:`easydb.quoting` and table/column names always go through
:func:`~easydb.quoting.quote_identifier`.

Usage::

    new_id = insert(conn, "products", {"code": "003", "name": "Pan", "price": "22.9"})
    row = get_assoc(conn, "SELECT * FROM products WHERE id = ?i", new_id)
    update(conn, "products", {"price": "19.9"}, {"id": new_id})
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from easydb.connection import Connection
from easydb.placeholders import prepare, substitute
from easydb.quoting import quote_identifier, quote_smart, where_clause
from easydb.result import Result

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Query execution
# ---------------------------------------------------------------------------


def query(conn: Connection, template: str, *args: Any) -> Result:
    """Substitute *args* into *template*, execute it and return the result.

    For statements that produce no rows the returned :class:`Result` is
    already freed.

    Raises:
        ParamCountError: If *template* has more placeholders than *args*.
        QueryError: If the server rejects the statement.
    """
    sql = substitute(conn, template, args)
    return Result(conn.execute(sql))


def raw_query(conn: Connection, sql: str) -> Result:
    """Execute *sql* exactly as given, with no placeholder processing."""
    return Result(conn.execute(sql))


def multi_query(conn: Connection, sql: str) -> None:
    """Execute several semicolon-separated statements in one round trip.

    Every intermediate result set is drained, so the connection is ready for
    the next query afterwards even when one of the statements failed.
    """
    conn.execute_multi(sql)


def get_one(conn: Connection, template: str, *args: Any) -> Any:
    """Return the first cell of the first row, or ``None``."""
    return query(conn, template, *args).fetch_one()


def get_row(conn: Connection, template: str, *args: Any) -> tuple | None:
    """Return the first row as a tuple, or ``None``."""
    with query(conn, template, *args) as res:
        return res.fetch_row()


def get_assoc(conn: Connection, template: str, *args: Any) -> dict[str, Any] | None:
    """Return the first row as a dict, or ``None``."""
    with query(conn, template, *args) as res:
        return res.fetch_assoc()


def get_all(conn: Connection, template: str, *args: Any) -> list[dict[str, Any]]:
    """Return every row as a dict."""
    return query(conn, template, *args).fetch_all()


def get_column(conn: Connection, template: str, *args: Any) -> list[Any]:
    """Return the first column of every row."""
    return query(conn, template, *args).fetch_column()


def get_pairs(conn: Connection, template: str, *args: Any) -> dict[Any, Any]:
    """Return ``{column 0: column 1}`` for every row."""
    return query(conn, template, *args).fetch_pairs()


def get_all_keyed(conn: Connection, template: str, *args: Any) -> dict[Any, dict[str, Any]]:
    """Return ``{column 0: {other columns}}`` for every row."""
    return query(conn, template, *args).fetch_all_keyed()


# ---------------------------------------------------------------------------
# Modification
# ---------------------------------------------------------------------------


def _execute(conn: Connection, sql: str) -> None:
    conn.execute(sql).close()


def _insert_verb(ignore: bool) -> str:
    return "INSERT IGNORE" if ignore else "INSERT"


def insert(
    conn: Connection,
    table: str,
    fields: Mapping[str, Any],
    ignore: bool = False,
) -> int | bool:
    """Insert one row and return its auto-increment id.

    Returns ``True`` instead when the server reports no generated id (the
    table has no auto-increment column, or ``ignore`` skipped the row).
    """
    sql = prepare(
        conn,
        f"{_insert_verb(ignore)} INTO ?p SET ?u",
        quote_identifier(table),
        fields,
    )
    _execute(conn, sql)
    new_id = conn.insert_id()
    return new_id if new_id else True


def update(
    conn: Connection,
    table: str,
    fields: Mapping[str, Any],
    where: Mapping[str, Any] | None = None,
) -> int:
    """Update rows matching *where* and return the affected row count.

    An empty *where* updates every row in the table.
    """
    sql = prepare(conn, "UPDATE ?p SET ?u", quote_identifier(table), fields)
    condition = where_clause(conn, where)
    if condition:
        sql += " WHERE " + condition
    _execute(conn, sql)
    return conn.affected_rows()


def insert_update(
    conn: Connection,
    table: str,
    insert_fields: Mapping[str, Any],
    update_fields: Mapping[str, Any] | None = None,
) -> int:
    """Insert a row, or update it when a unique key already exists.

    *update_fields* defaults to *insert_fields*.  Returns the server's
    affected-row count: 1 for an insert, 2 for an update of an existing row
    (0 when the update changed nothing).
    """
    if update_fields is None:
        update_fields = insert_fields
    sql = prepare(
        conn,
        "INSERT INTO ?p SET ?u ON DUPLICATE KEY UPDATE ?u",
        quote_identifier(table),
        insert_fields,
        update_fields,
    )
    _execute(conn, sql)
    return conn.affected_rows()


def _row_values(row: Sequence[Any] | Mapping[str, Any], field_names: list[str]) -> list[Any]:
    if isinstance(row, Mapping):
        missing = [name for name in field_names if name not in row]
        if missing:
            raise ValueError(f"Row is missing field(s): {', '.join(missing)}")
        return [row[name] for name in field_names]
    values = list(row)
    if len(values) != len(field_names):
        raise ValueError(
            f"Row has {len(values)} value(s) but {len(field_names)} field(s) were given"
        )
    return values


def multi_insert(
    conn: Connection,
    table: str,
    field_names: Iterable[str],
    rows: Iterable[Sequence[Any] | Mapping[str, Any]],
    ignore: bool = False,
) -> int:
    """Insert many rows with a single statement.

    Each row is either a sequence in *field_names* order or a mapping keyed
    by field name.  Returns the affected row count; no statement is sent
    when *rows* is empty.
    """
    field_names = list(field_names)
    if not field_names:
        raise ValueError("multi_insert() needs at least one field name")

    tuples = []
    for row in rows:
        values = _row_values(row, field_names)
        tuples.append("(" + ", ".join(quote_smart(conn, v) for v in values) + ")")

    if not tuples:
        logger.debug("multi_insert into %s skipped: no rows", table)
        return 0

    sql = prepare(
        conn,
        f"{_insert_verb(ignore)} INTO ?p (?p) VALUES ?p",
        quote_identifier(table),
        ", ".join(quote_identifier(name) for name in field_names),
        ", ".join(tuples),
    )
    _execute(conn, sql)
    return conn.affected_rows()


def delete(
    conn: Connection,
    table: str,
    where: Mapping[str, Any] | None = None,
) -> int:
    """Delete rows matching *where* and return the affected row count.

    An empty *where* deletes every row in the table.
    """
    sql = prepare(conn, "DELETE FROM ?p", quote_identifier(table))
    condition = where_clause(conn, where)
    if condition:
        sql += " WHERE " + condition
    _execute(conn, sql)
    return conn.affected_rows()
