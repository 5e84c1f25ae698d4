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

"""Value quoting: turns Python values into SQL literal text.

Every function here is pure apart from the connection's ``escape()``
primitive, which is charset-aware and therefore has to come from the live
connection.  Identifiers are quoted separately from values and never pass
through ``escape()``.

Value classification (decided once, in :func:`quote_smart`):

* ``int`` / ``bool``: rendered as decimal text, never quoted
* ``None``: ``null``
* :class:`Expression`: trusted SQL, emitted verbatim
* ``list`` / ``tuple`` / ``set``: only meaningful as ``?a`` lists, rejected here
* mappings: only meaningful as assignment sets, rejected here
* anything else: escaped and single-quoted
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from easydb.connection import Connection

_ARRAY_TYPES = (list, tuple, set, frozenset)

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+(?:[.,]\d*)?|[.,]\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class Expression:
    """A trusted SQL fragment (e.g. ``NOW()``) that is never quoted or escaped.

    Usage::

        db.insert("log", {"created": Expression("NOW()"), "msg": text})
    """

    sql: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "sql", str(self.sql))

    def __str__(self) -> str:
        return self.sql


def _to_text(value: Any) -> str:
    """Return the string form of *value* used for string literals."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ValueError(f"Byte string is not valid UTF-8: {value!r:.60}") from e
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _to_int(value: Any) -> int:
    """Coerce *value* to an int the way a loose integer cast would.

    Strings contribute their leading integer prefix (``"12abc"`` -> 12) and
    anything unparseable becomes 0.
    """
    if isinstance(value, int):
        return int(value)
    if isinstance(value, (float, Decimal)):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return 0
    match = _INT_PREFIX.match(_to_text(value))
    return int(match.group()) if match else 0


def _to_float(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    match = _FLOAT_PREFIX.match(_to_text(value))
    if not match:
        return 0.0
    return float(match.group().replace(",", "."))


def _is_array(value: Any) -> bool:
    return isinstance(value, _ARRAY_TYPES)


def escape(conn: Connection, value: Any) -> str:
    """Escape *value* for use inside a string literal, without adding quotes."""
    return conn.escape(_to_text(value))


def quote_string(conn: Connection, value: Any) -> str:
    """Return *value* as an escaped, single-quoted SQL string literal."""
    return "'" + conn.escape(_to_text(value)) + "'"


def quote_int(value: Any) -> str:
    return str(_to_int(value))


def quote_float(value: Any) -> str:
    """Render *value* as a float literal with ``.`` as decimal separator.

    The output never depends on the process locale.  ``Decimal`` values are
    rendered exactly.

    Raises:
        ValueError: If the value is infinite or NaN (no SQL literal exists).
    """
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Cannot render non-finite number as SQL: {value}")
        return format(value, "f")
    number = _to_float(value)
    if not math.isfinite(number):
        raise ValueError(f"Cannot render non-finite number as SQL: {value!r}")
    return repr(number)


def quote_smart(conn: Connection, value: Any) -> str:
    """Quote *value* according to its type (the ``?`` placeholder rule)."""
    if isinstance(value, Expression):
        return value.sql
    if value is None:
        return "null"
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, Mapping):
        raise TypeError(
            "A mapping can only be rendered as an assignment set (use ?u)"
        )
    if _is_array(value):
        raise TypeError(
            "A collection can only be rendered as a value list (use ?a)"
        )
    return quote_string(conn, value)


def quote_array(conn: Connection, values: Iterable[Any]) -> str:
    """Render *values* as a comma-separated list for ``IN (...)``.

    Integers stay unquoted, other elements are quoted by :func:`quote_smart`.
    An empty collection renders as ``NULL`` so that ``IN (NULL)`` remains
    valid SQL.
    """
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        raise TypeError(f"Expected a collection of values, got {type(values).__name__}")
    if isinstance(values, Mapping):
        values = values.values()
    items = list(values)
    if not items:
        return "NULL"
    return ",".join(quote_smart(conn, item) for item in items)


def quote_identifier(name: Any) -> str:
    """Quote a table or column name with backticks, doubling embedded ones.

    ``quote_identifier("a`b")`` returns ``"`a``b`"``.
    """
    if isinstance(name, Expression):
        return name.sql
    name = str(name)
    if not name:
        raise ValueError("Identifier must not be empty")
    return "`" + name.replace("`", "``") + "`"


def assignment_set(conn: Connection, fields: Mapping[Any, Any]) -> str:
    """Render ``{col: value}`` as `` `col` = value, ... `` for a SET clause."""
    if not isinstance(fields, Mapping):
        raise TypeError(f"Expected a mapping of fields, got {type(fields).__name__}")
    if not fields:
        raise ValueError("Assignment set must contain at least one field")
    return ", ".join(
        f"{quote_identifier(column)} = {quote_smart(conn, value)}"
        for column, value in fields.items()
    )


def where_clause(conn: Connection, where: Mapping[Any, Any] | None) -> str:
    """Render an equality conjunction, or ``""`` when *where* is empty.

    ``None`` values compare with ``IS NULL`` and collections with ``IN``.
    """
    if not where:
        return ""
    if not isinstance(where, Mapping):
        raise TypeError(f"Expected a mapping of conditions, got {type(where).__name__}")

    terms = []
    for column, value in where.items():
        ident = quote_identifier(column)
        if value is None:
            terms.append(f"{ident} IS NULL")
        elif _is_array(value):
            terms.append(f"{ident} IN ({quote_array(conn, value)})")
        else:
            terms.append(f"{ident} = {quote_smart(conn, value)}")
    return " AND ".join(terms)
