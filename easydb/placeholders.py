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

"""Placeholder substitution for SQL templates.

A template holds ``?`` tokens, optionally followed by a one-letter mode:

* ``?``: by value type (see :func:`easydb.quoting.quote_smart`)
* ``?i``: integer, unquoted
* ``?s``: string, always quoted
* ``?f``: float, unquoted, ``.`` as decimal separator
* ``?e``: escaped text without surrounding quotes
* ``?p``: raw SQL part, inserted verbatim
* ``?a``: collection, comma-joined (``NULL`` when empty)
* ``?u``: mapping rendered as ``col = value`` pairs

Any other letter after ``?`` is ordinary text: ``"id = ?x"`` with ``1``
becomes ``"id = 1x"``.

Usage::

    sql = prepare(conn, "SELECT * FROM t WHERE id IN (?a) AND name = ?s", [1, 2], "x")
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from easydb.errors import ParamCountError
from easydb.quoting import (
    _to_text,
    assignment_set,
    escape,
    quote_array,
    quote_float,
    quote_int,
    quote_smart,
    quote_string,
)

if TYPE_CHECKING:
    from easydb.connection import Connection

logger = logging.getLogger(__name__)

MODES = frozenset("isfepau")


def _render(conn: Connection, mode: str, value: Any) -> str:
    if mode == "":
        return quote_smart(conn, value)
    if mode == "i":
        return quote_int(value)
    if mode == "s":
        return quote_string(conn, value)
    if mode == "f":
        return quote_float(value)
    if mode == "e":
        return escape(conn, value)
    if mode == "p":
        return _to_text(value)
    if mode == "a":
        return quote_array(conn, value)
    return assignment_set(conn, value)


def substitute(conn: Connection, template: str, args: Sequence[Any]) -> str:
    """Replace each placeholder in *template* with the next value from *args*.

    Values are consumed strictly left to right, one per token.

    Raises:
        ParamCountError: When a token is reached after *args* is exhausted.
    """
    parts: list[str] = []
    pos = 0
    consumed = 0

    while True:
        mark = template.find("?", pos)
        if mark == -1:
            parts.append(template[pos:])
            break
        parts.append(template[pos:mark])

        mode = template[mark + 1 : mark + 2]
        if mode and mode in MODES:
            pos = mark + 2
        else:
            mode = ""
            pos = mark + 1

        if consumed >= len(args):
            raise ParamCountError(template)
        parts.append(_render(conn, mode, args[consumed]))
        consumed += 1

    if consumed < len(args):
        logger.debug(
            "Ignoring %d surplus argument(s) for template: %s",
            len(args) - consumed,
            template,
        )
    return "".join(parts)


def prepare(conn: Connection, template: str, *args: Any) -> str:
    """Variadic form of :func:`substitute`."""
    return substitute(conn, template, args)
