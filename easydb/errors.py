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

"""Exception hierarchy for easydb.

Every error raised by the package derives from :class:`EasyDbError`, so
callers can catch the whole family with one ``except`` clause.  Errors that
originate from a statement carry the offending SQL text in ``query``.
"""

from __future__ import annotations


class EasyDbError(Exception):
    """Base error for the package.

    Attributes:
        code: Server or driver error number (``0`` when not applicable).
        query: SQL text that caused the error, or ``""``.
    """

    def __init__(self, message: str, code: int = 0, query: str = "") -> None:
        self.code = code
        self.query = query
        self.message = message
        if query:
            message = f'Error {code}: "{message}"; Query = "{query}"'
        super().__init__(message)


class ParamCountError(EasyDbError):
    """A template has more placeholder tokens than supplied arguments."""

    def __init__(self, template: str) -> None:
        self.template = template
        super().__init__(
            "Count of parameters doesn't correspond to the count of "
            f"placeholders in template: {template!r}"
        )


class QueryError(EasyDbError):
    """The server rejected a statement."""

    @property
    def sql(self) -> str:
        return self.query


class DatabaseConnectionError(EasyDbError):
    """The initial handshake with the server failed."""

    def __init__(self, message: str, code: int = 0) -> None:
        super().__init__(f"{code}: {message}", code)
        self.message = message


class InvalidArgumentError(EasyDbError, TypeError):
    """A caller passed an argument of the wrong kind (e.g. a non-callable unit of work)."""
