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

"""Object facade over the functional API.

:class:`Database` binds the helpers in :mod:`easydb.operations`,
:mod:`easydb.placeholders` and :mod:`easydb.transactions` to one
connection, which is created from the configuration on first use.
"""

from __future__ import annotations

from collections.abc import Callable, Generator, Iterable, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from easydb import operations, transactions
from easydb.connection import Connection, ConnectionConfig, MySQLConnection
from easydb.placeholders import substitute
from easydb.quoting import escape
from easydb.result import Result
from easydb.transactions import TransactionOutcome


class Database:
    """A MySQL database handle with placeholder-aware query methods.

    Args:
        config: Connection settings (defaults to :class:`ConnectionConfig`).
        connection: An existing :class:`Connection` to use instead of
            opening one from *config*.

    Not thread-safe: one instance serves one caller at a time.
    """

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        *,
        connection: Connection | None = None,
    ) -> None:
        self.config = config if config is not None else ConnectionConfig()
        self._connection = connection
        self._last_transaction_error: BaseException | None = None

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            self._connection = MySQLConnection(self.config)
        return self._connection

    # --- Low level ----------------------------------------------------------

    def set_charset(self, charset: str) -> None:
        self.connection.set_charset(charset)

    def escape(self, value: Any) -> str:
        """Escape *value* for a string literal, without adding quotes."""
        return escape(self.connection, value)

    def prepare(self, template: str, *args: Any) -> str:
        """Return *template* with its placeholders replaced by *args*."""
        return substitute(self.connection, template, args)

    parse = prepare

    def query(self, template: str, *args: Any) -> Result:
        return operations.query(self.connection, template, *args)

    def raw_query(self, sql: str) -> Result:
        return operations.raw_query(self.connection, sql)

    def multi_query(self, sql: str) -> None:
        operations.multi_query(self.connection, sql)

    def insert_id(self) -> int:
        return self.connection.insert_id()

    def affected_rows(self) -> int:
        return self.connection.affected_rows()

    # --- Selection ----------------------------------------------------------

    def get_one(self, template: str, *args: Any) -> Any:
        return operations.get_one(self.connection, template, *args)

    def get_row(self, template: str, *args: Any) -> tuple | None:
        return operations.get_row(self.connection, template, *args)

    def get_assoc(self, template: str, *args: Any) -> dict[str, Any] | None:
        return operations.get_assoc(self.connection, template, *args)

    def get_all(self, template: str, *args: Any) -> list[dict[str, Any]]:
        return operations.get_all(self.connection, template, *args)

    def get_column(self, template: str, *args: Any) -> list[Any]:
        return operations.get_column(self.connection, template, *args)

    def get_pairs(self, template: str, *args: Any) -> dict[Any, Any]:
        return operations.get_pairs(self.connection, template, *args)

    def get_all_keyed(self, template: str, *args: Any) -> dict[Any, dict[str, Any]]:
        return operations.get_all_keyed(self.connection, template, *args)

    # --- Modification -------------------------------------------------------

    def insert(self, table: str, fields: Mapping[str, Any], ignore: bool = False) -> int | bool:
        return operations.insert(self.connection, table, fields, ignore)

    def update(
        self,
        table: str,
        fields: Mapping[str, Any],
        where: Mapping[str, Any] | None = None,
    ) -> int:
        return operations.update(self.connection, table, fields, where)

    def insert_update(
        self,
        table: str,
        insert_fields: Mapping[str, Any],
        update_fields: Mapping[str, Any] | None = None,
    ) -> int:
        return operations.insert_update(self.connection, table, insert_fields, update_fields)

    def multi_insert(
        self,
        table: str,
        field_names: Iterable[str],
        rows: Iterable[Sequence[Any] | Mapping[str, Any]],
        ignore: bool = False,
    ) -> int:
        return operations.multi_insert(self.connection, table, field_names, rows, ignore)

    def delete(self, table: str, where: Mapping[str, Any] | None = None) -> int:
        return operations.delete(self.connection, table, where)

    # --- Transactions -------------------------------------------------------

    def begin_transaction(self) -> None:
        transactions.begin(self.connection)

    def commit(self) -> None:
        transactions.commit(self.connection)

    def rollback(self) -> None:
        transactions.rollback(self.connection)

    def transaction(self, work: Callable[[], Any]) -> TransactionOutcome:
        """Run *work* in a transaction; falsy result means it was rolled back.

        The exception behind the last rollback is kept in
        :attr:`last_transaction_error`.
        """
        outcome = transactions.run_in_transaction(self.connection, work)
        self._last_transaction_error = outcome.error
        return outcome

    @property
    def last_transaction_error(self) -> BaseException | None:
        return self._last_transaction_error

    @contextmanager
    def transaction_scope(self) -> Generator[Database, None, None]:
        """Context-manager form of :meth:`transaction` that re-raises errors."""
        with transactions.transaction(self.connection):
            yield self

    # --- Lifecycle ----------------------------------------------------------

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
