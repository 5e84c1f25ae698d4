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

"""Transaction control.

Three layers, from lowest to highest:

* :func:`begin`, :func:`commit`, :func:`rollback` issue the bare statements.
  Nesting is not tracked locally; the server decides what a second
  ``START TRANSACTION`` means.
* :func:`transaction` is a context manager that commits on success and
  rolls back and re-raises on exception.
* :func:`run_in_transaction` runs a callable and reports the outcome instead
  of raising.

Usage::

    with transaction(conn):
        insert(conn, "orders", {...})
        update(conn, "stock", {...}, {"sku": sku})

    if not run_in_transaction(conn, lambda: transfer(conn, a, b, amount)):
        ...
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from easydb.connection import Connection
from easydb.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionOutcome:
    """Result of :func:`run_in_transaction`.

    Truthy when the work was committed.  On failure ``error`` holds the
    exception that caused the rollback.
    """

    committed: bool
    error: BaseException | None = None

    def __bool__(self) -> bool:
        return self.committed


def _run(conn: Connection, sql: str) -> None:
    conn.execute(sql).close()


def begin(conn: Connection) -> None:
    """Issue ``START TRANSACTION``."""
    _run(conn, "START TRANSACTION")


def commit(conn: Connection) -> None:
    """Issue ``COMMIT``."""
    _run(conn, "COMMIT")


def rollback(conn: Connection) -> None:
    """Issue ``ROLLBACK``."""
    _run(conn, "ROLLBACK")


@contextmanager
def transaction(conn: Connection) -> Generator[Connection, None, None]:
    """Context manager that commits on success, rolls back on exception.

    The exception is re-raised after the rollback.
    """
    begin(conn)
    try:
        yield conn
        commit(conn)
    except Exception:
        rollback(conn)
        raise


def run_in_transaction(conn: Connection, work: Callable[[], Any]) -> TransactionOutcome:
    """Run *work* inside a transaction and report whether it was committed.

    *work* is called with no arguments.  Any exception raised by it (or by
    the final ``COMMIT``) rolls the transaction back and is returned in the
    outcome rather than raised.

    Raises:
        InvalidArgumentError: If *work* is not callable.
    """
    if not callable(work):
        raise InvalidArgumentError(
            f"Unit of work must be callable, got {type(work).__name__}"
        )

    begin(conn)
    try:
        work()
        commit(conn)
    except Exception as e:
        logger.warning("Transaction rolled back: %s", e, exc_info=True)
        rollback(conn)
        return TransactionOutcome(committed=False, error=e)
    return TransactionOutcome(committed=True)
