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

"""Placeholder-driven SQL helpers for MySQL.

Templates carry typed ``?`` placeholders that are replaced by safely quoted
values before the statement is sent; results come back through a small
forward-only cursor.

Usage::

    from easydb import ConnectionConfig, Database, Expression

    db = Database(ConnectionConfig(host="localhost", dbname="shop"))
    db.insert("products", {"code": "003", "name": "Pan", "created": Expression("NOW()")})
    rows = db.get_all("SELECT * FROM products WHERE code IN (?a)", ["001", "003"])

Or, functionally::

    from easydb import connect_mysql, get_all, insert, transaction

    conn = connect_mysql(dbname="shop")
    with transaction(conn):
        insert(conn, "products", {"code": "004", "name": "Spoon"})
"""

from easydb.connection import Connection, ConnectionConfig, MySQLConnection, connect_mysql
from easydb.errors import (
    DatabaseConnectionError,
    EasyDbError,
    InvalidArgumentError,
    ParamCountError,
    QueryError,
)
from easydb.operations import (
    delete,
    get_all,
    get_all_keyed,
    get_assoc,
    get_column,
    get_one,
    get_pairs,
    get_row,
    insert,
    insert_update,
    multi_insert,
    multi_query,
    query,
    raw_query,
    update,
)
from easydb.placeholders import prepare, substitute
from easydb.quoting import (
    Expression,
    assignment_set,
    escape,
    quote_array,
    quote_float,
    quote_identifier,
    quote_int,
    quote_smart,
    quote_string,
    where_clause,
)
from easydb.result import Result
from easydb.transactions import (
    TransactionOutcome,
    begin,
    commit,
    rollback,
    run_in_transaction,
    transaction,
)
from easydb.database import Database

__version__ = "0.1.0"

__all__ = [
    "Database",
    "Connection",
    "ConnectionConfig",
    "MySQLConnection",
    "connect_mysql",
    "Expression",
    "Result",
    "TransactionOutcome",
    "EasyDbError",
    "ParamCountError",
    "QueryError",
    "DatabaseConnectionError",
    "InvalidArgumentError",
    "substitute",
    "prepare",
    "escape",
    "quote_string",
    "quote_smart",
    "quote_array",
    "quote_int",
    "quote_float",
    "quote_identifier",
    "assignment_set",
    "where_clause",
    "query",
    "raw_query",
    "multi_query",
    "get_one",
    "get_row",
    "get_assoc",
    "get_all",
    "get_column",
    "get_pairs",
    "get_all_keyed",
    "insert",
    "update",
    "insert_update",
    "multi_insert",
    "delete",
    "begin",
    "commit",
    "rollback",
    "transaction",
    "run_in_transaction",
]
