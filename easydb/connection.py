"""Database connections.

:class:`Connection` is the small interface the rest of the package needs
from a live database session: run a statement, run a batch, escape text,
and report the last insert id / affected row count.  :class:`MySQLConnection`
implements it on top of ``pymysql``.

The physical socket is opened lazily on first use and reused for the life of
the object.  A connection is not thread-safe; callers sharing one across
threads must serialise access themselves.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any

import pymysql
from pymysql.constants import CLIENT

from easydb.errors import DatabaseConnectionError, EasyDbError, QueryError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3306


@dataclass
class ConnectionConfig:
    """Connection settings.

    Attributes:
        host: Server host name.
        username: Login user.
        password: Login password.
        dbname: Default database.
        charset: Client character set, applied at connect time.
        port: TCP port.
        socket: Unix socket path (overrides host/port when set).
        flags: Extra ``pymysql.constants.CLIENT`` flags.
        multi_statements: Negotiate multi-statement support so that
            :meth:`MySQLConnection.execute_multi` works.  This also lets a
            single :meth:`MySQLConnection.execute` call run stacked
            statements, so turn it off when batches are never needed.
        options: Further keyword arguments passed straight to
            ``pymysql.connect`` (e.g. ``init_command``, ``connect_timeout``).
    """

    host: str = "localhost"
    username: str = "root"
    password: str = ""
    dbname: str = "testdb"
    charset: str = "utf8"
    port: int = DEFAULT_PORT
    socket: str | None = None
    flags: int = 0
    multi_statements: bool = True
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, prefix: str = "EASYDB_") -> ConnectionConfig:
        """Build a config from ``<prefix>HOST``, ``<prefix>USER`` etc.

        Unset variables fall back to the dataclass defaults.
        """
        defaults = cls()
        port = os.environ.get(f"{prefix}PORT")
        return cls(
            host=os.environ.get(f"{prefix}HOST", defaults.host),
            username=os.environ.get(f"{prefix}USER", defaults.username),
            password=os.environ.get(f"{prefix}PASSWORD", defaults.password),
            dbname=os.environ.get(f"{prefix}DBNAME", defaults.dbname),
            charset=os.environ.get(f"{prefix}CHARSET", defaults.charset),
            port=int(port) if port else defaults.port,
            socket=os.environ.get(f"{prefix}SOCKET") or None,
            multi_statements=os.environ.get(f"{prefix}MULTI_STATEMENTS", "1").lower()
            not in ("0", "false", "no", "off"),
        )


class Connection(ABC):
    """Interface to one live database session."""

    @abstractmethod
    def execute(self, sql: str) -> Any:
        """Run one statement and return its DB-API cursor.

        Raises:
            QueryError: If the server rejects the statement.
        """

    @abstractmethod
    def execute_multi(self, sql: str) -> None:
        """Run a semicolon-separated batch, draining every result set.

        Raises:
            QueryError: For the first statement in the batch that fails.
        """

    @abstractmethod
    def escape(self, text: str) -> str:
        """Escape *text* for a string literal under the active charset."""

    @abstractmethod
    def insert_id(self) -> int: ...

    @abstractmethod
    def affected_rows(self) -> int: ...

    @abstractmethod
    def set_charset(self, charset: str) -> None: ...

    @abstractmethod
    def close(self) -> None: ...


def _error_args(exc: BaseException) -> tuple[int, str]:
    """Split a pymysql error into ``(code, message)``."""
    if len(exc.args) >= 2 and isinstance(exc.args[0], int):
        return exc.args[0], str(exc.args[1])
    return 0, str(exc)


class MySQLConnection(Connection):
    """:class:`Connection` backed by a ``pymysql`` session.

    Autocommit is on unless ``options`` says otherwise.  Multi-statement
    support is negotiated at connect time when
    :attr:`ConnectionConfig.multi_statements` is set (the default); the server
    then accepts stacked statements in every call, not only in
    :meth:`execute_multi`.  Disable it to have the server reject them.
    """

    def __init__(self, config: ConnectionConfig | None = None) -> None:
        self.config = config if config is not None else ConnectionConfig()
        self._conn: pymysql.connections.Connection | None = None

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def raw(self) -> pymysql.connections.Connection:
        """The underlying pymysql connection, opened on first access."""
        if self._conn is None:
            self.open()
        return self._conn

    def open(self) -> None:
        """Open the session now.  Does nothing if it is already open.

        Raises:
            DatabaseConnectionError: If the handshake fails.
        """
        if self._conn is not None:
            return

        cfg = self.config
        kwargs: dict[str, Any] = {"autocommit": True, **cfg.options}
        client_flag = cfg.flags
        if cfg.multi_statements:
            client_flag |= CLIENT.MULTI_STATEMENTS
        try:
            self._conn = pymysql.connect(
                host=cfg.host,
                user=cfg.username,
                password=cfg.password,
                database=cfg.dbname,
                port=cfg.port,
                unix_socket=cfg.socket,
                charset=cfg.charset,
                client_flag=client_flag,
                **kwargs,
            )
        except pymysql.MySQLError as e:
            code, message = _error_args(e)
            raise DatabaseConnectionError(message, code) from e

        logger.debug("MySQL connection opened: %s:%s/%s", cfg.host, cfg.port, cfg.dbname)

    def execute(self, sql: str) -> Any:
        cursor = self.raw.cursor()
        logger.debug("SQL: %s", sql)
        try:
            # No args: pymysql sends the text as-is without %-formatting.
            cursor.execute(sql)
        except pymysql.MySQLError as e:
            cursor.close()
            code, message = _error_args(e)
            raise QueryError(message, code, sql) from e
        return cursor

    def execute_multi(self, sql: str) -> None:
        if not self.config.multi_statements:
            raise EasyDbError("Multi-statement execution is disabled for this connection")
        conn = self.raw
        cursor = conn.cursor()
        logger.debug("SQL batch: %s", sql)
        try:
            cursor.execute(sql)
            while cursor.nextset():
                pass
        except pymysql.MySQLError as e:
            # The server abandons the rest of the batch after an error, but
            # pymysql still remembers the earlier "more results" flag and
            # would wait for them before the next command.
            pending = getattr(conn, "_result", None)
            if pending is not None and pending.has_next:
                conn._result = None
            code, message = _error_args(e)
            raise QueryError(message, code, sql) from e
        finally:
            cursor.close()

    def escape(self, text: str) -> str:
        return self.raw.escape_string(text)

    def insert_id(self) -> int:
        return self.raw.insert_id()

    def affected_rows(self) -> int:
        return self.raw.affected_rows()

    def set_charset(self, charset: str) -> None:
        self.raw.set_character_set(charset)
        logger.debug("Client charset set to %s", charset)

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.debug("MySQL connection closed: %s", self.config.host)


def connect_mysql(config: ConnectionConfig | None = None, **overrides: Any) -> MySQLConnection:
    """Open a MySQL connection and return it.

    Args:
        config: Base settings (defaults to :class:`ConnectionConfig`).
        **overrides: Individual :class:`ConnectionConfig` fields to replace,
            e.g. ``connect_mysql(host="db", dbname="shop")``.

    Raises:
        DatabaseConnectionError: If the server cannot be reached or refuses
            the login.
    """
    cfg = replace(config if config is not None else ConnectionConfig(), **overrides)
    conn = MySQLConnection(cfg)
    conn.open()
    return conn
