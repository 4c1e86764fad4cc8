"""Database access: connecting, loading schema symbols and running queries."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Union

import sqlalchemy
from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

DRIVER_NAME = "mysql+mysqlconnector"

# Statements reported as an affected-row count rather than a table.
_ROW_COUNT_KEYWORDS = ("INSERT", "UPDATE", "DELETE")


@dataclass
class ResultTable:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


@dataclass
class RowsAffected:
    affected_rows: int


QueryResult = Union[ResultTable, RowsAffected]


def build_url(host: str, port: int, user: str, password: str, database: str) -> URL:
    """Build the SQLAlchemy URL for a MySQL server."""
    return URL.create(
        DRIVER_NAME,
        username=user,
        password=password,
        host=host,
        port=port,
        database=database,
    )


def to_display(value: Any) -> str:
    """Convert a column value to the string shown in result tables."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "[" + ", ".join(str(b) for b in bytes(value)) + "]"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def is_row_count_statement(sql: str) -> bool:
    words = sql.split()
    first_word = words[0].upper() if words else ""
    return first_word.startswith(_ROW_COUNT_KEYWORDS)


class Connector:
    """Wraps one database connection.

    ``lock`` guards the connection; it is held for one dispatch or one
    symbol load at a time.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._connection: Connection | None = None
        self.lock = threading.Lock()

    @classmethod
    def connect(cls, url: str | URL) -> Connector:
        """Create an engine for *url* and open a connection.

        Raises :class:`sqlalchemy.exc.SQLAlchemyError` on failure.
        """
        connector = cls(sqlalchemy.create_engine(url))
        connector.open()
        return connector

    def open(self) -> None:
        if self._connection is None:
            self._connection = self._engine.connect()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None
        self._engine.dispose()

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            raise RuntimeError("Connector is not open")
        return self._connection

    def get_symbols(self) -> list[str]:
        """Return table names followed by their column names.

        Duplicates keep their first position.
        """
        with self.lock:
            inspector = sqlalchemy.inspect(self.connection)
            tables = inspector.get_table_names()
            columns: list[str] = []
            for table in tables:
                columns.extend(column["name"] for column in inspector.get_columns(table))
            # The inspector may open an implicit transaction.
            self.connection.rollback()

        symbols: list[str] = []
        seen: set[str] = set()
        for name in [*tables, *columns]:
            if name not in seen:
                seen.add(name)
                symbols.append(name)
        logger.debug("Loaded %d symbols from %d tables", len(symbols), len(tables))
        return symbols

    def run_query(self, sql: str) -> QueryResult:
        """Execute *sql* and return its result.

        Raises :class:`sqlalchemy.exc.SQLAlchemyError` when the statement
        fails; the transaction is rolled back first.
        """
        with self.lock:
            try:
                result = self.connection.exec_driver_sql(sql)
                if is_row_count_statement(sql) or not result.returns_rows:
                    outcome: QueryResult = RowsAffected(affected_rows=max(result.rowcount, 0))
                else:
                    headers = [str(key) for key in result.keys()]
                    rows = [
                        [to_display(value) for value in row]
                        for row in result.fetchall()
                    ]
                    outcome = ResultTable(headers=headers, rows=rows)
                self.connection.commit()
            except SQLAlchemyError:
                self.connection.rollback()
                raise
        return outcome
