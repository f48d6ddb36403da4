"""DuckDB connection management."""

import asyncio
import threading
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import duckdb
from loguru import logger

from app.models import ALL_DDL, ALL_INDEXES
from settings import DB_PATH

T = TypeVar("T")

IN_MEMORY = ":memory:"


def init_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Initialize all tables from DDL statements (idempotent - uses IF NOT EXISTS)."""
    for ddl in ALL_DDL:
        conn.execute(ddl)
    for index in ALL_INDEXES:
        conn.execute(index)
    logger.info("DB tables initialized")


class Database:
    """One DuckDB database shared by the whole process.

    Holds a single root connection; every operation gets its own cursor and
    runs in a worker thread so awaiting callers never block the event loop.
    """

    def __init__(self, path: str = DB_PATH, read_only: bool = False):
        self._path = path
        self._read_only = read_only
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def connect(self) -> duckdb.DuckDBPyConnection:
        """Open the root connection (creates tables on a writable DB)."""
        with self._lock:
            if self._conn is None:
                if self._path != IN_MEMORY and not Path(self._path).exists():
                    logger.warning("DB not found: {}. Creating empty DB.", self._path)
                self._conn = duckdb.connect(self._path, read_only=self._read_only)
                if not self._read_only:
                    init_tables(self._conn)
                logger.debug("DB connected: {} (read_only={})", self._path, self._read_only)
            return self._conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
                logger.debug("DB connection closed")

    def cursor(self) -> duckdb.DuckDBPyConnection:
        return self.connect().cursor()

    async def run(self, fn: Callable[[duckdb.DuckDBPyConnection], T]) -> T:
        """Run ``fn(cursor)`` in a worker thread on a fresh cursor."""

        def work() -> T:
            cur = self.cursor()
            try:
                return fn(cur)
            finally:
                cur.close()

        return await asyncio.to_thread(work)
