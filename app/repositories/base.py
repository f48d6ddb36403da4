"""Base repository class."""

from typing import Any

import duckdb
from loguru import logger

from app.repositories.db import Database


def rows_to_dicts(cur: duckdb.DuckDBPyConnection, rows: list[tuple]) -> list[dict[str, Any]]:
    """Pair fetched rows with the cursor's column names."""
    columns = [d[0] for d in cur.description]
    return [dict(zip(columns, r)) for r in rows]


class BaseRepository:
    """Base repository with common functionality."""

    def __init__(self, db: Database):
        self._db = db
        logger.debug("{} initialized", self.__class__.__name__)

    async def execute(self, query: str, params: list | None = None) -> None:
        """Execute SQL statement."""

        def work(cur):
            cur.execute(query, params or [])

        await self._db.run(work)

    async def fetchall(self, query: str, params: list | None = None) -> list:
        """Execute and fetch all rows."""
        return await self._db.run(lambda cur: cur.execute(query, params or []).fetchall())

    async def fetchone(self, query: str, params: list | None = None) -> Any:
        """Execute and fetch one row."""
        return await self._db.run(lambda cur: cur.execute(query, params or []).fetchone())

    async def fetch_dicts(self, query: str, params: list | None = None) -> list[dict[str, Any]]:
        """Execute and fetch all rows as dicts keyed by column name."""

        def work(cur):
            rows = cur.execute(query, params or []).fetchall()
            return rows_to_dicts(cur, rows)

        return await self._db.run(work)

    async def transaction(self, statements: list[tuple[str, list | None]]) -> None:
        """Run statements atomically; readers see all of them or none."""

        def work(cur):
            cur.execute("BEGIN TRANSACTION")
            try:
                for query, params in statements:
                    if params and isinstance(params[0], (list, tuple)):
                        cur.executemany(query, params)
                    else:
                        cur.execute(query, params or [])
                cur.execute("COMMIT")
            except Exception:
                cur.execute("ROLLBACK")
                raise

        await self._db.run(work)
