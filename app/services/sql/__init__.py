"""SQL generation, validation, execution and fallback."""

from app.services.sql.generator import QueryGenerator, clean_statement
from app.services.sql.ladder import FallbackLadder, LadderResult, LadderState, next_state
from app.services.sql.validator import (
    HARDCODED_SQL,
    QueryExecutor,
    StatementValidator,
    ensure_tenant_filter,
    is_read_only,
)

__all__ = [
    "QueryGenerator",
    "clean_statement",
    "StatementValidator",
    "QueryExecutor",
    "ensure_tenant_filter",
    "is_read_only",
    "HARDCODED_SQL",
    "FallbackLadder",
    "LadderResult",
    "LadderState",
    "next_state",
]
