"""Statement validation and execution.

A generated statement is executed only if DuckDB's own parser shows it is a
single SELECT over one allow-listed table, and its WHERE clause is a plain
conjunction containing ``tenant_id = '<tenant>'``.
"""

import json
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import duckdb
from loguru import logger

from app.errors import ExecutionError, ValidationError
from app.models import GeneratedQuery, Origin, Outcome
from app.repositories import CampaignMetricsRepository, Database
from settings import MAX_RESULT_ROWS

ALLOWED_TABLES = {"campaign_metrics", "campaign_metrics_summary"}
ALLOWED_SCHEMAS = {"", "main"}
FORBIDDEN_NODES = {"SUBQUERY", "SET_OPERATION_NODE", "JOIN", "RECURSIVE_CTE_NODE", "CTE_NODE"}

HARDCODED_SQL = """
SELECT campaign_id, campaign_name, platform,
       SUM(impressions) AS impressions,
       SUM(clicks) AS clicks,
       SUM(cost) AS cost,
       CASE WHEN SUM(impressions) > 0 THEN SUM(clicks)::DOUBLE / SUM(impressions) END AS ctr
FROM campaign_metrics
WHERE tenant_id = ?
GROUP BY campaign_id, campaign_name, platform
ORDER BY clicks DESC
LIMIT 10
""".strip()

_FENCE = re.compile(r"```[a-zA-Z]*")
_READ_ONLY = re.compile(r"^select\b", re.IGNORECASE)
_WHERE = re.compile(r"\bwhere\b", re.IGNORECASE)
_TRAILING_CLAUSE = re.compile(r"\b(group\s+by|having|qualify|window|order\s+by|limit|offset)\b", re.IGNORECASE)
_OR = re.compile(r"\bor\b", re.IGNORECASE)
_SYNTAX = re.compile(r"syntax error|parser error", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def is_read_only(statement: str) -> bool:
    """Lexically begins with SELECT (after code fences are removed)."""
    return bool(_READ_ONLY.match(strip_code_fences(statement)))


def tenant_literal(tenant_id: str) -> str:
    return "'" + tenant_id.replace("'", "''") + "'"


def ensure_tenant_filter(statement: str, tenant_id: str) -> str:
    """Return the statement with ``tenant_id = '<tenant>'`` ANDed into its WHERE.

    Without a WHERE, one is inserted before the first GROUP BY / HAVING /
    ORDER BY / LIMIT clause, or appended. An existing WHERE that contains OR,
    or lacks the filter, is parenthesised behind it.
    """
    statement = statement.strip().rstrip(";").strip()
    condition = f"tenant_id = {tenant_literal(tenant_id)}"

    where = _WHERE.search(statement)
    clause = _TRAILING_CLAUSE.search(statement, where.end() if where else 0)
    head = statement[: clause.start()].rstrip() if clause else statement
    tail = " " + statement[clause.start() :] if clause else ""

    if where is None:
        return f"{head} WHERE {condition}{tail}"

    existing = head[where.end() :].strip()
    already = re.search(rf"\btenant_id\s*=\s*{re.escape(tenant_literal(tenant_id))}", existing, re.IGNORECASE)
    if already and not _OR.search(existing):
        return statement
    return f"{head[: where.start()].rstrip()} WHERE {condition} AND ({existing}){tail}"


def _walk(node: Any):
    """Yield every dict in a parsed statement tree."""
    if isinstance(node, dict):
        yield node
        for value in node.values():
            yield from _walk(value)
    elif isinstance(node, list):
        for item in node:
            yield from _walk(item)


def _is_tenant_equality(node: dict, tenant_id: str) -> bool:
    if node.get("type") != "COMPARE_EQUAL":
        return False
    sides = [node.get("left") or {}, node.get("right") or {}]
    column = next((s for s in sides if s.get("class") == "COLUMN_REF"), None)
    constant = next((s for s in sides if s.get("class") == "CONSTANT"), None)
    if column is None or constant is None:
        return False
    names = column.get("column_names") or []
    value = (constant.get("value") or {}).get("value")
    return bool(names) and names[-1].lower() == "tenant_id" and value == tenant_id


def _is_scoped(where: dict | None, tenant_id: str) -> bool:
    """WHERE is the tenant equality, or an AND chain that contains it."""
    if not where:
        return False
    if _is_tenant_equality(where, tenant_id):
        return True
    if where.get("type") == "CONJUNCTION_AND":
        return any(_is_scoped(child, tenant_id) for child in where.get("children") or [])
    return False


class StatementValidator:
    """Structural checks via DuckDB's parser (``json_serialize_sql``)."""

    def __init__(self, db: Database, allowed_tables: set[str] = ALLOWED_TABLES):
        self._db = db
        self._allowed_tables = allowed_tables

    async def _parse(self, statement: str) -> dict:
        try:
            row = await self._db.run(lambda cur: cur.execute("SELECT json_serialize_sql(?)", [statement]).fetchone())
        except duckdb.Error as e:
            raise ValidationError(Outcome.SYNTAX_ERROR, str(e)) from e
        tree = json.loads(row[0])
        if tree.get("error"):
            message = tree.get("error_message", "parse failed")
            syntax = tree.get("error_type") == "parser" or _SYNTAX.search(message)
            kind = Outcome.SYNTAX_ERROR if syntax else Outcome.UNSCOPED
            raise ValidationError(kind, message)
        statements = tree.get("statements") or []
        if len(statements) != 1:
            raise ValidationError(Outcome.UNSCOPED, f"Expected one statement, got {len(statements)}")
        return statements[0]["node"]

    def _check_shape(self, node: dict) -> None:
        if node.get("type") != "SELECT_NODE":
            raise ValidationError(Outcome.UNSCOPED, f"Unsupported statement node {node.get('type')}")
        if (node.get("cte_map") or {}).get("map"):
            raise ValidationError(Outcome.UNSCOPED, "CTEs are not allowed")
        for child in _walk(node):
            tags = (child.get("type"), child.get("class"))
            forbidden = [t for t in tags if isinstance(t, str) and t in FORBIDDEN_NODES]
            if forbidden:
                raise ValidationError(Outcome.UNSCOPED, f"{forbidden[0]} is not allowed")

        table = node.get("from_table") or {}
        if table.get("type") != "BASE_TABLE":
            raise ValidationError(Outcome.UNSCOPED, "Statement must read one base table")
        if (table.get("schema_name") or "") not in ALLOWED_SCHEMAS:
            raise ValidationError(Outcome.UNSCOPED, f"Schema {table.get('schema_name')} is not allowed")
        if (table.get("table_name") or "").lower() not in self._allowed_tables:
            raise ValidationError(Outcome.UNSCOPED, f"Table {table.get('table_name')} is not allowed")

    async def validate(self, statement: str, tenant_id: str) -> str:
        """Return the tenant-scoped statement, or raise ValidationError."""
        statement = strip_code_fences(statement)
        if not _READ_ONLY.match(statement):
            raise ValidationError(Outcome.NON_SELECT, "Statement does not start with SELECT")

        self._check_shape(await self._parse(statement))

        scoped = ensure_tenant_filter(statement, tenant_id)
        node = await self._parse(scoped)
        self._check_shape(node)
        if not _is_scoped(node.get("where_clause"), tenant_id):
            raise ValidationError(Outcome.UNSCOPED, "Tenant filter could not be proven")
        return scoped


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def classify_execution_error(exc: Exception) -> Outcome:
    if isinstance(exc, duckdb.ParserException) or _SYNTAX.search(str(exc)):
        return Outcome.SYNTAX_ERROR
    return Outcome.OTHER_ERROR


class QueryExecutor:
    """Validates and runs statements against the campaign store."""

    def __init__(
        self,
        validator: StatementValidator,
        repo: CampaignMetricsRepository,
        max_rows: int = MAX_RESULT_ROWS,
    ):
        self._validator = validator
        self._repo = repo
        self._max_rows = max_rows

    async def _run(self, statement: str, params: list | None) -> list[dict[str, Any]]:
        try:
            rows = await self._repo.run_read(statement, params, self._max_rows)
        except duckdb.Error as e:
            kind = classify_execution_error(e)
            logger.warning("Execution failed ({}): {}", kind.value, e)
            raise ExecutionError(kind, str(e)) from e
        return [{k: _jsonable(v) for k, v in row.items()} for row in rows]

    async def run(self, query: GeneratedQuery, tenant_id: str) -> list[dict[str, Any]]:
        """Validate, scope and execute a generated statement."""
        scoped = await self._validator.validate(query.text, tenant_id)
        rows = await self._run(scoped, None)
        logger.info("Query attempt {} ({}) returned {} rows", query.attempt, query.origin.value, len(rows))
        return rows

    def hardcoded_query(self, attempt: int) -> GeneratedQuery:
        return GeneratedQuery(text=HARDCODED_SQL, attempt=attempt, origin=Origin.HARDCODED)

    async def run_hardcoded(self, tenant_id: str) -> list[dict[str, Any]]:
        """Top campaigns by clicks; the tenant is a bound parameter."""
        rows = await self._run(HARDCODED_SQL, [tenant_id])
        logger.info("Hardcoded fallback returned {} rows", len(rows))
        return rows
