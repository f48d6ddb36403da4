"""Query generator - question to a single read-only SQL statement."""

import re

import httpx
from loguru import logger
from tenacity import RetryError

from app.errors import GenerationError
from app.models import CAMPAIGN_METRICS_COLUMNS, ChatMessage, GeneratedQuery, Origin, Outcome, QueryParams
from llm_client import GenerationClient, ProviderError
from settings import SQL_MAX_TOKENS, SQL_TEMPERATURE

SYSTEM_PROMPT = "You are a specialized SQL query generator for an advertising analytics platform."

SCHEMA_DESCRIPTION = "\n".join(
    ["Table campaign_metrics (DuckDB SQL):"]
    + [f"  - {name}: {desc}" for name, desc in CAMPAIGN_METRICS_COLUMNS.items()]
    + [
        "Table campaign_metrics_summary (precomputed, one row per campaign and time_window):",
        "  - tenant_id, campaign_id, campaign_name, platform",
        "  - time_window: 'daily', 'weekly', 'monthly' or 'quarterly'",
        "  - total_impressions, total_clicks, total_cost, total_conversions, total_sales, ctr, roas",
    ]
)

HARD_CONSTRAINTS = [
    "Output ONLY the SQL statement. No explanation, no preamble, no markdown.",
    "The statement must be a single read-only SELECT.",
    "It must filter by tenant_id = '{tenant_id}'.",
    "Query exactly one table. No JOINs, subqueries, CTEs (WITH) or UNION.",
    "Compute CTR as clicks / impressions and ROAS as sales / cost where relevant.",
    "Use CURRENT_DATE arithmetic for time ranges, e.g. date >= CURRENT_DATE - INTERVAL 7 DAY.",
]

CORRECTIVE_INSTRUCTIONS = {
    Outcome.NON_SELECT: (
        "Your previous answer was not a SQL SELECT statement. "
        "Reply with one SELECT statement and nothing else."
    ),
    Outcome.UNSCOPED: (
        "Your previous statement used a construct that is not allowed. "
        "Write one plain SELECT over a single table with a WHERE tenant_id filter, "
        "without JOINs, subqueries, CTEs or UNION."
    ),
    Outcome.SYNTAX_ERROR: (
        "Your previous statement had a syntax error. "
        "Write a simpler, syntactically valid DuckDB SELECT using only the listed columns."
    ),
    Outcome.GENERATION_ERROR: "Reply with one SELECT statement and nothing else.",
}

_FENCE = re.compile(r"```[a-zA-Z]*")
_SELECT = re.compile(r"\bselect\b", re.IGNORECASE)


def clean_statement(raw: str) -> str:
    """Strip markdown fences and any prose before the first SELECT."""
    text = _FENCE.sub("", raw).strip()
    match = _SELECT.search(text)
    if match:
        text = text[match.start() :]
    return text.strip()


def retry_origin(failure: Outcome) -> Origin:
    return Origin.RETRY_SYNTAX if failure == Outcome.SYNTAX_ERROR else Origin.RETRY_NON_SELECT


class QueryGenerator:
    """Asks the generation provider for SQL; never executes anything."""

    def __init__(
        self,
        client: GenerationClient,
        temperature: float = SQL_TEMPERATURE,
        max_tokens: int = SQL_MAX_TOKENS,
    ):
        self._client = client
        self._temperature = temperature
        self._max_tokens = max_tokens

    def build_messages(
        self,
        question: str,
        tenant_id: str,
        params: QueryParams,
        history: list[ChatMessage],
        campaign_ids: list[str],
        failure: Outcome | None = None,
    ) -> list[dict]:
        constraints = "\n".join(f"{i}. {c.format(tenant_id=tenant_id)}" for i, c in enumerate(HARD_CONSTRAINTS, 1))
        parts = [SCHEMA_DESCRIPTION, "", "Requirements:", constraints]

        hints = params.describe()
        if campaign_ids:
            hints.append(f"Relevant campaign ids: {', '.join(campaign_ids)}")
        if hints:
            parts += ["", "Detected in the question:"] + [f"- {h}" for h in hints]

        if history:
            parts += ["", "Conversation so far:"] + [f"{m.role}: {m.content}" for m in history]

        parts += ["", f'The user asked: "{question}"']
        if failure is not None:
            parts += ["", CORRECTIVE_INSTRUCTIONS.get(failure, CORRECTIVE_INSTRUCTIONS[Outcome.GENERATION_ERROR])]

        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "\n".join(parts)},
        ]

    async def generate(
        self,
        question: str,
        tenant_id: str,
        params: QueryParams,
        history: list[ChatMessage],
        campaign_ids: list[str],
        attempt: int,
        failure: Outcome | None = None,
    ) -> GeneratedQuery:
        """One generation attempt. ``failure`` selects the corrective prompt."""
        origin = Origin.PRIMARY if failure is None else retry_origin(failure)
        messages = self.build_messages(question, tenant_id, params, history, campaign_ids, failure)
        try:
            raw = await self._client.complete(messages, temperature=self._temperature, max_tokens=self._max_tokens)
        except (httpx.HTTPError, ProviderError, RetryError) as e:
            raise GenerationError(f"SQL generation failed: {e}") from e

        logger.debug("Generated SQL (attempt {}, {}): {}", attempt, origin.value, raw)
        return GeneratedQuery(text=clean_statement(raw), attempt=attempt, origin=origin)
