"""Context assembly - the only text the response generator sees."""

from collections import OrderedDict
from typing import Any

from app.models import InsightReport, QueryParams, SearchHit
from app.services.answer.formatting import format_metric, label
from app.services.answer.insights import entity_name, numeric_metrics
from settings import MAX_CONTEXT_CHARS

DATA_INSTRUCTIONS = """Instructions:
- Answer using only the campaign data above.
- If the data does not cover the question, say so plainly instead of guessing.
- Quote figures with the units shown."""

NO_GROUNDING_INSTRUCTIONS = """Instructions:
- No campaign data matched this question.
- Answer from general advertising knowledge.
- State clearly that no campaign data was used for this answer."""

GENERAL_INSTRUCTIONS = """Instructions:
- This is a general question, not a request for campaign data.
- Answer helpfully from general advertising knowledge."""

# Non-metric columns shown next to an entity's values
DIMENSION_KEYS = ("date", "time_window", "period_start", "period_end", "week", "month")

SOURCE_LABELS = {
    "query": "Live campaign data",
    "summary": "Precomputed campaign summaries",
    "cache": "Campaign data (cached)",
    "fallback": "Top campaigns by clicks (the specific question could not be answered directly)",
}


def _group_rows(rows: list[dict[str, Any]]) -> "OrderedDict[str, list[dict[str, Any]]]":
    groups: OrderedDict[str, list[dict[str, Any]]] = OrderedDict()
    for i, row in enumerate(rows):
        name = entity_name(row, i)
        if row.get("platform") and name != row["platform"]:
            name = f"{name} ({row['platform']})"
        groups.setdefault(name, []).append(row)
    return groups


def render_rows(rows: list[dict[str, Any]]) -> list[str]:
    """One block per entity; metrics labeled and unit-formatted."""
    metrics = numeric_metrics(rows)
    lines = []
    for name, group in _group_rows(rows).items():
        lines.append(f"Campaign: {name}")
        for row in group:
            dims = [f"{label(k)}: {row[k]}" for k in DIMENSION_KEYS if row.get(k) is not None]
            indent = "  "
            if len(group) > 1 and dims:
                lines.append(f"  [{', '.join(dims)}]")
                indent = "    "
            elif dims:
                lines.append(f"  - {', '.join(dims)}")
            for key in metrics:
                if key in row:
                    lines.append(f"{indent}- {label(key)}: {format_metric(key, row[key])}")
    return lines


def render_insights(report: InsightReport) -> list[str]:
    lines = [f"- {s}" for s in report.statements]
    for stat in report.stats:
        lines.append(
            f"- {label(stat.metric)}: total {format_metric(stat.metric, stat.total)}, "
            f"average {format_metric(stat.metric, stat.average)}, "
            f"min {format_metric(stat.metric, stat.minimum)}, max {format_metric(stat.metric, stat.maximum)}"
        )
    return lines


def render_messages(hits: list[SearchHit], limit: int = 3, max_len: int = 300) -> list[str]:
    lines = []
    for hit in hits[:limit]:
        text = hit.record.text
        if len(text) > max_len:
            text = text[:max_len].rstrip() + "..."
        lines.append(f"- {text}")
    return lines


def _fit(fixed_before: list[str], body: list[str], fixed_after: list[str], max_chars: int) -> str:
    """Join sections, dropping trailing body lines until the whole fits."""
    head = "\n".join(fixed_before)
    tail = "\n".join(fixed_after)
    budget = max_chars - len(head) - len(tail) - 2
    kept = body
    if sum(len(line) + 1 for line in body) > budget:
        budget -= len(f"... ({len(body)} more lines omitted)") + 1
        kept, used = [], 0
        for line in body:
            if used + len(line) + 1 > budget:
                break
            kept.append(line)
            used += len(line) + 1
        kept.append(f"... ({len(body) - len(kept)} more lines omitted)")
    return "\n".join(part for part in (head, "\n".join(kept), tail) if part)


def build_context(
    question: str,
    params: QueryParams,
    rows: list[dict[str, Any]],
    report: InsightReport,
    source: str,
    related: list[SearchHit] | None = None,
    max_chars: int = MAX_CONTEXT_CHARS,
) -> str:
    """Grounded context: question, parameters, data, insights, instructions."""
    before = [f"User question: {question}"]
    described = params.describe()
    if described:
        before += ["", "Question parameters:"] + [f"- {d}" for d in described]

    after = []
    insights = render_insights(report)
    if insights:
        after += ["", "Insights:"] + insights
    if related:
        after += ["", "Related earlier discussion:"] + render_messages(related)
    after += ["", DATA_INSTRUCTIONS]

    body = ["", f"{SOURCE_LABELS.get(source, 'Campaign data')} ({len(rows)} rows):"] + render_rows(rows)
    return _fit(before, body, after, max_chars)


def build_no_grounding_context(question: str, params: QueryParams, max_chars: int = MAX_CONTEXT_CHARS) -> str:
    before = [f"User question: {question}"]
    described = params.describe()
    if described:
        before += ["", "Question parameters:"] + [f"- {d}" for d in described]
    return _fit(before, [], ["", NO_GROUNDING_INSTRUCTIONS], max_chars)


def build_general_context(question: str) -> str:
    return f"User question: {question}\n\n{GENERAL_INSTRUCTIONS}"
