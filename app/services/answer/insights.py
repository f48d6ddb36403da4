"""Insight extraction - per-metric statistics and comparisons over result rows."""

from typing import Any

import polars as pl

from app.models import Insight, InsightReport
from app.services.answer.formatting import format_metric, label

ENTITY_KEYS = ("campaign_name", "campaign_id", "platform")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def numeric_metrics(rows: list[dict[str, Any]]) -> list[str]:
    """Keys holding numbers in every row that has them, first-seen order; ids excluded."""
    seen: dict[str, bool] = {}
    for row in rows:
        for key, value in row.items():
            if key.lower().endswith("id"):
                continue
            if value is None:
                seen.setdefault(key, True)
                continue
            seen[key] = seen.get(key, True) and _is_number(value)
    return [k for k, ok in seen.items() if ok and any(_is_number(r.get(k)) for r in rows)]


def entity_name(row: dict[str, Any], index: int) -> str:
    for key in ENTITY_KEYS:
        if row.get(key):
            return str(row[key])
    return f"Row {index + 1}"


def _first_extreme(rows: list[dict[str, Any]], key: str, highest: bool) -> int | None:
    """Index of the max/min value; the first occurrence wins ties."""
    best: int | None = None
    for i, row in enumerate(rows):
        value = row.get(key)
        if not _is_number(value):
            continue
        if best is None or (value > rows[best][key] if highest else value < rows[best][key]):
            best = i
    return best


def compute_stats(rows: list[dict[str, Any]], metrics: list[str]) -> list[Insight]:
    if not metrics:
        return []
    frame = pl.DataFrame(
        {m: [float(r[m]) if _is_number(r.get(m)) else None for r in rows] for m in metrics},
        schema={m: pl.Float64 for m in metrics},
    )
    stats = []
    for m in metrics:
        column = frame.get_column(m).drop_nulls()
        if column.len() == 0:
            continue
        stats.append(
            Insight(
                metric=m,
                average=float(column.mean()),
                minimum=float(column.min()),
                maximum=float(column.max()),
                total=float(column.sum()),
            )
        )
    return stats


def comparative_statements(rows: list[dict[str, Any]], metrics: list[str]) -> list[str]:
    """Highest rate metric, most and fewest of the leading count metric.

    Only emitted when the rows cover more than one entity.
    """
    if len({entity_name(row, i) for i, row in enumerate(rows)}) < 2:
        return []

    statements = []
    rate_key = next((m for m in metrics if m.lower() == "ctr"), None)
    if rate_key:
        i = _first_extreme(rows, rate_key, highest=True)
        if i is not None:
            value = format_metric(rate_key, rows[i][rate_key])
            statements.append(f"{entity_name(rows[i], i)} has the highest {label(rate_key)} at {value}.")

    count_key = next((m for m in metrics if "clicks" in m.lower()), None)
    if count_key:
        hi = _first_extreme(rows, count_key, highest=True)
        lo = _first_extreme(rows, count_key, highest=False)
        name = label(count_key).lower()
        if hi is not None:
            value = format_metric(count_key, rows[hi][count_key])
            statements.append(f"{entity_name(rows[hi], hi)} has the most {name} ({value}).")
        if lo is not None and lo != hi:
            value = format_metric(count_key, rows[lo][count_key])
            statements.append(f"{entity_name(rows[lo], lo)} has the fewest {name} ({value}).")
    return statements


def extract_insights(rows: list[dict[str, Any]]) -> InsightReport:
    """Deterministic for identical rows."""
    if not rows:
        return InsightReport()
    metrics = numeric_metrics(rows)
    return InsightReport(stats=compute_stats(rows, metrics), statements=comparative_statements(rows, metrics))
