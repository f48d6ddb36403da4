"""Query pipeline models."""

from app.models.query.entities import (
    GeneratedQuery,
    Insight,
    InsightReport,
    Origin,
    Outcome,
    QueryParams,
    Timeframe,
)

__all__ = [
    "GeneratedQuery",
    "Insight",
    "InsightReport",
    "Origin",
    "Outcome",
    "QueryParams",
    "Timeframe",
]
