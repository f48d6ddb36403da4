"""Question classification - intent, complexity, timeframes, parameters."""

import re

from app.errors import ClassificationError
from app.models import QueryParams, Timeframe, TimeWindow
from app.services.query.normalizer import normalize

# Phrases that need exact, live computation
COMPLEX_INDICATORS = [
    "specific",
    "campaign id",
    "campaign name",
    "compared to",
    "correlation",
    "relationship between",
    "trend",
    "over time",
    "percentage change",
    "growth rate",
    "raw data",
    "detailed",
    "exact",
]

METRIC_TERMS = [
    "ctr",
    "click through",
    "clickthrough",
    "impressions",
    "clicks",
    "cost",
    "conversions",
    "roas",
    "return on ad spend",
    "campaign",
    "metrics",
    "performance",
]

# Checked in order; a question may hit several windows
TIMEFRAME_PATTERNS = [
    (TimeWindow.DAILY, re.compile(r"\b(today|daily|yesterday)\b")),
    (TimeWindow.WEEKLY, re.compile(r"\b(weeks?|weekly|last 7 days)\b")),
    (TimeWindow.MONTHLY, re.compile(r"\b(months?|monthly|last 30 days)\b")),
    (TimeWindow.QUARTERLY, re.compile(r"\b(quarters?|quarterly|last 90 days)\b")),
]

DATA_INTENT_PATTERNS = [
    re.compile(r"\bhow (are|is|did|do|does|many|much|well)\b.*\b(campaign|ad|ads|account|doing|perform\w*|spend\w*)\b"),
    re.compile(r"\b(perform\w*|results?|metrics?|stats|statistics|numbers|kpis?)\b"),
    re.compile(
        r"\b(impressions?|clicks?|ctr|click[- ]?through|cost|spend|spent|sales|revenue|roas|roi|"
        r"conversions?|conversion rate|cpa|cpc)\b"
    ),
    re.compile(r"\b(today|yesterday|last|this|past|previous)\s+(\d+\s+)?(days?|weeks?|months?|quarters?|years?)\b"),
    re.compile(r"\b(daily|weekly|monthly|quarterly)\b"),
    re.compile(r"\b(compar\w*|versus|vs|better|worse|best|worst|top|bottom|highest|lowest|most|least)\b"),
    re.compile(r"\b(amazon|google|meta|facebook)\b"),
]

QUERY_METRICS = [
    "impressions",
    "clicks",
    "ctr",
    "click-through rate",
    "cost",
    "spend",
    "sales",
    "revenue",
    "roas",
    "roi",
    "conversions",
    "conversion rate",
    "cpa",
    "cost per acquisition",
]

PLATFORMS = ["amazon", "google", "meta", "facebook"]

_TIME_RANGE = re.compile(r"last\s+(\d+)\s+(day|week|month|year)s?", re.IGNORECASE)
_COMPARISON = re.compile(r"compar(e|ison)|vs\.?|versus|better than|worse than|difference", re.IGNORECASE)
_SUPERLATIVE = re.compile(r"\b(best|worst|top|bottom|highest|lowest|most|least)\b", re.IGNORECASE)
_CAMPAIGN_NAME = re.compile(r"campaign\s+(?:(?:called|named)\s+[\"']?([^\"'?]+)[\"']?|[\"']([^\"']+)[\"'])", re.IGNORECASE)


def _require_text(text) -> str:
    if not isinstance(text, str):
        raise ClassificationError(f"Question must be text, got {type(text).__name__}")
    return text


def is_data_question(text: str) -> bool:
    """True if the question asks about campaign data at all."""
    normalized = normalize(_require_text(text))
    return any(p.search(normalized) for p in DATA_INTENT_PATTERNS)


def is_complex_question(text: str) -> bool:
    """True if the question needs exact/live data and must skip cache and summaries."""
    normalized = normalize(_require_text(text))
    return any(indicator in normalized for indicator in COMPLEX_INDICATORS)


def contains_metric_terms(text: str) -> bool:
    normalized = normalize(_require_text(text))
    return any(term in normalized for term in METRIC_TERMS)


def detect_timeframes(text: str) -> list[TimeWindow]:
    """Windows referenced by the question, in daily..quarterly order; monthly if none."""
    normalized = normalize(_require_text(text))
    windows = [window for window, pattern in TIMEFRAME_PATTERNS if pattern.search(normalized)]
    return windows or [TimeWindow.MONTHLY]


def extract_query_params(text: str) -> QueryParams:
    """Metrics, time range, platforms, comparison flag and campaign name."""
    _require_text(text)
    lowered = text.lower()
    params = QueryParams()

    params.metrics = {m for m in QUERY_METRICS if re.search(rf"\b{re.escape(m)}\b", lowered)}

    time_match = _TIME_RANGE.search(text)
    if time_match:
        params.timeframe = Timeframe(value=int(time_match.group(1)), unit=time_match.group(2).lower())

    params.platforms = {p for p in PLATFORMS if re.search(rf"\b{p}\b", lowered)}
    params.comparison = bool(_COMPARISON.search(text) or _SUPERLATIVE.search(text))

    name_match = _CAMPAIGN_NAME.search(text)
    if name_match:
        name = (name_match.group(1) or name_match.group(2)).strip().rstrip(".!")
        params.specific_entity = name or None

    return params
