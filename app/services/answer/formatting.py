"""Metric labels and unit formatting."""

from typing import Any

CURRENCY_KEYS = ("cost", "spend", "sales", "revenue", "value", "cpc", "cpa")
RATIO_KEYS = ("roas", "roi")

LABELS = {
    "ctr": "CTR",
    "roas": "ROAS",
    "roi": "ROI",
    "cpc": "CPC",
    "cpa": "CPA",
}


def is_rate(key: str) -> bool:
    key = key.lower()
    return key == "ctr" or key.endswith("_ctr") or "rate" in key


def is_ratio(key: str) -> bool:
    return any(r in key.lower() for r in RATIO_KEYS)


def is_currency(key: str) -> bool:
    return any(c in key.lower() for c in CURRENCY_KEYS)


def label(key: str) -> str:
    """``total_clicks`` -> ``Total Clicks``, ``ctr`` -> ``CTR``."""
    return " ".join(LABELS.get(part, part.capitalize()) for part in key.lower().split("_"))


def format_metric(key: str, value: Any) -> str:
    """Render a value with the unit its key implies. Rates are fractions."""
    if value is None:
        return "n/a"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return str(value)
    if is_rate(key):
        return f"{value * 100:.1f}%"
    if is_ratio(key):
        return f"{value:.2f}x"
    if is_currency(key):
        return f"${value:,.2f}"
    if isinstance(value, int) or float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"
