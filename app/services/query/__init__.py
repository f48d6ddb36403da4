"""Query understanding - normalization, classification and caching."""

from app.services.query.cache import QueryCache, question_hash
from app.services.query.classifier import (
    contains_metric_terms,
    detect_timeframes,
    extract_query_params,
    is_complex_question,
    is_data_question,
)
from app.services.query.normalizer import normalize

__all__ = [
    "normalize",
    "is_data_question",
    "is_complex_question",
    "contains_metric_terms",
    "detect_timeframes",
    "extract_query_params",
    "QueryCache",
    "question_hash",
]
