"""Answer assembly - insights, context and the pipeline orchestrator."""

from app.services.answer.context import build_context, build_general_context, build_no_grounding_context
from app.services.answer.formatting import format_metric
from app.services.answer.insights import extract_insights
from app.services.answer.pipeline import DONE_MARKER, GENERIC_ERROR, AnswerResult, Pipeline

__all__ = [
    "AnswerResult",
    "DONE_MARKER",
    "GENERIC_ERROR",
    "Pipeline",
    "build_context",
    "build_general_context",
    "build_no_grounding_context",
    "extract_insights",
    "format_metric",
]
