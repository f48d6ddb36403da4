"""Services package - service class exports."""

from app.services.answer.pipeline import AnswerResult, Pipeline
from app.services.campaign.summaries import SummaryStore
from app.services.query.cache import QueryCache
from app.services.retrieval.indexer import Indexer
from app.services.retrieval.retriever import Retriever
from app.services.sql.generator import QueryGenerator
from app.services.sql.ladder import FallbackLadder
from app.services.sql.validator import QueryExecutor, StatementValidator

__all__ = [
    "AnswerResult",
    "FallbackLadder",
    "Indexer",
    "Pipeline",
    "QueryCache",
    "QueryExecutor",
    "QueryGenerator",
    "Retriever",
    "StatementValidator",
    "SummaryStore",
]
