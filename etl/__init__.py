"""ETL package - summary refresh, cache purge and indexing."""

from etl.indexing import index_all
from etl.maintenance import purge_cache, refresh_all, refresh_summaries
from etl.validation import validate_tenant

__all__ = [
    "index_all",
    "purge_cache",
    "refresh_all",
    "refresh_summaries",
    "validate_tenant",
]
