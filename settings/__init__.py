"""Application settings."""

import os
from pathlib import Path

# Database
DB_PATH = os.getenv("CAMPAIGN_DB_PATH", "campaigns.duckdb")

# Logging
LOG_DIR = Path("logs")

# LLM provider (OpenAI-compatible API)
LLM_API_BASE_URL = os.getenv("LLM_API_BASE_URL", "https://api.openai.com/v1")
LLM_API_KEY = os.getenv("OPENAI_API_KEY", "")
GENERATION_MODEL = os.getenv("GENERATION_MODEL", "gpt-4o")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
API_TIMEOUT = float(os.getenv("LLM_API_TIMEOUT", "60"))
MAX_CONCURRENT = 20

# Embeddings
VECTOR_DIMENSIONS = 1536
EMBEDDING_BATCH_SIZE = 20
EMBEDDING_MIN_INTERVAL = float(os.getenv("EMBEDDING_MIN_INTERVAL", "2.0"))
EMBEDDING_MAX_RETRIES = 2
MESSAGE_EMBEDDING_INTERVAL = 7

# Generation
SQL_TEMPERATURE = 0.1
SQL_MAX_TOKENS = 1000
RESPONSE_TEMPERATURE = 0.7
RESPONSE_MAX_TOKENS = 1000

# Cache
CACHE_TTL_HOURS = int(os.getenv("CACHE_TTL_HOURS", "24"))
CACHE_PURGE_DAYS = 7

# Retrieval
RETRIEVAL_TOP_K = 10
RETRIEVAL_MAX_HITS = 5
CAMPAIGN_MIN_SCORE = 0.65
MESSAGE_MIN_SCORE = 0.75

# Query execution and context
MAX_RESULT_ROWS = 200
MAX_CONTEXT_CHARS = 12000
HISTORY_MESSAGES = 6
