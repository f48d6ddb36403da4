"""Pipeline error types.

Each component converts third-party failures (httpx, duckdb, tenacity,
provider contract errors) into one of these at its own boundary; the
orchestrator decides how each kind degrades.
"""


class PipelineError(Exception):
    """Base class for pipeline failures."""


class ClassificationError(PipelineError):
    """Question could not be classified (malformed input)."""


class RetrievalError(PipelineError):
    """Embedding provider or vector search unreachable."""


class GenerationError(PipelineError):
    """Text generation provider unreachable, timed out or returned garbage."""


class ValidationError(PipelineError):
    """Generated statement rejected before execution."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class ExecutionError(PipelineError):
    """Statement failed at runtime."""

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


class CacheError(PipelineError):
    """Query cache store unreachable."""


class SummaryError(PipelineError):
    """Summary store unreachable."""
