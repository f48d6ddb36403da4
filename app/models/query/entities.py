"""Query pipeline entities - per-question values, never persisted on their own."""

from dataclasses import dataclass, field
from enum import Enum

from app.models.common import BaseEntity


class Origin(str, Enum):
    """Which rung of the fallback ladder produced a statement."""

    PRIMARY = "primary"
    RETRY_NON_SELECT = "retry-non-select"
    RETRY_SYNTAX = "retry-syntax"
    HARDCODED = "hardcoded-fallback"


class Outcome(str, Enum):
    """Result of validating and executing one statement."""

    SUCCESS = "success"
    NON_SELECT = "non_select"
    UNSCOPED = "unscoped"
    SYNTAX_ERROR = "syntax_error"
    OTHER_ERROR = "other_error"
    GENERATION_ERROR = "generation_error"


@dataclass
class GeneratedQuery(BaseEntity):
    text: str
    attempt: int
    origin: Origin


@dataclass
class Timeframe(BaseEntity):
    value: int
    unit: str


@dataclass
class QueryParams(BaseEntity):
    """Structured reading of a question."""

    metrics: set[str] = field(default_factory=set)
    timeframe: Timeframe | None = None
    platforms: set[str] = field(default_factory=set)
    comparison: bool = False
    specific_entity: str | None = None

    def describe(self) -> list[str]:
        """Human-readable lines, sorted for stable output."""
        lines = []
        if self.metrics:
            lines.append(f"Metrics: {', '.join(sorted(self.metrics))}")
        if self.timeframe:
            lines.append(f"Timeframe: last {self.timeframe.value} {self.timeframe.unit}(s)")
        if self.platforms:
            lines.append(f"Platforms: {', '.join(sorted(self.platforms))}")
        if self.comparison:
            lines.append("Comparison requested")
        if self.specific_entity:
            lines.append(f"Campaign: {self.specific_entity}")
        return lines


@dataclass
class Insight(BaseEntity):
    """Aggregate statistics of one metric over the result rows."""

    metric: str
    average: float
    minimum: float
    maximum: float
    total: float


@dataclass
class InsightReport(BaseEntity):
    stats: list[Insight] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)
