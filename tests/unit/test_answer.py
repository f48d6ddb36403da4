"""Tests for insight extraction, formatting and context assembly."""

from app.models import EmbeddingRecord, InsightReport, QueryParams, SearchHit, utcnow
from app.services.answer.context import (
    DATA_INSTRUCTIONS,
    NO_GROUNDING_INSTRUCTIONS,
    build_context,
    build_no_grounding_context,
    render_rows,
)
from app.services.answer.formatting import format_metric, label
from app.services.answer.insights import extract_insights, numeric_metrics

ROWS = [
    {"campaign_id": "a1", "campaign_name": "Spring Sale", "platform": "amazon", "clicks": 50, "ctr": 0.05, "cost": 25.0},
    {"campaign_id": "a2", "campaign_name": "Brand", "platform": "amazon", "clicks": 80, "ctr": 0.10, "cost": 40.0},
    {"campaign_id": "g1", "campaign_name": "Generic", "platform": "google", "clicks": 10, "ctr": 0.02, "cost": 15.0},
]


class TestFormatting:
    def test_currency(self):
        assert format_metric("cost", 1234.5) == "$1,234.50"
        assert format_metric("total_sales", 3) == "$3.00"

    def test_rate(self):
        assert format_metric("ctr", 0.0523) == "5.2%"
        assert format_metric("conversion_rate", 0.1) == "10.0%"

    def test_ratio(self):
        assert format_metric("roas", 3.254) == "3.25x"

    def test_count(self):
        assert format_metric("clicks", 12345) == "12,345"
        assert format_metric("impressions", 1000.0) == "1,000"

    def test_missing(self):
        assert format_metric("ctr", None) == "n/a"

    def test_label(self):
        assert label("total_clicks") == "Total Clicks"
        assert label("ctr") == "CTR"


class TestInsights:
    def test_numeric_metrics_skip_ids_and_text(self):
        assert numeric_metrics(ROWS) == ["clicks", "ctr", "cost"]

    def test_stats(self):
        report = extract_insights(ROWS)
        clicks = next(s for s in report.stats if s.metric == "clicks")
        assert clicks.total == 140
        assert clicks.minimum == 10
        assert clicks.maximum == 80
        assert abs(clicks.average - 140 / 3) < 1e-9

    def test_comparisons(self):
        statements = extract_insights(ROWS).statements
        assert "Brand has the highest CTR at 10.0%." in statements
        assert "Brand has the most clicks (80)." in statements
        assert "Generic has the fewest clicks (10)." in statements

    def test_ties_first_wins(self):
        rows = [
            {"campaign_name": "First", "clicks": 5},
            {"campaign_name": "Second", "clicks": 5},
            {"campaign_name": "Third", "clicks": 1},
        ]
        assert "First has the most clicks (5)." in extract_insights(rows).statements

    def test_single_row_has_no_comparisons(self):
        report = extract_insights(ROWS[:1])
        assert report.statements == []
        assert len(report.stats) == 3

    def test_daily_rows_of_one_campaign_have_no_comparisons(self):
        rows = [
            {"campaign_name": "Spring Sale", "date": "2026-10-01", "clicks": 50},
            {"campaign_name": "Spring Sale", "date": "2026-10-02", "clicks": 10},
        ]
        report = extract_insights(rows)
        assert report.statements == []
        assert report.stats[0].total == 60.0

    def test_deterministic(self):
        assert extract_insights(ROWS) == extract_insights([dict(r) for r in ROWS])

    def test_empty(self):
        assert extract_insights([]) == InsightReport()

    def test_null_values_ignored(self):
        rows = [{"campaign_name": "A", "roas": None}, {"campaign_name": "B", "roas": 2.0}]
        roas = extract_insights(rows).stats[0]
        assert roas.total == 2.0
        assert roas.minimum == 2.0


class TestContext:
    def test_render_rows_groups_and_formats(self):
        lines = render_rows(ROWS)
        assert "Campaign: Spring Sale (amazon)" in lines
        assert "  - CTR: 5.0%" in lines
        assert "  - Cost: $25.00" in lines

    def test_build_context_sections(self):
        params = QueryParams(metrics={"clicks"}, platforms={"amazon"})
        context = build_context("How many clicks?", params, ROWS, extract_insights(ROWS), "query")
        assert context.startswith("User question: How many clicks?")
        assert "Metrics: clicks" in context
        assert "Brand has the most clicks (80)." in context
        assert context.endswith(DATA_INSTRUCTIONS)

    def test_bounded(self):
        rows = [{"campaign_name": f"Campaign {i}", "clicks": i} for i in range(500)]
        context = build_context("q", QueryParams(), rows, extract_insights(rows), "query", max_chars=2000)
        assert len(context) <= 2000
        assert "more lines omitted" in context
        assert context.endswith(DATA_INSTRUCTIONS)

    def test_never_contains_sql(self):
        context = build_context("q", QueryParams(), ROWS, extract_insights(ROWS), "fallback")
        assert "SELECT" not in context
        assert "tenant_id" not in context

    def test_related_messages(self):
        hit = SearchHit(
            record=EmbeddingRecord(
                id="e1",
                tenant_id="t1",
                entity_type="chat_message",
                source_id="m1",
                vector=[1.0],
                text="user: what about brand campaigns?",
                created_at=utcnow(),
            ),
            score=0.9,
        )
        context = build_context("q", QueryParams(), ROWS, extract_insights(ROWS), "query", related=[hit])
        assert "Related earlier discussion:" in context
        assert "- user: what about brand campaigns?" in context

    def test_no_grounding(self):
        context = build_no_grounding_context("What is a good CTR?", QueryParams())
        assert NO_GROUNDING_INSTRUCTIONS in context
        assert "no campaign data was used" in context
