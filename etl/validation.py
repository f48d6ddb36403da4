"""Data validation functions."""

import duckdb


def validate_tenant(conn: duckdb.DuckDBPyConnection, tenant_id: str) -> dict:
    """Validate metric data integrity for a tenant."""
    issues = []
    stats = {}

    counts = conn.execute(
        """
        SELECT COUNT(*), COUNT(DISTINCT campaign_id), MIN(date), MAX(date)
        FROM campaign_metrics WHERE tenant_id = ?
        """,
        [tenant_id],
    ).fetchone()
    stats["rows"] = counts[0]
    stats["campaigns"] = counts[1]
    stats["first_date"] = str(counts[2]) if counts[2] else None
    stats["last_date"] = str(counts[3]) if counts[3] else None
    if counts[0] == 0:
        issues.append("No metric rows found")

    anomalies = conn.execute(
        """
        SELECT
            SUM(CASE WHEN clicks > impressions THEN 1 ELSE 0 END),
            SUM(CASE WHEN impressions < 0 OR clicks < 0 OR cost < 0 OR conversions < 0 OR sales < 0
                     THEN 1 ELSE 0 END)
        FROM campaign_metrics WHERE tenant_id = ?
        """,
        [tenant_id],
    ).fetchone()
    if anomalies[0]:
        issues.append(f"{anomalies[0]} rows have more clicks than impressions")
    if anomalies[1]:
        issues.append(f"{anomalies[1]} rows have negative metrics")

    summaries = conn.execute(
        "SELECT COUNT(*), MAX(refreshed_at) FROM campaign_metrics_summary WHERE tenant_id = ?",
        [tenant_id],
    ).fetchone()
    stats["summary_rows"] = summaries[0]
    stats["summaries_refreshed_at"] = str(summaries[1]) if summaries[1] else None
    if counts[0] and summaries[0] == 0:
        issues.append("Summaries not computed")

    embedded = conn.execute(
        "SELECT COUNT(*) FROM embeddings WHERE tenant_id = ? AND entity_type = 'campaign'",
        [tenant_id],
    ).fetchone()[0]
    stats["embedded_campaigns"] = embedded
    if counts[1] and embedded < counts[1]:
        issues.append(f"{counts[1] - embedded} campaigns not indexed")

    return {"valid": not issues, "issues": issues, "stats": stats}
