"""Tests for the DuckDB-backed stores and maintenance jobs."""

from datetime import timedelta

import pytest

from app.models import CachedPayload, EmbeddingRecord, EntityType, QueryParams, TimeWindow, utcnow
from app.services.campaign.summaries import SummaryStore
from app.services.query.cache import QueryCache
from etl import purge_cache, refresh_all, refresh_summaries, validate_tenant


def record(id_, tenant_id, vector, source_id=None, entity_type=EntityType.CAMPAIGN.value):
    return EmbeddingRecord(
        id=id_,
        tenant_id=tenant_id,
        entity_type=entity_type,
        source_id=source_id or id_,
        vector=vector,
        text=f"text {id_}",
        created_at=utcnow(),
    )


class TestQueryCache:
    @pytest.mark.asyncio
    async def test_put_then_get_counts_hits(self, repos):
        cache = QueryCache(repos["cache"])
        await cache.put("t1", "How are my campaigns?", CachedPayload(rows=[{"clicks": 1}]))

        payload = await cache.get("t1", "how are my campaigns")
        assert payload.rows == [{"clicks": 1}]
        await cache.get("t1", "HOW ARE MY CAMPAIGNS?!")

        entries = await repos["cache"].fetchall("SELECT hit_count FROM query_cache")
        assert entries == [(2,)]

    @pytest.mark.asyncio
    async def test_tenants_isolated(self, repos):
        cache = QueryCache(repos["cache"])
        await cache.put("t1", "show ctr", CachedPayload(rows=[{"ctr": 0.1}]))
        assert await cache.get("t2", "show ctr") is None
        hashes = await repos["cache"].fetchall("SELECT DISTINCT question_hash FROM query_cache")
        assert len(hashes) == 1

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self, repos):
        now = utcnow()
        clock = {"now": now}
        cache = QueryCache(repos["cache"], ttl=timedelta(hours=1), clock=lambda: clock["now"])
        await cache.put("t1", "show ctr", CachedPayload(rows=[{"ctr": 0.1}]))
        clock["now"] = now + timedelta(hours=2)
        assert await cache.get("t1", "show ctr") is None

    @pytest.mark.asyncio
    async def test_complex_questions_bypass(self, repos):
        cache = QueryCache(repos["cache"])
        await cache.put("t1", "show the exact clicks", CachedPayload(rows=[{"clicks": 1}]))
        assert await cache.get("t1", "show the exact clicks") is None
        assert await repos["cache"].count("t1") == 0

    @pytest.mark.asyncio
    async def test_upsert_overwrites(self, repos):
        cache = QueryCache(repos["cache"])
        await cache.put("t1", "show ctr", CachedPayload(rows=[{"ctr": 0.1}]))
        await cache.put("t1", "show ctr", CachedPayload(rows=[{"ctr": 0.2}]))
        assert (await cache.get("t1", "show ctr")).rows == [{"ctr": 0.2}]
        assert await repos["cache"].count("t1") == 1

    @pytest.mark.asyncio
    async def test_purge(self, repos):
        now = utcnow()
        old = QueryCache(repos["cache"], clock=lambda: now - timedelta(days=10))
        await old.put("t1", "old question", CachedPayload())
        await QueryCache(repos["cache"]).put("t1", "new question", CachedPayload())
        assert await purge_cache(repos["cache"], now=now) == 1
        assert await repos["cache"].count("t1") == 1


class TestEmbeddingSearch:
    @pytest.mark.asyncio
    async def test_threshold_and_tenant_filter(self, repos):
        await repos["embedding"].replace(
            [
                record("mine-close", "t1", [1.0, 0.1]),
                record("mine-far", "t1", [0.0, 1.0]),
                record("theirs-exact", "t2", [1.0, 0.0]),
            ]
        )
        hits = await repos["embedding"].search([1.0, 0.0], "t1", EntityType.CAMPAIGN.value, top_k=10, min_score=0.7)
        assert [h.record.id for h in hits] == ["mine-close"]
        assert all(h.score >= 0.7 for h in hits)

    @pytest.mark.asyncio
    async def test_top_k(self, repos):
        await repos["embedding"].replace([record(f"r{i}", "t1", [1.0, i / 10]) for i in range(5)])
        hits = await repos["embedding"].search([1.0, 0.0], "t1", EntityType.CAMPAIGN.value, top_k=2, min_score=0.0)
        assert [h.record.id for h in hits] == ["r0", "r1"]

    @pytest.mark.asyncio
    async def test_tenant_required(self, repos):
        with pytest.raises(ValueError):
            await repos["embedding"].search([1.0], "", EntityType.CAMPAIGN.value, top_k=1, min_score=0.0)

    @pytest.mark.asyncio
    async def test_replace_supersedes_source(self, repos):
        await repos["embedding"].replace([record("v1", "t1", [1.0, 0.0], source_id="a1")])
        await repos["embedding"].replace([record("v2", "t1", [0.0, 1.0], source_id="a1")])
        records = await repos["embedding"].candidates("t1", EntityType.CAMPAIGN.value)
        assert [r.id for r in records] == ["v2"]


class TestSummaries:
    @pytest.mark.asyncio
    async def test_refresh_and_lookup(self, seeded, today):
        count = await refresh_summaries(seeded["metrics"], seeded["summary"], "t1", today)
        assert count == 12  # 3 campaigns x 4 windows

        rows = await SummaryStore(seeded["summary"]).lookup("t1", "clicks last week", QueryParams())
        assert {r.time_window for r in rows} == {TimeWindow.WEEKLY.value}
        brand = next(r for r in rows if r.campaign_id == "a2")
        assert brand.total_clicks == 80 * 8  # today and the 7 days before
        assert brand.ctr == pytest.approx(0.1)
        assert brand.roas == pytest.approx(300 / 40)

    @pytest.mark.asyncio
    async def test_platform_alias(self, seeded, today):
        await refresh_summaries(seeded["metrics"], seeded["summary"], "t1", today)
        params = QueryParams(platforms={"google"})
        rows = await SummaryStore(seeded["summary"]).lookup("t1", "google clicks", params)
        assert {r.platform for r in rows} == {"google"}

    @pytest.mark.asyncio
    async def test_refresh_replaces(self, seeded, today):
        await refresh_summaries(seeded["metrics"], seeded["summary"], "t1", today)
        await refresh_summaries(seeded["metrics"], seeded["summary"], "t1", today)
        row = await seeded["summary"].fetchone("SELECT COUNT(*) FROM campaign_metrics_summary WHERE tenant_id = 't1'")
        assert row[0] == 12

    @pytest.mark.asyncio
    async def test_refresh_all(self, seeded, today):
        result = await refresh_all(seeded["metrics"], seeded["summary"], seeded["cache"], today=today)
        assert result["refreshed"] == {"t1": 12, "t2": 12}
        assert result["failed"] == []

    @pytest.mark.asyncio
    async def test_validate_tenant(self, db, seeded, today):
        await refresh_summaries(seeded["metrics"], seeded["summary"], "t1", today)
        cur = db.cursor()
        try:
            result = validate_tenant(cur, "t1")
        finally:
            cur.close()
        assert result["valid"], result["issues"]
        assert result["stats"]["campaigns"] == 3
