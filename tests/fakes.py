"""Fake providers and seed data shared by the test suites."""

from datetime import date, timedelta

# Vector a question gets when it mentions a seeded campaign topic
CAMPAIGN_VECTOR = [1.0, 0.0, 0.0, 0.0]
UNRELATED_VECTOR = [0.0, 1.0, 0.0, 0.0]


class FakeEmbedder:
    """Keyword -> vector; everything else gets ``default``."""

    def __init__(self, mapping: dict[str, list[float]] | None = None, default=UNRELATED_VECTOR, error=None):
        self.mapping = mapping or {"campaign": CAMPAIGN_VECTOR}
        self.default = default
        self.error = error
        self.calls: list[list[str]] = []

    async def open(self):
        pass

    async def close(self):
        pass

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        if self.error:
            raise self.error
        vectors = []
        for text in texts:
            lowered = text.lower()
            vectors.append(next((v for k, v in self.mapping.items() if k in lowered), self.default))
        return vectors

    async def embed_one(self, text: str) -> list[float]:
        return (await self.embed([text]))[0]


class FakeGeneration:
    """Scripted completions and streams; records every request."""

    def __init__(self, completions: list[str] | None = None, chunks: list[str] | None = None, error=None):
        self.completions = list(completions or [])
        self.chunks = chunks if chunks is not None else ["Your campaigns ", "are doing well."]
        self.error = error
        self.complete_calls: list[list[dict]] = []
        self.stream_calls: list[list[dict]] = []
        self.closed_streams = 0

    async def open(self):
        pass

    async def close(self):
        pass

    async def complete(self, messages, temperature=0.7, max_tokens=1000) -> str:
        self.complete_calls.append(messages)
        if self.error:
            raise self.error
        if not self.completions:
            return "".join(self.chunks)
        return self.completions.pop(0)

    async def stream(self, messages, temperature=0.7, max_tokens=1000):
        self.stream_calls.append(messages)
        try:
            if self.error:
                raise self.error
            for chunk in self.chunks:
                yield chunk
        finally:
            self.closed_streams += 1


def metric_rows(tenant_id: str, today: date) -> list[dict]:
    """Three campaigns over the last 10 days."""
    campaigns = [
        ("amazon", "a1", "Spring Sale", 1000, 50, 25.0, 5, 120.0),
        ("amazon", "a2", "Brand Defense", 800, 80, 40.0, 8, 300.0),
        ("google", "g1", "Search Generic", 500, 10, 15.0, 1, 20.0),
    ]
    rows = []
    for days_back in range(10):
        day = today - timedelta(days=days_back)
        for platform, cid, name, imp, clk, cost, conv, sales in campaigns:
            rows.append(
                {
                    "tenant_id": tenant_id,
                    "platform": platform,
                    "campaign_id": cid,
                    "campaign_name": name,
                    "date": day,
                    "impressions": imp,
                    "clicks": clk,
                    "cost": cost,
                    "conversions": conv,
                    "sales": sales,
                }
            )
    return rows
