"""
NewsAPI Integration

Pharmaceutical and health news from https://newsapi.org.

When no API key is configured, or NewsAPI rejects the key (HTTP 401/426),
the client answers with a small set of bundled articles flagged
``isMock: True`` so the news endpoints stay usable in development. Mock
responses are never cached.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from pharmapulse.core.exceptions import APIError
from pharmapulse.infrastructure.cache import CacheStore, keys
from pharmapulse.infrastructure.cache.keys import derive_key
from pharmapulse.infrastructure.sources.base_client import _CONTINUE, BaseAPIClient

logger = logging.getLogger(__name__)

NEWS_API_BASE = "https://newsapi.org/v2"
PLACEHOLDER_API_KEY = "your_newsapi_key_here"

PHARMA_KEYWORDS = [
    "pharmaceutical",
    "FDA approval",
    "clinical trial",
    "drug discovery",
    "biotech",
    "medicine research",
    "vaccine",
    "drug recall",
    "pharmacy",
]
SEARCH_CONTEXT = "(pharmaceutical OR medicine OR drug OR FDA)"

DEFAULT_PAGE_SIZE = 20

# (id, title, description, content, author, source id, source name, slug, image, hours ago)
_MOCK_ARTICLES = [
    (
        "mock1",
        "FDA Approves New Cancer Treatment Drug",
        "The FDA has approved a groundbreaking new cancer treatment that shows promising results in clinical trials.",
        "The U.S. Food and Drug Administration announced today the approval of a new targeted therapy for advanced cancer patients...",
        "Medical News Team", "medical-news", "Medical News Today", "fda-cancer-drug",
        "photo-1584308666744-24d5c474f2ae", 2,
    ),
    (
        "mock2",
        "New Clinical Trial Shows Promise for Alzheimer's Treatment",
        "Researchers announce positive results from Phase 3 clinical trials of a new Alzheimer's drug.",
        "A major pharmaceutical company has released data showing significant cognitive improvements in patients...",
        "Health Reporter", "pharma-times", "Pharma Times", "alzheimers-trial",
        "photo-1576091160550-2173dba999ef", 5,
    ),
    (
        "mock3",
        "Breakthrough in Antibiotic Resistance Research",
        "Scientists develop new compound that can overcome antibiotic-resistant bacteria.",
        "In a major breakthrough, researchers have discovered a novel compound that effectively targets...",
        "Science Desk", "science-daily", "Science Daily", "antibiotic-research",
        "photo-1582719471384-894fbb16e074", 8,
    ),
    (
        "mock4",
        "Global Vaccine Distribution Update",
        "WHO reports significant progress in global vaccine distribution efforts.",
        "The World Health Organization has announced that global vaccine distribution has reached...",
        "Global Health Team", "who-news", "WHO News", "vaccine-update",
        "photo-1615631648086-325025c9e51e", 12,
    ),
    (
        "mock5",
        "Pharmaceutical Industry Embraces AI for Drug Discovery",
        "Major pharmaceutical companies are investing heavily in AI-driven drug discovery platforms.",
        "The pharmaceutical industry is undergoing a transformation as artificial intelligence...",
        "Tech Health Writer", "tech-health", "Tech Health News", "ai-drug-discovery",
        "photo-1507003211169-0a1dd7228f2d", 24,
    ),
    (
        "mock6",
        "New Guidelines for Diabetes Medication Released",
        "Medical associations update treatment guidelines for Type 2 diabetes management.",
        "Healthcare organizations have released updated guidelines for the management of Type 2 diabetes...",
        "Clinical Editor", "diabetes-care", "Diabetes Care Journal", "diabetes-guidelines",
        "photo-1579684385127-1ef15d508118", 48,
    ),
]


class NewsKeyRejectedError(APIError):
    """NewsAPI refused the configured key (HTTP 401 or 426)."""


# =============================================================================
# Formatting
# =============================================================================


def _parse_date(value: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def format_relative_date(value: str | None, now: datetime | None = None) -> str:
    """
    Human readable age of a timestamp.

    Under an hour: minutes; under a day: hours; under a week: days;
    otherwise the calendar date, e.g. "March 5, 2026".
    """
    if not value:
        return "Unknown"
    published = _parse_date(value)
    if published is None:
        return "Unknown"

    now = now or datetime.now(UTC)
    minutes = int(abs((now - published).total_seconds()) // 60)
    hours, days = minutes // 60, minutes // (60 * 24)

    if minutes < 60:
        return f"{minutes} minute{'' if minutes == 1 else 's'} ago"
    if hours < 24:
        return f"{hours} hour{'' if hours == 1 else 's'} ago"
    if days < 7:
        return f"{days} day{'' if days == 1 else 's'} ago"
    return f"{published:%B} {published.day}, {published.year}"


def article_id(article: dict[str, Any]) -> str:
    digest = hashlib.md5(f"{article.get('title')}-{article.get('publishedAt')}".encode(), usedforsecurity=False)
    return digest.hexdigest()[:12]


def format_article(article: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Map a raw NewsAPI article onto the response shape."""
    source = article.get("source") or {}
    return {
        "id": article_id(article),
        "title": article.get("title") or "Untitled",
        "description": article.get("description") or "No description available",
        "content": article.get("content") or "",
        "author": article.get("author") or "Unknown",
        "source": {"id": source.get("id"), "name": source.get("name") or "Unknown source"},
        "url": article.get("url"),
        "imageUrl": article.get("urlToImage"),
        "publishedAt": article.get("publishedAt"),
        "formattedDate": format_relative_date(article.get("publishedAt"), now),
    }


def mock_news(query: str = "", now: datetime | None = None) -> dict[str, Any]:
    """Bundled articles, filtered by a case-insensitive title/description match."""
    now = now or datetime.now(UTC)
    articles = []
    for (art_id, title, description, content, author, source_id, source_name,
         slug, image, hours_ago) in _MOCK_ARTICLES:
        published = (now - timedelta(hours=hours_ago)).isoformat().replace("+00:00", "Z")
        articles.append({
            "id": art_id,
            "title": title,
            "description": description,
            "content": content,
            "author": author,
            "source": {"id": source_id, "name": source_name},
            "url": f"https://example.com/{slug}",
            "imageUrl": f"https://images.unsplash.com/{image}?w=400",
            "publishedAt": published,
            "formattedDate": format_relative_date(published, now),
        })

    if query:
        needle = query.lower()
        articles = [
            a for a in articles
            if needle in a["title"].lower() or needle in a["description"].lower()
        ]

    return {
        "success": True,
        "data": articles,
        "totalResults": len(articles),
        "page": 1,
        "pageSize": DEFAULT_PAGE_SIZE,
        "isMock": True,
    }


# =============================================================================
# Client
# =============================================================================


class NewsClient(BaseAPIClient):
    """
    NewsAPI client.

    Usage:
        async with NewsClient(api_key=key, cache=cache) as client:
            news = await client.get_pharmaceutical_news(page=1)
    """

    _service_name = "NewsAPI"

    def __init__(
        self,
        api_key: str | None = None,
        cache: CacheStore | None = None,
        cache_ttl: float | None = 1800.0,
        timeout: float = 15.0,
    ):
        super().__init__(
            base_url=NEWS_API_BASE,
            timeout=timeout,
            headers={"Accept": "application/json"},
            cache=cache,
            cache_ttl=cache_ttl,
        )
        self._api_key = api_key

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key) and self._api_key != PLACEHOLDER_API_KEY

    def _handle_expected_status(self, response: Any) -> Any:
        if response.status_code in (401, 426):
            raise NewsKeyRejectedError(f"NewsAPI: HTTP {response.status_code}")
        return _CONTINUE

    async def _articles(self, path: str, params: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
        data = await self._make_request(path, params={**params, "apiKey": self._api_key})
        data = data if isinstance(data, dict) else {}
        return {
            "success": True,
            "data": [format_article(a) for a in data.get("articles") or []],
            "totalResults": data.get("totalResults") or 0,
            **extra,
        }

    async def _fetch_or_mock(self, key: str, fetch: Any, query: str = "") -> dict[str, Any]:
        if not self.has_api_key:
            logger.warning("NewsAPI key not configured, using mock data")
            return mock_news(query)
        try:
            return await self._cached(key, fetch)
        except NewsKeyRejectedError as e:
            logger.warning(f"{e}, using mock data")
            return mock_news(query)

    async def get_pharmaceutical_news(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        language: str = "en",
        sort_by: str = "publishedAt",
    ) -> dict[str, Any]:
        """Latest articles matching any pharmaceutical keyword."""

        async def fetch() -> dict[str, Any]:
            return await self._articles(
                "/everything",
                {
                    "q": " OR ".join(PHARMA_KEYWORDS),
                    "language": language,
                    "sortBy": sort_by,
                    "page": page,
                    "pageSize": page_size,
                },
                {"page": page, "pageSize": page_size},
            )

        key = derive_key(keys.NEWS_PHARMA, page, page_size, language, sort_by)
        return await self._fetch_or_mock(key, fetch)

    async def search_news(
        self,
        query: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        language: str = "en",
        sort_by: str = "relevancy",
    ) -> dict[str, Any]:
        """Search articles; the query is narrowed to pharmaceutical context."""

        async def fetch() -> dict[str, Any]:
            return await self._articles(
                "/everything",
                {
                    "q": f"{query} AND {SEARCH_CONTEXT}",
                    "language": language,
                    "sortBy": sort_by,
                    "page": page,
                    "pageSize": page_size,
                },
                {"page": page, "pageSize": page_size, "query": query},
            )

        key = derive_key(keys.NEWS_SEARCH, query, page, page_size, language, sort_by)
        return await self._fetch_or_mock(key, fetch, query)

    async def get_health_headlines(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        country: str = "us",
    ) -> dict[str, Any]:
        """Top headlines in the health category."""

        async def fetch() -> dict[str, Any]:
            return await self._articles(
                "/top-headlines",
                {"category": "health", "country": country, "page": page, "pageSize": page_size},
                {"page": page, "pageSize": page_size},
            )

        key = derive_key(keys.NEWS_HEADLINES, country, page, page_size)
        return await self._fetch_or_mock(key, fetch)
