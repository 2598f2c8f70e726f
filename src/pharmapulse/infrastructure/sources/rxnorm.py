"""
RxNorm Integration

Drug naming from the NLM RxNav REST API: approximate term matching, brand and
ingredient relations, concept properties and spelling suggestions.

API Documentation: https://lhncbc.nlm.nih.gov/RxNav/APIs/RxNormAPIs.html

RxNorm is a secondary source. Every public method logs upstream failures and
returns an empty ``success: True`` envelope instead of raising; failures are
never cached.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pharmapulse.core.exceptions import PharmaPulseError
from pharmapulse.infrastructure.cache import CacheStore, keys
from pharmapulse.infrastructure.cache.keys import derive_key
from pharmapulse.infrastructure.sources.base_client import BaseAPIClient
from pharmapulse.models.drug import UNKNOWN_NAME, SourceResult

logger = logging.getLogger(__name__)

RXNORM_API_BASE = "https://rxnav.nlm.nih.gov/REST"

DEFAULT_TIMEOUT = 10.0
SUGGESTION_TIMEOUT = 5.0
SUGGESTION_TTL = 300.0


def _concepts(groups: list[dict[str, Any]] | None) -> list[tuple[str | None, dict[str, Any]]]:
    """Flatten RxNav conceptGroup lists into (tty, conceptProperties) pairs."""
    return [
        (group.get("tty"), prop)
        for group in groups or []
        for prop in group.get("conceptProperties") or []
    ]


class RxNormClient(BaseAPIClient):
    """
    RxNorm API client.

    Usage:
        async with RxNormClient(cache=cache) as client:
            result = await client.search("tylenol", limit=10)
            brands = await client.get_brand_names("161")
    """

    _service_name = "RxNorm"

    def __init__(
        self,
        cache: CacheStore | None = None,
        cache_ttl: float | None = 3600.0,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        super().__init__(
            base_url=RXNORM_API_BASE,
            timeout=timeout,
            headers={"Accept": "application/json"},
            cache=cache,
            cache_ttl=cache_ttl,
        )

    async def _safe(
        self,
        operation: str,
        key: str,
        fetch: Callable[[], Awaitable[dict[str, Any]]],
        empty: Any,
        ttl: float | None = None,
    ) -> dict[str, Any]:
        try:
            return await self._cached(key, fetch, ttl)
        except PharmaPulseError as e:
            logger.error(f"RxNorm {operation} error: {e}")
            return {"success": True, "data": empty}

    async def _get(self, path: str, params: dict[str, Any] | None = None, timeout: float | None = None) -> dict[str, Any]:
        data = await self._make_request(path, params=params, timeout=timeout)
        return data if isinstance(data, dict) else {}

    async def _approximate(self, term: str, max_entries: int) -> dict[str, Any]:
        async def fetch() -> dict[str, Any]:
            data = await self._get("/approximateTerm.json", {"term": term, "maxEntries": max_entries})
            candidates = (data.get("approximateGroup") or {}).get("candidate") or []
            return {
                "success": True,
                "data": [
                    {
                        "rxcui": c.get("rxcui"),
                        "name": c.get("name") or UNKNOWN_NAME,
                        "score": c.get("score"),
                        "rank": c.get("rank"),
                    }
                    for c in candidates
                ],
            }

        return await self._cached(derive_key(keys.RXNORM_APPROX, term, max_entries), fetch)

    async def approximate_search(self, term: str, max_entries: int = 10) -> dict[str, Any]:
        """
        Fuzzy term match.

        Returns:
            {"success": True, "data": [{"rxcui", "name", "score", "rank"}, ...]}
        """
        try:
            return await self._approximate(term, max_entries)
        except PharmaPulseError as e:
            logger.error(f"RxNorm approximate search error: {e}")
            return {"success": True, "data": []}

    async def search(self, term: str, limit: int = 10) -> SourceResult:
        """
        Search adapter used by the merged drug search.

        Unlike approximate_search(), upstream errors propagate so the caller
        can tell an outage from an empty match.
        """
        result = await self._approximate(term, limit)
        return SourceResult(success=True, data=result["data"])

    async def search_drug(self, drug_name: str) -> dict[str, Any]:
        """Exact-name concept lookup across all term types."""

        async def fetch() -> dict[str, Any]:
            data = await self._get("/drugs.json", {"name": drug_name})
            groups = (data.get("drugGroup") or {}).get("conceptGroup")
            return {
                "success": True,
                "data": [
                    {
                        "rxcui": prop.get("rxcui"),
                        "name": prop.get("name"),
                        "synonym": prop.get("synonym"),
                        "type": tty,
                    }
                    for tty, prop in _concepts(groups)
                ],
            }

        return await self._safe("search", derive_key(keys.RXNORM_SEARCH, drug_name), fetch, [])

    async def get_related_names(self, rxcui: str) -> dict[str, Any]:
        """All related concepts grouped by term type, e.g. {"BN": [...], "IN": [...]}."""

        async def fetch() -> dict[str, Any]:
            data = await self._get(f"/rxcui/{rxcui}/allrelated.json")
            related: dict[str, list[dict[str, Any]]] = {}
            for group in (data.get("allRelatedGroup") or {}).get("conceptGroup") or []:
                props = group.get("conceptProperties")
                if props:
                    related[group.get("tty")] = [
                        {"rxcui": p.get("rxcui"), "name": p.get("name")} for p in props
                    ]
            return {"success": True, "data": related}

        return await self._safe("related names", derive_key(keys.RXNORM_RELATED, rxcui), fetch, {})

    async def get_brand_names(self, rxcui: str) -> dict[str, Any]:
        """Brand name (BN) concepts related to an RxCUI."""

        async def fetch() -> dict[str, Any]:
            data = await self._get(f"/rxcui/{rxcui}/related.json", {"tty": "BN"})
            groups = (data.get("relatedGroup") or {}).get("conceptGroup")
            return {
                "success": True,
                "data": [
                    {"rxcui": prop.get("rxcui"), "name": prop.get("name")}
                    for _, prop in _concepts(groups)
                ],
            }

        return await self._safe("brand names", derive_key(keys.RXNORM_BRANDS, rxcui), fetch, [])

    async def get_drug_info(self, rxcui: str) -> dict[str, Any]:
        """Concept properties plus active ingredient names."""

        async def fetch() -> dict[str, Any]:
            data = await self._get(f"/rxcui/{rxcui}/properties.json")
            properties = data.get("properties") or {}
            if not properties:
                return {"success": True, "data": None}

            ingredients: list[str] = []
            try:
                related = await self._get(f"/rxcui/{rxcui}/related.json", {"tty": "IN"})
                groups = (related.get("relatedGroup") or {}).get("conceptGroup")
                ingredients = [prop.get("name") for _, prop in _concepts(groups)]
            except PharmaPulseError as e:
                logger.info(f"No ingredients found for {rxcui}: {e}")

            return {
                "success": True,
                "data": {
                    "rxcui": properties.get("rxcui"),
                    "name": properties.get("name"),
                    "synonym": properties.get("synonym"),
                    "type": properties.get("tty"),
                    "ingredients": ingredients,
                },
            }

        return await self._safe("drug info", derive_key(keys.RXNORM_INFO, rxcui), fetch, None)

    async def get_spelling_suggestions(self, term: str) -> dict[str, Any]:
        """Autocomplete suggestions for a partial or misspelled name."""

        async def fetch() -> dict[str, Any]:
            data = await self._get("/spellingsuggestions.json", {"name": term}, timeout=SUGGESTION_TIMEOUT)
            suggestions = ((data.get("suggestionGroup") or {}).get("suggestionList") or {}).get("suggestion")
            return {"success": True, "data": suggestions or []}

        return await self._safe(
            "suggestions", derive_key(keys.RXNORM_SUGGEST, term), fetch, [], ttl=SUGGESTION_TTL
        )
