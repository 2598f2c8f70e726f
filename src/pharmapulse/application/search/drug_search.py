"""
Drug Search Service - merged openFDA + RxNorm search.

Flow of search_drugs():
1. Validate the term (blank -> InvalidQueryError, before any upstream call)
2. Return the cached merged result if present
3. Query both sources concurrently, each under its own timeout
4. Any source fault (exception, timeout, success=False) becomes an empty list
5. Merge and return; the merged result is cached only when both sources
   answered successfully

"No results" and "every source failed" look the same to the caller: both are
a successful response with zero records.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pharmapulse.core.async_utils import gather_settled, with_timeout
from pharmapulse.core.exceptions import (
    InvalidParameterError,
    InvalidQueryError,
    is_upstream_error,
)
from pharmapulse.infrastructure.cache import CacheStore, keys
from pharmapulse.infrastructure.cache.keys import derive_key
from pharmapulse.models.drug import DrugSearchResult, SourceResult

from .drug_merger import merge_drug_results

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 100
OPENFDA_TIMEOUT = 15.0
RXNORM_TIMEOUT = 10.0


class SearchAdapter(Protocol):
    """Anything with the adapter search signature."""

    async def search(self, term: str, limit: int) -> SourceResult: ...


class DrugSearchService:
    """
    Orchestrates the merged drug search.

    Usage:
        service = DrugSearchService(openfda_client, rxnorm_client, cache)
        result = await service.search_drugs("tylenol", limit=10)
    """

    def __init__(
        self,
        primary: SearchAdapter,
        secondary: SearchAdapter,
        cache: CacheStore | None = None,
        primary_timeout: float = OPENFDA_TIMEOUT,
        secondary_timeout: float = RXNORM_TIMEOUT,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self._cache = cache
        self._primary_timeout = primary_timeout
        self._secondary_timeout = secondary_timeout

    @staticmethod
    def _validate(query: str | None, limit: Any) -> tuple[str, int]:
        term = (query or "").strip()
        if not term:
            raise InvalidQueryError(query)
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_LIMIT:
            raise InvalidParameterError("limit", limit, f"an integer between 1 and {MAX_LIMIT}")
        return term, limit

    def _cache_get(self, key: str) -> DrugSearchResult | None:
        if self._cache is None:
            return None
        try:
            return self._cache.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed for {key}, searching upstream: {e}")
            return None

    def _cache_set(self, key: str, result: DrugSearchResult) -> None:
        if self._cache is None:
            return
        try:
            self._cache.set(key, result)
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")

    @staticmethod
    def _records(name: str, outcome: SourceResult | BaseException) -> tuple[list[dict[str, Any]], bool]:
        """
        Usable raw records from one settled source call.

        Returns:
            (records, ok) where ok is False if the source faulted
        """
        if isinstance(outcome, BaseException):
            if is_upstream_error(outcome):
                logger.warning(f"{name} search failed, continuing without it: {outcome}")
            else:
                logger.exception(f"Unexpected {name} search failure", exc_info=outcome)
            return [], False
        if not outcome.success:
            logger.info(f"{name} reported an unsuccessful search")
            return [], False
        return outcome.data or [], True

    async def search_drugs(self, query: str, limit: int = DEFAULT_LIMIT) -> DrugSearchResult:
        """
        Search both sources and merge the results.

        Args:
            query: Drug name (brand or generic)
            limit: Maximum records requested from each source

        Returns:
            DrugSearchResult; never fails because of an upstream fault

        Raises:
            InvalidQueryError: blank query
            InvalidParameterError: limit out of range
        """
        term, limit = self._validate(query, limit)
        key = derive_key(keys.DRUG_SEARCH, term, limit)

        cached = self._cache_get(key)
        if cached is not None:
            logger.debug(f"Drug search cache hit: {key}")
            return cached

        primary, secondary = await gather_settled(
            with_timeout(self._primary.search(term, limit), self._primary_timeout, "openFDA"),
            with_timeout(self._secondary.search(term, limit), self._secondary_timeout, "RxNorm"),
        )
        primary_records, primary_ok = self._records("openFDA", primary)
        secondary_records, secondary_ok = self._records("RxNorm", secondary)
        merged = merge_drug_results(primary_records, secondary_records)
        logger.info(f"Drug search '{term}': {len(merged)} merged results")

        result = DrugSearchResult(query=term, data=merged)
        if primary_ok and secondary_ok:
            self._cache_set(key, result)
        else:
            logger.info(f"Not caching degraded drug search for '{term}'")
        return result
