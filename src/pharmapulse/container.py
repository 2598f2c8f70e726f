"""
Application DI Container (dependency-injector).

Owns the process-wide CacheStore and the upstream clients that share it.

Usage::

    from pharmapulse.container import ApplicationContainer

    container = ApplicationContainer()
    container.config.from_dict(Settings.from_env().to_dict())

    search = container.drug_search()

    # In tests: override any provider:
    container.openfda.override(providers.Object(mock_openfda))
"""

from __future__ import annotations

import logging

from dependency_injector import containers, providers

logger = logging.getLogger(__name__)


def _create_cache_store(default_ttl: float, max_entries: int) -> object:
    """Lazy factory for CacheStore (avoids top-level import)."""
    from pharmapulse.infrastructure.cache import CacheStore

    return CacheStore(default_ttl=default_ttl, max_entries=max_entries)


def _create_openfda(cache: object, cache_ttl: float, timeout: float, registry: list) -> object:
    from pharmapulse.infrastructure.sources import OpenFDAClient

    client = OpenFDAClient(cache=cache, cache_ttl=cache_ttl, timeout=timeout)
    registry.append(client)
    return client


def _create_rxnorm(cache: object, cache_ttl: float, registry: list) -> object:
    from pharmapulse.infrastructure.sources import RxNormClient

    client = RxNormClient(cache=cache, cache_ttl=cache_ttl)
    registry.append(client)
    return client


def _create_news(api_key: str | None, cache: object, cache_ttl: float, timeout: float, registry: list) -> object:
    from pharmapulse.infrastructure.sources import NewsClient

    client = NewsClient(api_key=api_key or None, cache=cache, cache_ttl=cache_ttl, timeout=timeout)
    registry.append(client)
    return client


def _create_drug_search(openfda: object, rxnorm: object, cache: object) -> object:
    from pharmapulse.application.search import DrugSearchService

    return DrugSearchService(openfda, rxnorm, cache)


class ApplicationContainer(containers.DeclarativeContainer):
    """Central DI container for the PharmaPulse application.

    - ``cache_store``: the single in-memory TTL cache
    - ``openfda`` / ``rxnorm`` / ``news``: upstream clients
    - ``drug_search``: merged drug search use case
    - ``http_clients``: upstream clients built so far, closed on shutdown
    """

    config = providers.Configuration()

    http_clients = providers.Singleton(list)

    cache_store = providers.Singleton(
        _create_cache_store,
        default_ttl=config.cache_ttl_default,
        max_entries=config.cache_max_entries,
    )

    openfda = providers.Singleton(
        _create_openfda,
        cache=cache_store,
        cache_ttl=config.cache_ttl_drugs,
        timeout=config.http_timeout,
        registry=http_clients,
    )

    rxnorm = providers.Singleton(
        _create_rxnorm,
        cache=cache_store,
        cache_ttl=config.cache_ttl_drugs,
        registry=http_clients,
    )

    news = providers.Singleton(
        _create_news,
        api_key=config.news_api_key,
        cache=cache_store,
        cache_ttl=config.cache_ttl_news,
        timeout=config.http_timeout,
        registry=http_clients,
    )

    drug_search = providers.Singleton(
        _create_drug_search,
        openfda=openfda,
        rxnorm=rxnorm,
        cache=cache_store,
    )


__all__ = ["ApplicationContainer"]
