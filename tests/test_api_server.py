"""Tests for the HTTP API (FastAPI TestClient with container overrides)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from pharmapulse.api.server import build_container, create_app, status_for
from pharmapulse.application.search import DrugSearchService
from pharmapulse.config import Settings
from pharmapulse.container import ApplicationContainer
from pharmapulse.core.exceptions import (
    InvalidQueryError,
    NetworkError,
    NotFoundError,
    ServiceUnavailableError,
)


@pytest.fixture
def openfda():
    fake = MagicMock()
    fake.get_drug_details = AsyncMock(return_value={"success": True, "data": {"basicInfo": {}}})
    fake.get_adverse_events = AsyncMock(return_value={"success": True, "data": [], "meta": {}})
    fake.get_adverse_event_stats = AsyncMock(return_value={"success": True, "data": {"totalReports": 3}})
    fake.get_drug_recalls = AsyncMock(return_value={"success": True, "data": [], "meta": {}})
    fake.get_recent_recalls = AsyncMock(return_value={"success": True, "data": [], "meta": {}})
    fake.search_recalls_by_drug = AsyncMock(return_value={"success": True, "data": [], "meta": {}})
    fake.search_by_brand_name = AsyncMock(return_value={"success": True, "data": [], "meta": {}})
    fake.get_dangerous_drugs = AsyncMock(return_value={"success": True, "data": [], "meta": {}})
    return fake


@pytest.fixture
def rxnorm():
    fake = MagicMock()
    fake.get_spelling_suggestions = AsyncMock(return_value={"success": True, "data": ["tylenol"]})
    fake.get_drug_info = AsyncMock(return_value={"success": True, "data": {"rxcui": "161"}})
    fake.get_brand_names = AsyncMock(return_value={"success": True, "data": [{"rxcui": "2", "name": "Tylenol"}]})
    fake.get_related_names = AsyncMock(return_value={"success": True, "data": {"IN": []}})
    return fake


@pytest.fixture
def news():
    fake = MagicMock()
    payload = {"success": True, "data": [], "totalResults": 0, "page": 1, "pageSize": 20}
    fake.get_pharmaceutical_news = AsyncMock(return_value=payload)
    fake.search_news = AsyncMock(return_value=payload)
    fake.get_health_headlines = AsyncMock(return_value=payload)
    return fake


@pytest.fixture
def container(openfda, rxnorm, news, openfda_source, rxnorm_source, cache):
    c = ApplicationContainer()
    c.config.from_dict(Settings.from_env({}).to_dict())
    c.cache_store.override(providers.Object(cache))
    c.openfda.override(providers.Object(openfda))
    c.rxnorm.override(providers.Object(rxnorm))
    c.news.override(providers.Object(news))
    c.drug_search.override(providers.Object(DrugSearchService(openfda_source, rxnorm_source, cache)))
    return c


@pytest.fixture
def client(container):
    app = create_app(Settings.from_env({}), container)
    with TestClient(app) as test_client:
        yield test_client


# ============================================================
# Status mapping
# ============================================================


@pytest.mark.parametrize(
    "error,status",
    [
        (InvalidQueryError(""), 400),
        (NotFoundError("Drug", "x"), 404),
        (NetworkError("down"), 502),
        (ServiceUnavailableError(service="openFDA"), 502),
    ],
)
def test_status_for(error, status):
    assert status_for(error) == status


# ============================================================
# Service endpoints
# ============================================================


class TestHealth:
    def test_health(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["uptime"] >= 0
        assert "T" in body["timestamp"]

    def test_cache_stats(self, client):
        client.get("/api/drugs/search", params={"q": "tylenol"})
        body = client.get("/api/cache/stats").json()
        assert body["success"] is True
        assert body["data"]["keys"] == 1
        assert body["data"]["sets"] == 1

    def test_unknown_path(self, client):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found", "path": "/api/nope"}

    def test_cors(self, client):
        response = client.get("/api/health", headers={"Origin": "http://example.com"})
        assert response.headers["access-control-allow-origin"] in ("*", "http://example.com")


class TestLifespan:
    def test_shutdown_closes_only_built_clients(self):
        settings = Settings.from_env({})
        container = build_container(settings)
        with TestClient(create_app(settings, container)):
            openfda = container.openfda()
        assert container.http_clients() == [openfda]
        assert openfda._client.is_closed


# ============================================================
# Drug endpoints
# ============================================================


class TestDrugSearch:
    def test_merged_search(self, client):
        response = client.get("/api/drugs/search", params={"q": "tylenol", "limit": 10})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["query"] == "tylenol"
        assert body["totalResults"] == 2
        assert body["data"][0]["source"] == "openFDA"
        assert body["data"][1]["source"] == "RxNorm"

    @pytest.mark.parametrize("params", [{}, {"q": ""}, {"q": "   "}])
    def test_blank_query_is_400(self, client, params, openfda_source):
        response = client.get("/api/drugs/search", params=params)
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["category"] == "validation"
        openfda_source.search.assert_not_awaited()

    def test_bad_limit_is_400(self, client):
        response = client.get("/api/drugs/search", params={"q": "tylenol", "limit": "abc"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_upstream_failure_still_200(self, container, make_source, rxnorm_source, cache):
        container.drug_search.override(
            providers.Object(
                DrugSearchService(make_source(side_effect=NetworkError("down")), rxnorm_source, cache)
            )
        )
        with TestClient(create_app(Settings.from_env({}), container)) as c:
            body = c.get("/api/drugs/search", params={"q": "tylenol"}).json()
        assert body["success"] is True
        assert {d["source"] for d in body["data"]} == {"RxNorm"}

    def test_brand_search(self, client, openfda):
        assert client.get("/api/drugs/search/brand", params={"q": "Advil", "limit": 3}).status_code == 200
        openfda.search_by_brand_name.assert_awaited_once_with("Advil", 3)

    def test_brand_search_requires_q(self, client):
        assert client.get("/api/drugs/search/brand").status_code == 400


class TestOpenFDAEndpoints:
    def test_details(self, client, openfda):
        assert client.get("/api/drugs/details/tylenol").json()["success"] is True
        openfda.get_drug_details.assert_awaited_once_with("tylenol")

    def test_adverse_events(self, client, openfda):
        client.get("/api/drugs/adverse-events/tylenol", params={"limit": 5})
        openfda.get_adverse_events.assert_awaited_once_with("tylenol", 5)

    def test_adverse_stats(self, client):
        assert client.get("/api/drugs/adverse-stats/tylenol").json()["data"]["totalReports"] == 3

    def test_recalls(self, client, openfda):
        client.get("/api/drugs/recalls")
        openfda.get_drug_recalls.assert_awaited_once_with("", 10)

    def test_recent_recalls(self, client, openfda):
        client.get("/api/drugs/recalls/recent", params={"classification": "Class I"})
        openfda.get_recent_recalls.assert_awaited_once_with(limit=20, classification="Class I", status="")

    def test_recalls_by_drug(self, client, openfda):
        client.get("/api/drugs/recalls/search/tylenol", params={"limit": 4})
        openfda.search_recalls_by_drug.assert_awaited_once_with("tylenol", 4)

    def test_dangerous(self, client, openfda):
        client.get("/api/drugs/dangerous")
        openfda.get_dangerous_drugs.assert_awaited_once_with(20)

    def test_upstream_error_is_502(self, client, openfda):
        openfda.get_dangerous_drugs.side_effect = ServiceUnavailableError("HTTP 503", service="openFDA")
        response = client.get("/api/drugs/dangerous")
        assert response.status_code == 502
        assert response.json()["source"] == "openFDA"


class TestRxNormEndpoints:
    def test_suggestions(self, client, rxnorm):
        assert client.get("/api/drugs/suggestions", params={"q": "tyl"}).json()["data"] == ["tylenol"]
        rxnorm.get_spelling_suggestions.assert_awaited_once_with("tyl")

    @pytest.mark.parametrize("q", ["", "t"])
    def test_short_suggestion_term(self, client, rxnorm, q):
        assert client.get("/api/drugs/suggestions", params={"q": q}).json() == {"success": True, "data": []}
        rxnorm.get_spelling_suggestions.assert_not_awaited()

    def test_rxnorm_concept(self, client):
        body = client.get("/api/drugs/rxnorm/161").json()
        assert body == {
            "success": True,
            "data": {
                "info": {"rxcui": "161"},
                "brandNames": [{"rxcui": "2", "name": "Tylenol"}],
                "relatedNames": {"IN": []},
            },
        }

    def test_unknown_rxcui_is_404(self, client, rxnorm):
        rxnorm.get_drug_info.return_value = {"success": True, "data": None}
        response = client.get("/api/drugs/rxnorm/0")
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "RxNorm concept not found: 0",
            "category": "data",
        }


# ============================================================
# News endpoints
# ============================================================


class TestNewsEndpoints:
    def test_news(self, client, news):
        assert client.get("/api/news", params={"page": 2, "pageSize": 5}).status_code == 200
        news.get_pharmaceutical_news.assert_awaited_once_with(page=2, page_size=5, language="en")

    def test_search(self, client, news):
        client.get("/api/news/search", params={"q": "insulin", "sortBy": "publishedAt"})
        news.search_news.assert_awaited_once_with(
            "insulin", page=1, page_size=20, language="en", sort_by="publishedAt"
        )

    def test_search_requires_q(self, client, news):
        assert client.get("/api/news/search").status_code == 400
        news.search_news.assert_not_awaited()

    def test_headlines(self, client, news):
        client.get("/api/news/headlines", params={"country": "gb"})
        news.get_health_headlines.assert_awaited_once_with(page=1, page_size=20, country="gb")
