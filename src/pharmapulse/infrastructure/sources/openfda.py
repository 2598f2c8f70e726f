"""
openFDA Integration

Drug labels, adverse event reports (FAERS) and enforcement reports (recalls)
from the FDA open data API.

API Documentation: https://open.fda.gov/apis/drug/

openFDA answers HTTP 404 when a search has no matches; that is treated as an
empty result, not an error. Other failures raise from the core exception
hierarchy.
"""

from __future__ import annotations

import logging
from typing import Any

from pharmapulse.core.async_utils import gather_settled
from pharmapulse.infrastructure.cache import CacheStore, keys
from pharmapulse.infrastructure.cache.keys import derive_key
from pharmapulse.infrastructure.sources.base_client import _CONTINUE, BaseAPIClient
from pharmapulse.models.drug import UNAVAILABLE, SourceResult

logger = logging.getLogger(__name__)

OPENFDA_API_BASE = "https://api.fda.gov"
LABEL_PATH = "/drug/label.json"
EVENT_PATH = "/drug/event.json"
ENFORCEMENT_PATH = "/drug/enforcement.json"

DEFAULT_TIMEOUT = 15.0
SUBQUERY_TIMEOUT = 10.0
COUNT_TIMEOUT = 20.0

RECALL_CLASSIFICATIONS: dict[str, str] = {
    "Class I": "Dangerous: may cause serious health problems or death",
    "Class II": "Moderate: may cause temporary or reversible health problems",
    "Class III": "Low: unlikely to cause adverse health consequences",
}

HIGH_RISK_REPORTS = 1000
MEDIUM_RISK_REPORTS = 500


def _first(value: Any, default: Any = UNAVAILABLE) -> Any:
    """First element of an openFDA list field, or default."""
    if isinstance(value, list):
        return value[0] if value else default
    return default if value in (None, "") else value


def _phrase(term: str) -> str:
    """Quote a user term for the openFDA search syntax."""
    return '"' + term.replace('"', "").strip() + '"'


def classification_description(classification: str | None) -> str:
    """Human readable meaning of a recall classification."""
    return RECALL_CLASSIFICATIONS.get(classification or "", "Unspecified")


def risk_level(report_count: int) -> str:
    if report_count > HIGH_RISK_REPORTS:
        return "high"
    if report_count > MEDIUM_RISK_REPORTS:
        return "medium"
    return "low"


class OpenFDAClient(BaseAPIClient):
    """
    openFDA API client.

    Usage:
        async with OpenFDAClient(cache=cache) as client:
            result = await client.search("ibuprofen", limit=10)
    """

    _service_name = "openFDA"

    def __init__(
        self,
        cache: CacheStore | None = None,
        cache_ttl: float | None = 3600.0,
        timeout: float = DEFAULT_TIMEOUT,
        api_key: str | None = None,
    ):
        super().__init__(
            base_url=OPENFDA_API_BASE,
            timeout=timeout,
            headers={"Accept": "application/json"},
            cache=cache,
            cache_ttl=cache_ttl,
        )
        self._api_key = api_key

    def _handle_expected_status(self, response: Any) -> Any:
        if response.status_code == 404:
            return {"results": [], "meta": {}}
        return _CONTINUE

    async def _query(
        self,
        path: str,
        params: dict[str, Any],
        timeout: float | None = None,
    ) -> dict[str, Any]:
        if self._api_key:
            params = {**params, "api_key": self._api_key}
        data = await self._make_request(path, params=params, timeout=timeout)
        return data if isinstance(data, dict) else {}

    # =========================================================================
    # Drug labels
    # =========================================================================

    async def search_drug_labels(self, query: str, limit: int = 10) -> dict[str, Any]:
        """
        Search drug labels by brand, generic or substance name.

        Returns:
            {"success": True, "data": [raw label, ...], "meta": {...}}
        """

        async def fetch() -> dict[str, Any]:
            term = _phrase(query)
            data = await self._query(
                LABEL_PATH,
                {
                    "search": (
                        f"openfda.brand_name:{term} OR openfda.generic_name:{term} "
                        f"OR openfda.substance_name:{term}"
                    ),
                    "limit": limit,
                },
            )
            return {
                "success": True,
                "data": data.get("results") or [],
                "meta": data.get("meta") or {},
            }

        return await self._cached(derive_key(keys.DRUG_LABEL, query, limit), fetch)

    async def search(self, term: str, limit: int = 10) -> SourceResult:
        """Search adapter used by the merged drug search."""
        result = await self.search_drug_labels(term, limit)
        return SourceResult(success=True, data=result["data"], meta=result["meta"])

    async def search_by_brand_name(self, brand_name: str, limit: int = 10) -> dict[str, Any]:
        """Search labels by brand name only, returning flattened records."""

        async def fetch() -> dict[str, Any]:
            data = await self._query(
                LABEL_PATH,
                {"search": f"openfda.brand_name:{_phrase(brand_name)}", "limit": limit},
            )
            drugs = []
            for label in data.get("results") or []:
                openfda = label.get("openfda") or {}
                drugs.append({
                    "id": label.get("id") or UNAVAILABLE,
                    "brandName": _first(openfda.get("brand_name")),
                    "genericName": _first(openfda.get("generic_name")),
                    "manufacturer": _first(openfda.get("manufacturer_name")),
                    "productType": _first(openfda.get("product_type")),
                    "route": _first(openfda.get("route")),
                    "substanceName": _first(openfda.get("substance_name")),
                    "dosageForm": _first(openfda.get("dosage_form")),
                })
            return {"success": True, "data": drugs, "meta": data.get("meta") or {}}

        return await self._cached(derive_key(keys.BRAND_SEARCH, brand_name, limit), fetch)

    async def get_drug_details(self, drug_name: str) -> dict[str, Any]:
        """
        Get label sections and recent adverse events for one drug.

        The label and adverse-event queries run concurrently. A failed
        adverse-event query leaves that list empty; a failed label query
        propagates.
        """

        async def fetch() -> dict[str, Any]:
            term = _phrase(drug_name)
            label_resp, events_resp = await gather_settled(
                self._query(
                    LABEL_PATH,
                    {"search": f"openfda.brand_name:{term} OR openfda.generic_name:{term}", "limit": 1},
                ),
                self._query(
                    EVENT_PATH,
                    {"search": f"patient.drug.medicinalproduct:{term}", "limit": 5},
                    timeout=SUBQUERY_TIMEOUT,
                ),
            )
            if isinstance(label_resp, Exception):
                raise label_resp
            if isinstance(events_resp, Exception):
                logger.info(f"No adverse events available for {drug_name}: {events_resp}")
                events_resp = {}

            labels = label_resp.get("results") or []
            if not labels:
                return {"success": True, "data": None}
            label = labels[0]
            openfda = label.get("openfda") or {}

            return {
                "success": True,
                "data": {
                    "basicInfo": {
                        "brandName": _first(openfda.get("brand_name")),
                        "genericName": _first(openfda.get("generic_name")),
                        "manufacturer": _first(openfda.get("manufacturer_name")),
                        "productType": _first(openfda.get("product_type")),
                        "route": _first(openfda.get("route")),
                        "substanceName": _first(openfda.get("substance_name")),
                    },
                    "indications": _first(label.get("indications_and_usage")),
                    "dosage": _first(label.get("dosage_and_administration")),
                    "warnings": _first(label.get("warnings"), None)
                    or _first(label.get("warnings_and_cautions")),
                    "contraindications": _first(label.get("contraindications")),
                    "adverseReactions": _first(label.get("adverse_reactions")),
                    "drugInteractions": _first(label.get("drug_interactions")),
                    "pregnancy": _first(label.get("pregnancy"), None)
                    or _first(label.get("pregnancy_or_breast_feeding")),
                    "storage": _first(label.get("storage_and_handling")),
                    "adverseEvents": [
                        {
                            "reactions": [
                                r.get("reactionmeddrapt")
                                for r in (event.get("patient") or {}).get("reaction") or []
                            ],
                            "serious": event.get("serious"),
                            "receiveDate": event.get("receivedate"),
                        }
                        for event in events_resp.get("results") or []
                    ],
                },
            }

        return await self._cached(derive_key(keys.DRUG_DETAILS, drug_name), fetch)

    # =========================================================================
    # Adverse events
    # =========================================================================

    async def get_adverse_events(self, drug_name: str, limit: int = 10) -> dict[str, Any]:
        """Adverse event reports that mention the drug."""

        async def fetch() -> dict[str, Any]:
            data = await self._query(
                EVENT_PATH,
                {"search": f"patient.drug.medicinalproduct:{_phrase(drug_name)}", "limit": limit},
            )
            return {
                "success": True,
                "data": [self._format_event(e) for e in data.get("results") or []],
                "meta": data.get("meta") or {},
            }

        return await self._cached(derive_key(keys.ADVERSE_EVENTS, drug_name, limit), fetch)

    @staticmethod
    def _format_event(event: dict[str, Any]) -> dict[str, Any]:
        patient = event.get("patient") or {}
        return {
            "safetyReportId": event.get("safetyreportid"),
            "receiveDate": event.get("receivedate"),
            "serious": event.get("serious"),
            "seriousnessDescription": {
                "death": event.get("seriousnessdeath"),
                "lifeThreatening": event.get("seriousnesslifethreatening"),
                "hospitalization": event.get("seriousnesshospitalization"),
                "disability": event.get("seriousnessdisabling"),
            },
            "reactions": [
                {"name": r.get("reactionmeddrapt"), "outcome": r.get("reactionoutcome")}
                for r in patient.get("reaction") or []
            ],
            "drugs": [
                {
                    "name": d.get("medicinalproduct"),
                    "indication": d.get("drugindication"),
                    "role": d.get("drugcharacterization"),
                }
                for d in patient.get("drug") or []
            ],
        }

    async def get_adverse_event_stats(self, drug_name: str) -> dict[str, Any]:
        """Top reactions and report counts for a drug."""

        async def fetch() -> dict[str, Any]:
            term = _phrase(drug_name)
            counts, serious = await gather_settled(
                self._query(
                    EVENT_PATH,
                    {
                        "search": f"patient.drug.medicinalproduct:{term}",
                        "count": "patient.reaction.reactionmeddrapt.exact",
                    },
                ),
                self._query(
                    EVENT_PATH,
                    {"search": f"patient.drug.medicinalproduct:{term} AND serious:1", "limit": 1},
                    timeout=SUBQUERY_TIMEOUT,
                ),
            )
            if isinstance(counts, Exception):
                raise counts
            serious_count = 0
            if isinstance(serious, Exception):
                logger.info(f"Could not get serious report count for {drug_name}: {serious}")
            else:
                serious_count = ((serious.get("meta") or {}).get("results") or {}).get("total", 0)

            return {
                "success": True,
                "data": {
                    "topReactions": [
                        {"reaction": r.get("term"), "count": r.get("count")}
                        for r in (counts.get("results") or [])[:10]
                    ],
                    "totalReports": ((counts.get("meta") or {}).get("results") or {}).get("total", 0),
                    "seriousReports": serious_count,
                },
            }

        return await self._cached(derive_key(keys.ADVERSE_STATS, drug_name), fetch)

    async def get_dangerous_drugs(self, limit: int = 20) -> dict[str, Any]:
        """Products most often named in fatal or life-threatening reports."""

        async def fetch() -> dict[str, Any]:
            data = await self._query(
                EVENT_PATH,
                {
                    "search": "serious:1 AND (seriousnessdeath:1 OR seriousnesslifethreatening:1)",
                    "count": "patient.drug.medicinalproduct.exact",
                    "limit": limit,
                },
                timeout=COUNT_TIMEOUT,
            )
            return {
                "success": True,
                "data": [
                    {
                        "drugName": item.get("term"),
                        "reportCount": item.get("count", 0),
                        "riskLevel": risk_level(item.get("count", 0)),
                    }
                    for item in data.get("results") or []
                ],
                "meta": data.get("meta") or {},
            }

        return await self._cached(derive_key(keys.DANGEROUS_DRUGS, limit), fetch)

    # =========================================================================
    # Recalls
    # =========================================================================

    @staticmethod
    def _format_recall(recall: dict[str, Any], *, detailed: bool = False) -> dict[str, Any]:
        formatted = {
            "recallNumber": recall.get("recall_number"),
            "productDescription": recall.get("product_description"),
            "reason": recall.get("reason_for_recall"),
            "classification": recall.get("classification"),
            "classificationDescription": classification_description(recall.get("classification")),
            "status": recall.get("status"),
            "recallInitiationDate": recall.get("recall_initiation_date"),
            "recallingFirm": recall.get("recalling_firm"),
            "city": recall.get("city"),
            "state": recall.get("state"),
            "country": recall.get("country"),
        }
        if detailed:
            formatted.update({
                "terminationDate": recall.get("termination_date"),
                "voluntaryMandated": recall.get("voluntary_mandated"),
                "distributionPattern": recall.get("distribution_pattern"),
                "productQuantity": recall.get("product_quantity"),
            })
        return formatted

    async def get_drug_recalls(self, query: str = "", limit: int = 10) -> dict[str, Any]:
        """Enforcement reports, optionally filtered by product or reason."""

        async def fetch() -> dict[str, Any]:
            params: dict[str, Any] = {"limit": limit}
            if query:
                term = _phrase(query)
                params["search"] = f"product_description:{term} OR reason_for_recall:{term}"
            data = await self._query(ENFORCEMENT_PATH, params)
            return {
                "success": True,
                "data": [self._format_recall(r) for r in data.get("results") or []],
                "meta": data.get("meta") or {},
            }

        return await self._cached(derive_key(keys.DRUG_RECALLS, query, limit), fetch)

    async def get_recent_recalls(
        self,
        limit: int = 20,
        classification: str = "",
        status: str = "Ongoing",
    ) -> dict[str, Any]:
        """Newest enforcement reports, filtered by status and classification."""

        async def fetch() -> dict[str, Any]:
            clauses = []
            if status:
                clauses.append(f"status:{_phrase(status)}")
            if classification:
                clauses.append(f"classification:{_phrase(classification)}")
            params: dict[str, Any] = {"limit": limit, "sort": "recall_initiation_date:desc"}
            if clauses:
                params["search"] = " AND ".join(clauses)
            data = await self._query(ENFORCEMENT_PATH, params)
            return {
                "success": True,
                "data": [self._format_recall(r, detailed=True) for r in data.get("results") or []],
                "meta": data.get("meta") or {},
            }

        return await self._cached(derive_key(keys.RECENT_RECALLS, limit, classification, status), fetch)

    async def search_recalls_by_drug(self, drug_name: str, limit: int = 10) -> dict[str, Any]:
        """Enforcement reports for one drug, newest first."""

        async def fetch() -> dict[str, Any]:
            term = _phrase(drug_name)
            data = await self._query(
                ENFORCEMENT_PATH,
                {
                    "search": (
                        f"product_description:{term} OR openfda.brand_name:{term} "
                        f"OR openfda.generic_name:{term}"
                    ),
                    "limit": limit,
                    "sort": "recall_initiation_date:desc",
                },
            )
            return {
                "success": True,
                "data": [self._format_recall(r) for r in data.get("results") or []],
                "meta": data.get("meta") or {},
            }

        return await self._cached(derive_key(keys.RECALL_SEARCH, drug_name, limit), fetch)


__all__ = [
    "OpenFDAClient",
    "classification_description",
    "risk_level",
]
