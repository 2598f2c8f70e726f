"""
Drug endpoints: merged search, openFDA label/event/recall queries and RxNorm
lookups, mounted under /api/drugs.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from ..container import ApplicationContainer
from ..core.async_utils import gather_settled
from ..core.exceptions import InvalidQueryError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["drugs"])

MIN_SUGGESTION_LENGTH = 2


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def _require(value: str | None, field: str = "q") -> str:
    term = (value or "").strip()
    if not term:
        raise InvalidQueryError(value, f"'{field}' is required")
    return term


@router.get("/search")
async def search_drugs(
    q: str = "",
    limit: int = Query(default=10, ge=1, le=100),
    container: ApplicationContainer = Depends(get_container),
):
    """Merged openFDA + RxNorm drug search."""
    result = await container.drug_search().search_drugs(q, limit)
    return result.to_dict()


@router.get("/search/brand")
async def search_by_brand(
    q: str = "",
    limit: int = Query(default=10, ge=1, le=100),
    container: ApplicationContainer = Depends(get_container),
):
    """openFDA search restricted to brand names."""
    return await container.openfda().search_by_brand_name(_require(q), limit)


@router.get("/details/{name}")
async def drug_details(name: str, container: ApplicationContainer = Depends(get_container)):
    return await container.openfda().get_drug_details(_require(name, "name"))


@router.get("/adverse-events/{name}")
async def adverse_events(
    name: str,
    limit: int = Query(default=10, ge=1, le=100),
    container: ApplicationContainer = Depends(get_container),
):
    return await container.openfda().get_adverse_events(_require(name, "name"), limit)


@router.get("/adverse-stats/{name}")
async def adverse_event_stats(name: str, container: ApplicationContainer = Depends(get_container)):
    return await container.openfda().get_adverse_event_stats(_require(name, "name"))


@router.get("/recalls")
async def recalls(
    q: str = "",
    limit: int = Query(default=10, ge=1, le=100),
    container: ApplicationContainer = Depends(get_container),
):
    return await container.openfda().get_drug_recalls(q.strip(), limit)


@router.get("/recalls/recent")
async def recent_recalls(
    limit: int = Query(default=20, ge=1, le=100),
    classification: str = "",
    status: str = "",
    container: ApplicationContainer = Depends(get_container),
):
    """Newest recalls, optionally filtered by classification and status."""
    return await container.openfda().get_recent_recalls(
        limit=limit, classification=classification, status=status
    )


@router.get("/recalls/search/{drug_name}")
async def recalls_by_drug(
    drug_name: str,
    limit: int = Query(default=10, ge=1, le=100),
    container: ApplicationContainer = Depends(get_container),
):
    return await container.openfda().search_recalls_by_drug(_require(drug_name, "drug_name"), limit)


@router.get("/suggestions")
async def suggestions(q: str = "", container: ApplicationContainer = Depends(get_container)):
    """Autocomplete; terms shorter than two characters get no suggestions."""
    term = q.strip()
    if len(term) < MIN_SUGGESTION_LENGTH:
        return {"success": True, "data": []}
    return await container.rxnorm().get_spelling_suggestions(term)


@router.get("/rxnorm/{rxcui}")
async def rxnorm_concept(rxcui: str, container: ApplicationContainer = Depends(get_container)):
    """Concept info, brand names and related names, fetched concurrently; 404 without concept info."""
    rxnorm = container.rxnorm()
    info, brands, related = await gather_settled(
        rxnorm.get_drug_info(rxcui),
        rxnorm.get_brand_names(rxcui),
        rxnorm.get_related_names(rxcui),
    )
    for outcome in (info, brands, related):
        if isinstance(outcome, Exception):
            raise outcome
    if info["data"] is None:
        raise NotFoundError("RxNorm concept", rxcui)
    return {
        "success": True,
        "data": {
            "info": info["data"],
            "brandNames": brands["data"],
            "relatedNames": related["data"],
        },
    }


@router.get("/dangerous")
async def dangerous_drugs(
    limit: int = Query(default=20, ge=1, le=100),
    container: ApplicationContainer = Depends(get_container),
):
    return await container.openfda().get_dangerous_drugs(limit)
