"""News endpoints mounted under /api/news."""

from fastapi import APIRouter, Depends, Query

from ..container import ApplicationContainer
from ..core.exceptions import InvalidQueryError
from .drugs import get_container

router = APIRouter(tags=["news"])


@router.get("")
async def pharmaceutical_news(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    language: str = "en",
    container: ApplicationContainer = Depends(get_container),
):
    """Latest pharmaceutical news."""
    return await container.news().get_pharmaceutical_news(
        page=page, page_size=page_size, language=language
    )


@router.get("/search")
async def search_news(
    q: str = "",
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    language: str = "en",
    sort_by: str = Query(default="relevancy", alias="sortBy"),
    container: ApplicationContainer = Depends(get_container),
):
    term = q.strip()
    if not term:
        raise InvalidQueryError(q, "'q' is required")
    return await container.news().search_news(
        term, page=page, page_size=page_size, language=language, sort_by=sort_by
    )


@router.get("/headlines")
async def health_headlines(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    country: str = "us",
    container: ApplicationContainer = Depends(get_container),
):
    return await container.news().get_health_headlines(
        page=page, page_size=page_size, country=country
    )
