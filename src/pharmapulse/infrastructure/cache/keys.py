"""
Cache key derivation.

Every cached read path builds its key with derive_key(operation, *params).
Parameter order per operation is fixed; the tables below are the reference.
Reordering parameters does not break anything, it only turns every lookup
into a miss.

    Operation constant     Parameter order
    ------------------     ---------------
    DRUG_SEARCH            query, limit
    DRUG_LABEL             query, limit
    DRUG_DETAILS           drug_name
    DRUG_RECALLS           query, limit
    ADVERSE_EVENTS         drug_name, limit
    BRAND_SEARCH           brand_name, limit
    DANGEROUS_DRUGS        limit
    RECENT_RECALLS         limit, classification, status
    RECALL_SEARCH          drug_name, limit
    ADVERSE_STATS          drug_name
    RXNORM_SEARCH          drug_name
    RXNORM_RELATED         rxcui
    RXNORM_BRANDS          rxcui
    RXNORM_INFO            rxcui
    RXNORM_SUGGEST         term
    RXNORM_APPROX          term, max_entries
    NEWS_PHARMA            page, page_size, language, sort_by
    NEWS_SEARCH            query, page, page_size, language, sort_by
    NEWS_HEADLINES         country, page, page_size
"""

from __future__ import annotations

KEY_SEPARATOR = "_"

# Merged search
DRUG_SEARCH = "drug_search"

# openFDA
DRUG_LABEL = "drug_label"
DRUG_DETAILS = "drug_details"
DRUG_RECALLS = "drug_recalls"
ADVERSE_EVENTS = "adverse_events"
BRAND_SEARCH = "brand_search"
DANGEROUS_DRUGS = "dangerous_drugs"
RECENT_RECALLS = "recent_recalls"
RECALL_SEARCH = "recall_search"
ADVERSE_STATS = "adverse_stats"

# RxNorm
RXNORM_SEARCH = "rxnorm_search"
RXNORM_RELATED = "rxnorm_related"
RXNORM_BRANDS = "rxnorm_brands"
RXNORM_INFO = "rxnorm_info"
RXNORM_SUGGEST = "rxnorm_suggest"
RXNORM_APPROX = "rxnorm_approx"

# NewsAPI
NEWS_PHARMA = "news_pharma"
NEWS_SEARCH = "news_search"
NEWS_HEADLINES = "news_headlines"


def _stringify(param: str | int | float | bool | None) -> str:
    if param is None:
        return ""
    return str(param)


def derive_key(operation: str, *params: str | int | float | bool | None) -> str:
    """
    Build the cache key for an operation call.

    Example:
        >>> derive_key(DRUG_SEARCH, "aspirin", 10)
        'drug_search_aspirin_10'
        >>> derive_key(RECENT_RECALLS, 20, "", "Ongoing")
        'recent_recalls_20__Ongoing'
    """
    if not operation:
        raise ValueError("operation name is required")
    return KEY_SEPARATOR.join([operation, *(_stringify(p) for p in params)])
