"""Data models for PharmaPulse."""

from .drug import (
    UNAVAILABLE,
    UNKNOWN_NAME,
    DrugSearchResult,
    DrugSource,
    NormalizedDrugRecord,
    SourceResult,
)

__all__ = [
    "UNAVAILABLE",
    "UNKNOWN_NAME",
    "DrugSearchResult",
    "DrugSource",
    "NormalizedDrugRecord",
    "SourceResult",
]
