"""
Drug models shared by the search pipeline.

NormalizedDrugRecord is the single shape every drug search result takes,
whichever upstream source produced it. Missing upstream fields are replaced
by UNAVAILABLE so consumers never deal with nulls.

Architecture Decision:
    Plain dataclasses, serialized to the camelCase JSON the HTTP API returns
    via to_dict(). Pydantic is only used at the HTTP boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNAVAILABLE = "unavailable"
UNKNOWN_NAME = "unknown"


class DrugSource(str, Enum):
    """Upstream provider of a drug record. OPENFDA is the primary source."""
    OPENFDA = "openFDA"
    RXNORM = "RxNorm"


@dataclass(frozen=True, slots=True)
class NormalizedDrugRecord:
    """A drug search result in the unified shape."""
    id: str
    brand_name: str = UNAVAILABLE
    generic_name: str = UNAVAILABLE
    manufacturer: str = UNAVAILABLE
    product_type: str = UNAVAILABLE
    route: str = UNAVAILABLE
    source: DrugSource = DrugSource.OPENFDA
    source_specific_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "brandName": self.brand_name,
            "genericName": self.generic_name,
            "manufacturer": self.manufacturer,
            "productType": self.product_type,
            "route": self.route,
            "source": self.source.value,
        }
        if self.source_specific_id is not None:
            result["sourceSpecificId"] = self.source_specific_id
            # legacy field name used by existing clients
            if self.source is DrugSource.RXNORM:
                result["rxcui"] = self.source_specific_id
        return result


@dataclass(slots=True)
class SourceResult:
    """
    Envelope every upstream adapter returns.

    ``data`` holds raw, source-shaped records. ``success=False`` means the
    source could not be queried; callers treat it like an empty result.
    """
    success: bool
    data: list[dict[str, Any]] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> SourceResult:
        return cls(success=True, data=[])

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "data": self.data, "meta": self.meta}


@dataclass(slots=True)
class DrugSearchResult:
    """Response of the merged drug search."""
    query: str
    data: list[NormalizedDrugRecord] = field(default_factory=list)
    success: bool = True

    @property
    def total_results(self) -> int:
        return len(self.data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "data": [record.to_dict() for record in self.data],
            "totalResults": self.total_results,
            "query": self.query,
        }
