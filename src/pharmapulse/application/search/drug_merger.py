"""
Drug result merging - combine openFDA and RxNorm search results.

openFDA (primary) and RxNorm (secondary) describe drugs in different shapes:

    openFDA label:      {"id": ..., "openfda": {"brand_name": [...],
                         "generic_name": [...], "manufacturer_name": [...],
                         "product_type": [...], "route": [...]}}
    RxNorm candidate:   {"rxcui": "...", "name": "...", "type": ...}

merge_drug_results() normalizes both into NormalizedDrugRecord and drops
duplicates by identity key (lower-cased display name):

1. Primary records are scanned first, in order, then secondary records.
2. The first record seen for an identity key wins; later ones are dropped.
   A drug present in both sources therefore keeps the richer openFDA record.
3. One pass per list with a set for membership, O(n + m).

Records with no name at all share the identity "unknown" and collapse into
a single entry. They carry nothing that could tell them apart.

Example:
    >>> merged = merge_drug_results(
    ...     [{"openfda": {"brand_name": ["Tylenol"], "generic_name": ["Acetaminophen"]}}],
    ...     [{"rxcui": "202433", "name": "tylenol"}],
    ... )
    >>> [(r.brand_name, r.source.value) for r in merged]
    [('Tylenol', 'openFDA')]
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pharmapulse.models.drug import (
    UNAVAILABLE,
    UNKNOWN_NAME,
    DrugSource,
    NormalizedDrugRecord,
)

logger = logging.getLogger(__name__)

# NormalizedDrugRecord attribute -> openFDA field (inside the "openfda" block)
OPENFDA_FIELD_MAP: dict[str, str] = {
    "brand_name": "brand_name",
    "generic_name": "generic_name",
    "manufacturer": "manufacturer_name",
    "product_type": "product_type",
    "route": "route",
}

# NormalizedDrugRecord attribute -> RxNorm candidate field
RXNORM_FIELD_MAP: dict[str, str] = {
    "name": "name",
    "product_type": "type",
    "source_specific_id": "rxcui",
}


# =============================================================================
# Field access
# =============================================================================


def _text(value: Any) -> str | None:
    """First non-empty string out of a scalar or openFDA-style list."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _openfda_field(raw: Mapping[str, Any], name: str) -> str | None:
    """Read a field from the "openfda" block, or the top level of a flattened label."""
    block = raw.get("openfda")
    if isinstance(block, Mapping):
        value = _text(block.get(name))
        if value is not None:
            return value
    return _text(raw.get(name))


def generate_record_id(name: str) -> str:
    """Deterministic short id for records the source gave no id."""
    return hashlib.sha1(name.encode("utf-8")).hexdigest()[:12]


# =============================================================================
# Identity
# =============================================================================


def _openfda_display_name(raw: Mapping[str, Any]) -> str:
    return _openfda_field(raw, "brand_name") or _openfda_field(raw, "generic_name") or UNKNOWN_NAME


def _rxnorm_display_name(raw: Mapping[str, Any]) -> str:
    return _text(raw.get(RXNORM_FIELD_MAP["name"])) or UNKNOWN_NAME


def openfda_identity(raw: Mapping[str, Any]) -> str:
    """Identity key of an openFDA label: brand name, else generic name."""
    return _openfda_display_name(raw).lower()


def rxnorm_identity(raw: Mapping[str, Any]) -> str:
    """Identity key of an RxNorm candidate: its single name field."""
    return _rxnorm_display_name(raw).lower()


# =============================================================================
# Normalization
# =============================================================================


def openfda_label_to_record(raw: Mapping[str, Any]) -> NormalizedDrugRecord:
    """Map an openFDA drug label onto the unified record."""
    fields = {
        attr: _openfda_field(raw, source_field) or UNAVAILABLE
        for attr, source_field in OPENFDA_FIELD_MAP.items()
    }
    record_id = _text(raw.get("id")) or generate_record_id(_openfda_display_name(raw))
    return NormalizedDrugRecord(id=record_id, source=DrugSource.OPENFDA, **fields)


def rxnorm_candidate_to_record(raw: Mapping[str, Any]) -> NormalizedDrugRecord:
    """
    Map an RxNorm candidate onto the unified record.

    RxNorm has one name field; it fills both brand and generic name.
    """
    name = _rxnorm_display_name(raw)
    rxcui = _text(raw.get(RXNORM_FIELD_MAP["source_specific_id"]))
    return NormalizedDrugRecord(
        id=rxcui or generate_record_id(name),
        brand_name=name,
        generic_name=name,
        product_type=_text(raw.get(RXNORM_FIELD_MAP["product_type"])) or UNAVAILABLE,
        source=DrugSource.RXNORM,
        source_specific_id=rxcui or UNAVAILABLE,
    )


_NORMALIZERS = {
    DrugSource.OPENFDA: (openfda_identity, openfda_label_to_record),
    DrugSource.RXNORM: (rxnorm_identity, rxnorm_candidate_to_record),
}


def raw_to_normalized(source: DrugSource, raw: Mapping[str, Any]) -> NormalizedDrugRecord:
    """Normalize a raw record from the given source."""
    _, normalize = _NORMALIZERS[source]
    return normalize(raw)


# =============================================================================
# Merge
# =============================================================================


def merge_drug_results(
    primary: Iterable[Mapping[str, Any]] | None,
    secondary: Iterable[Mapping[str, Any]] | None,
) -> list[NormalizedDrugRecord]:
    """
    Merge openFDA labels and RxNorm candidates into one deduplicated list.

    Args:
        primary: openFDA label records (may be empty or None)
        secondary: RxNorm candidate records (may be empty or None)

    Returns:
        Normalized records, first-seen order, one per identity key
    """
    merged: list[NormalizedDrugRecord] = []
    seen: set[str] = set()

    for source, records in ((DrugSource.OPENFDA, primary), (DrugSource.RXNORM, secondary)):
        identity, normalize = _NORMALIZERS[source]
        for raw in records or ():
            if not isinstance(raw, Mapping):
                logger.debug(f"Skipping non-mapping {source.value} record: {raw!r}")
                continue
            key = identity(raw)
            if key in seen:
                continue
            seen.add(key)
            merged.append(normalize(raw))

    return merged
