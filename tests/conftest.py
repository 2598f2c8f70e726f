"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from pharmapulse.infrastructure.cache import CacheStore
from pharmapulse.models.drug import SourceResult


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================
# Cache Fixtures
# ============================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """Cache store driven by the fake clock."""
    return CacheStore(default_ttl=1800, timer=clock)


# ============================================================
# Mock Upstream Records
# ============================================================


@pytest.fixture
def tylenol_label():
    """openFDA label for Tylenol."""
    return {
        "id": "label-tylenol-1",
        "openfda": {
            "brand_name": ["Tylenol"],
            "generic_name": ["Acetaminophen"],
            "manufacturer_name": ["Johnson & Johnson"],
            "product_type": ["HUMAN OTC DRUG"],
            "route": ["ORAL"],
        },
    }


@pytest.fixture
def advil_label():
    return {
        "id": "label-advil-1",
        "openfda": {
            "brand_name": ["Advil"],
            "generic_name": ["Ibuprofen"],
            "manufacturer_name": ["Pfizer"],
            "product_type": ["HUMAN OTC DRUG"],
            "route": ["ORAL"],
        },
    }


@pytest.fixture
def tylenol_candidates():
    """RxNorm approximate-search candidates for "tylenol"."""
    return [
        {"rxcui": "202433", "name": "tylenol", "score": "100", "rank": "1"},
        {"rxcui": "161", "name": "acetaminophen", "score": "80", "rank": "2"},
    ]


def _make_source(result=None, side_effect=None):
    source = MagicMock()
    source.search = AsyncMock(return_value=result, side_effect=side_effect)
    return source


@pytest.fixture
def make_source():
    """Factory for fake search adapters with an AsyncMock ``search``."""
    return _make_source


@pytest.fixture
def openfda_source(tylenol_label):
    return _make_source(SourceResult(success=True, data=[tylenol_label]))


@pytest.fixture
def rxnorm_source(tylenol_candidates):
    return _make_source(SourceResult(success=True, data=tylenol_candidates))
