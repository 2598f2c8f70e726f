"""
Merged Drug Search

Architecture:
    Search term
        │
        ▼
    ┌──────────────────┐
    │ DrugSearchService│  ← validate, cache lookup
    └────────┬─────────┘
             │ concurrent, per-source timeout
     ┌───────┴────────┐
     ▼                ▼
  openFDA           RxNorm
     └───────┬────────┘
             ▼
    ┌──────────────────┐
    │merge_drug_results│  ← normalize, dedup, openFDA wins
    └──────────────────┘
"""

from .drug_merger import merge_drug_results, raw_to_normalized
from .drug_search import DrugSearchService

__all__ = [
    "DrugSearchService",
    "merge_drug_results",
    "raw_to_normalized",
]
