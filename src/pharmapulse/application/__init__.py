"""
Application Layer - Use Cases and Business Logic Orchestration

Contains:
- search: Merged drug search across openFDA and RxNorm
"""

from .search import DrugSearchService, merge_drug_results

__all__ = [
    "DrugSearchService",
    "merge_drug_results",
]
