"""
Upstream Sources

HTTP clients for the external data providers:
- openFDA: drug labels, adverse events, recalls (primary drug source)
- RxNorm: drug naming and relations (secondary drug source)
- NewsAPI: pharmaceutical and health news
"""

from .base_client import BaseAPIClient
from .news import NewsClient
from .openfda import OpenFDAClient
from .rxnorm import RxNormClient

__all__ = [
    "BaseAPIClient",
    "NewsClient",
    "OpenFDAClient",
    "RxNormClient",
]
