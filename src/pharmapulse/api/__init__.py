"""
HTTP API for PharmaPulse.

REST endpoints over the merged drug search, the openFDA and RxNorm clients,
and pharmaceutical news.
"""

from .server import create_app, run_api_server

__all__ = ["create_app", "run_api_server"]
