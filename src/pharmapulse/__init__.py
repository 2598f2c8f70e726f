"""
PharmaPulse - drug information and pharmaceutical news service.

Combines openFDA drug labels and RxNorm naming data into one deduplicated
drug search, fronted by an in-memory TTL cache, and serves it over HTTP
together with openFDA safety data and pharmaceutical news.

Usage:
    from pharmapulse.container import ApplicationContainer
    from pharmapulse.config import Settings

    container = ApplicationContainer()
    container.config.from_dict(Settings.from_env().to_dict())
    result = await container.drug_search().search_drugs("tylenol")

Run the HTTP API:
    python -m pharmapulse --port 3000
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
