"""
Infrastructure Layer - External Systems Integration

Contains:
- cache: In-memory TTL cache and key derivation
- sources: openFDA, RxNorm and NewsAPI clients
"""
