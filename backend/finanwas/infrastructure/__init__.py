"""Infrastructure Layer — database, logging, security and market-data clients.

Invariants:
    - Provider failures surface as None or ExternalServiceError, never raw httpx errors
    - Every outbound HTTP call carries a timeout from settings
"""
