"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON, except the CSV/JSON file downloads

Design Decisions:
    - Thin routes delegate to services (DB) and core/ (pure calculations)
"""
