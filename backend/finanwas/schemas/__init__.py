"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (request bodies)
    - Domain reference data (asset types, currencies) comes from core/domain_types.py

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
