"""Database Package — declarative Base and the standalone session factory.

Invariants:
    - Request handlers get sessions from infrastructure/database.py, not from here
"""
