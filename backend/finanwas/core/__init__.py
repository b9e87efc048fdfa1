"""Core Layer — portfolio math, scores, stats and validators. No IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions take plain values or Protocol-typed rows (repository_protocols.py)
    - Date-dependent calculations take "today" or "now" as a parameter
"""
