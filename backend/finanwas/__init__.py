"""Finanwas — personal finance education and portfolio tracking API.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
