"""Services Layer — DB-backed operations, one module per resource.

Invariants:
    - Every query on user-owned rows filters by user_id
    - Services raise FinanwasError subclasses; routes never build error responses
"""
