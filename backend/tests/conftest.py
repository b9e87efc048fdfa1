"""Root conftest — environment fixed before any finanwas module loads.

Invariants:
    - Settings are cached on first import, so every variable is set here
    - The repository's own content/ tree backs the course routes by default
"""

import os
from pathlib import Path

os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault(
    "CONTENT_DIR", str(Path(__file__).resolve().parents[2] / "content"),
)
