"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Every user-owned table carries user_id; services always filter by it

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from finanwas.models.user import User  # noqa: F401
from finanwas.models.invitation_code import InvitationCode  # noqa: F401
from finanwas.models.user_profile import UserProfile  # noqa: F401
from finanwas.models.lesson_progress import LessonProgress  # noqa: F401
from finanwas.models.tip_view import TipView  # noqa: F401
from finanwas.models.portfolio_asset import PortfolioAsset  # noqa: F401
from finanwas.models.dividend_payment import DividendPayment  # noqa: F401
from finanwas.models.portfolio_snapshot import PortfolioSnapshot  # noqa: F401
from finanwas.models.savings_goal import SavingsGoal, SavingsContribution  # noqa: F401
from finanwas.models.note import Note  # noqa: F401
from finanwas.models.error_log import ErrorLog  # noqa: F401
from finanwas.models.audit_log import AuditLog  # noqa: F401
