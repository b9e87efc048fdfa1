"""Investor Type — classify a questionnaire profile as conservador, moderado or agresivo.

Invariants:
    - Returns None until the questionnaire is completed
    - Score 0-100: <= 33 conservador, <= 66 moderado, else agresivo
"""

from finanwas.core.domain_types import InvestorType
from finanwas.core.repository_protocols import ProfileLike


def _keyword_score(
    value: str | None, table: tuple[tuple[str, int], ...], default: int,
) -> int:
    if not value:
        return default
    normalized = value.lower()
    for keyword, score in table:
        if keyword in normalized:
            return score
    return default


_RISK = (("conservador", 0), ("moderado", 50), ("agresivo", 100))
_HORIZON = (("corto", 0), ("mediano", 50), ("largo", 100))
_KNOWLEDGE = (("principiante", 0), ("intermedio", 50), ("avanzado", 100))


def investor_score(profile: ProfileLike) -> float:
    score = 0.0
    if profile.risk_tolerance:
        score += _keyword_score(profile.risk_tolerance, _RISK, 50) * 0.4
    if profile.investment_horizon:
        score += _keyword_score(profile.investment_horizon, _HORIZON, 50) * 0.3
    if profile.knowledge_level:
        score += _keyword_score(profile.knowledge_level, _KNOWLEDGE, 0) * 0.2
    score += (100 if profile.has_emergency_fund is True else 0) * 0.1
    return score


def calculate_investor_type(profile: ProfileLike | None) -> InvestorType | None:
    if profile is None or not profile.questionnaire_completed:
        return None
    score = investor_score(profile)
    if score <= 33:
        return InvestorType.CONSERVADOR
    if score <= 66:
        return InvestorType.MODERADO
    return InvestorType.AGRESIVO
