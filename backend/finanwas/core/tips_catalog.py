"""Tips Catalog — static daily tips and the personalized pick for today.

Invariants:
    - Selection is deterministic for a given (day of year, candidate list)
    - Unviewed tips are preferred; when all are viewed the full filtered list is reused
    - Knowledge level filter keeps the mapped difficulty plus beginner tips
"""

from dataclasses import dataclass, asdict
from datetime import date


@dataclass(frozen=True)
class Tip:
    id: str
    title: str
    content: str
    category: str
    difficulty: str
    tags: tuple[str, ...]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["tags"] = list(self.tags)
        return data


TIPS: tuple[Tip, ...] = (
    Tip(
        "tip-001", "Diversifica tu portafolio",
        "No pongas todos tus huevos en la misma canasta. Diversificar entre "
        "diferentes tipos de activos reduce el riesgo de pérdidas significativas.",
        "inversiones", "beginner", ("diversificación", "riesgo", "portafolio"),
    ),
    Tip(
        "tip-002", "Crea un fondo de emergencia",
        "Ahorra entre 3 y 6 meses de gastos en una cuenta de fácil acceso. Esto "
        "te protegerá ante imprevistos sin necesidad de vender inversiones.",
        "ahorro", "beginner", ("ahorro", "emergencia", "liquidez"),
    ),
    Tip(
        "tip-003", "Aprovecha el interés compuesto",
        "El interés compuesto es tu mejor aliado. Reinvierte tus ganancias para "
        "que generen más ganancias con el tiempo.",
        "inversiones", "intermediate", ("interés compuesto", "rendimiento", "largo plazo"),
    ),
    Tip(
        "tip-004", "Revisa tus gastos mensuales",
        "Analiza tus gastos cada mes para identificar áreas donde puedes ahorrar. "
        "Pequeños cambios pueden generar grandes ahorros.",
        "presupuesto", "beginner", ("presupuesto", "ahorro", "gastos"),
    ),
    Tip(
        "tip-005", "Invierte a largo plazo",
        "Las inversiones a largo plazo suelen ser menos volátiles y ofrecen "
        "mejores rendimientos. Evita vender en momentos de pánico.",
        "inversiones", "intermediate", ("largo plazo", "estrategia", "paciencia"),
    ),
    Tip(
        "tip-006", "Conoce tu perfil de riesgo",
        "Antes de invertir, identifica cuánto riesgo estás dispuesto a asumir. "
        "Esto te ayudará a elegir inversiones adecuadas.",
        "inversiones", "beginner", ("riesgo", "perfil", "estrategia"),
    ),
    Tip(
        "tip-007", "Automatiza tus ahorros",
        "Configura transferencias automáticas a tu cuenta de ahorro. Ahorrar se "
        "vuelve más fácil cuando no tienes que pensarlo.",
        "ahorro", "beginner", ("ahorro", "automatización", "disciplina"),
    ),
    Tip(
        "tip-008", "Edúcate constantemente",
        "El mundo financiero cambia constantemente. Dedica tiempo a aprender "
        "sobre nuevas estrategias y oportunidades de inversión.",
        "educación", "beginner", ("educación", "aprendizaje", "actualización"),
    ),
)

TIPS_BY_ID = {t.id: t for t in TIPS}

KNOWLEDGE_DIFFICULTY = {
    "Principiante": "beginner",
    "Intermedio": "intermediate",
    "Avanzado": "advanced",
}


def select_tip_of_the_day(
    knowledge_level: str | None,
    viewed_tip_ids: set[str],
    today: date,
    tips: tuple[Tip, ...] = TIPS,
) -> Tip:
    relevant = list(tips)
    difficulty = KNOWLEDGE_DIFFICULTY.get(knowledge_level or "")
    if difficulty:
        relevant = [
            t for t in relevant if t.difficulty in (difficulty, "beginner")
        ]

    unviewed = [t for t in relevant if t.id not in viewed_tip_ids]
    candidates = unviewed or relevant
    day_of_year = today.timetuple().tm_yday
    return candidates[day_of_year % len(candidates)]
