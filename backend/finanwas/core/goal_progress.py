"""Goal Progress — pure progress figures for a savings goal."""

from datetime import date


def calculate_goal_progress(current: float, target: float) -> float:
    """Fraction in [0, 1]; 0 when the target is not positive."""
    if target <= 0:
        return 0.0
    return min(max(current / target, 0.0), 1.0)


def goal_progress(
    current_amount: float,
    target_amount: float,
    target_date: date | None,
    today: date,
) -> dict:
    percentage = min(current_amount / target_amount * 100, 100.0) if target_amount > 0 else 0.0
    days_remaining = None
    if target_date is not None:
        days_remaining = (target_date - today).days
    return {
        "percentage": percentage,
        "remaining": max(target_amount - current_amount, 0.0),
        "daysRemaining": days_remaining,
        "isCompleted": current_amount >= target_amount,
    }


def reached_target(current_amount: float, target_amount: float) -> bool:
    return target_amount > 0 and current_amount >= target_amount
