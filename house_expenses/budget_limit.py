"""Budget limit evaluation for the user's monthly and annual ceilings."""

from __future__ import annotations

from typing import Dict, Optional

from .models import BudgetLimitStatus, BudgetLimits


def evaluate_budget_limit(limit: Optional[float], current_spending: float) -> Optional[BudgetLimitStatus]:
    """Compare period spending against a user-set limit.

    Args:
        limit: The configured limit, or ``None`` when the user has not set one
        current_spending: Total spent in the period

    Returns:
        ``None`` when no limit is configured, otherwise the limit status.
        ``utilization_percentage`` is not clamped and may exceed 100.

    Example:
        >>> status = evaluate_budget_limit(1000, 1200)
        >>> status.remaining_amount, status.utilization_percentage, status.is_exceeded
        (-200.0, 120.0, True)
    """
    if limit is None:
        return None

    limit = float(limit)
    spending = float(current_spending or 0.0)
    utilization = spending * 100.0 / limit if limit > 0 else 0.0
    return BudgetLimitStatus(
        limit=limit,
        current_spending=spending,
        remaining_amount=limit - spending,
        utilization_percentage=utilization,
        is_exceeded=spending > limit,
    )


def evaluate_user_limits(
    limits: BudgetLimits,
    monthly_spending: float,
    annual_spending: float,
) -> Dict[str, Optional[BudgetLimitStatus]]:
    """Evaluate both of the user's limits.

    Returns:
        Dictionary with ``'monthly'`` and ``'annual'`` keys; a value is
        ``None`` when that limit is not configured.
    """
    return {
        'monthly': evaluate_budget_limit(limits.monthly, monthly_spending),
        'annual': evaluate_budget_limit(limits.annual, annual_spending),
    }
