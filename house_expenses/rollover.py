"""Month rollover detection for fixed expenses left unpaid.

The detector remembers the last month it checked in a key-value store.
When a new month starts, every fixed subcategory of the monthly
categories is checked against the month that just ended, and one alert
is raised per subcategory that was not fully paid.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .mandatory import match_payments
from .models import Category, Expense, Period, UnpaidExpenseAlert
from .state_storage import KeyValueStore

logger = logging.getLogger(__name__)

LAST_CHECKED_MONTH_KEY = 'lastCheckedMonth'


class RolloverState:
    IDLE = 'idle'
    ROLLOVER_DETECTED = 'rollover_detected'


def find_unpaid_fixed_expenses(
    categories: Iterable[Category],
    expenses: Sequence[Expense],
    period: Period,
    created_at: Optional[str] = None,
) -> List[UnpaidExpenseAlert]:
    """Return one alert per fixed monthly subcategory underpaid in ``period``.

    Annual categories and non-fixed subcategories are never flagged.
    """
    created_at = created_at or datetime.now(timezone.utc).isoformat(timespec='seconds')
    alerts: List[UnpaidExpenseAlert] = []
    for category in categories:
        if category.is_annual:
            continue
        for sub_category in category.sub_categories:
            expected = sub_category.fixed_amount
            if expected is None:
                continue
            paid = match_payments(sub_category.id, expenses, period)
            if paid.total_paid >= expected:
                continue
            alerts.append(UnpaidExpenseAlert(
                id=UnpaidExpenseAlert.make_id(sub_category.id, period.month, period.year),
                sub_category_id=sub_category.id,
                sub_category_name=sub_category.name,
                category_name=category.name,
                expected_amount=expected,
                month=period.month,
                year=period.year,
                message=f"{sub_category.name} was not fully paid in {period.month}/{period.year}",
                created_at=created_at,
            ))
    return alerts


class MonthRolloverDetector:
    """Detects month changes between sessions and collects unpaid alerts.

    Args:
        store: Key-value storage holding the last checked ``"{year}-{month}"`` key
        clock: Callable returning today's date
        key: Storage key for the cursor
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Callable[[], date] = date.today,
        key: str = LAST_CHECKED_MONTH_KEY,
    ):
        self.store = store
        self.clock = clock
        self.key = key
        self._alerts: Dict[str, UnpaidExpenseAlert] = {}
        self._checked_period: Optional[str] = None

    @property
    def alerts(self) -> List[UnpaidExpenseAlert]:
        return list(self._alerts.values())

    @property
    def state(self) -> str:
        return RolloverState.ROLLOVER_DETECTED if self._alerts else RolloverState.IDLE

    def check(self, categories: Sequence[Category], expenses: Sequence[Expense]) -> List[UnpaidExpenseAlert]:
        """Run the rollover check once per month and return the pending alerts.

        Storage failures are logged and leave the detector idle for this
        call; they never propagate.
        """
        current = Period.for_date(self.clock())
        if self._checked_period == current.key:
            return self.alerts
        self._checked_period = current.key

        try:
            last_checked = self.store.get_item(self.key)
        except Exception:
            logger.exception("Could not read last checked month")
            return self.alerts

        new_alerts: List[UnpaidExpenseAlert] = []
        if last_checked and last_checked != current.key:
            try:
                previous = Period.from_key(last_checked)
            except ValueError:
                logger.warning("Ignoring unreadable last checked month %r", last_checked)
            else:
                new_alerts = find_unpaid_fixed_expenses(categories, expenses, previous)
                logger.info(
                    "Month changed from %s to %s: %d unpaid fixed expense(s)",
                    previous.key, current.key, len(new_alerts),
                )

        try:
            self.store.set_item(self.key, current.key)
        except Exception:
            logger.exception("Could not save last checked month")
            return self.alerts

        for alert in new_alerts:
            self._alerts.setdefault(alert.id, alert)
        return self.alerts

    def dismiss(self, alert_id: str) -> bool:
        """Remove a single alert; the stored cursor is left untouched."""
        return self._alerts.pop(alert_id, None) is not None

    def reset_session(self) -> None:
        """Allow the next :meth:`check` call to consult storage again."""
        self._checked_period = None
