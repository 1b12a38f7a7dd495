"""Helpers for tracking mandatory expenses such as rent or insurance.

The dashboard's "Pending Payments" feed is built here: every mandatory
subcategory gets an expected amount for the period, the expenses booked
against it are summed, and whatever is not yet fully paid is reported.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .models import (
    CappedCharge,
    Category,
    Expense,
    FixedCharge,
    PaymentStatus,
    Period,
    SubCategory,
)

logger = logging.getLogger(__name__)

# Share of a capped subcategory's limit expected as one monthly installment
INSTALLMENT_RATIO = 0.2

_DATE_PREFIX = re.compile(r'^(\d{4})-(\d{2})-(\d{2})(?:$|T)')


@dataclass(frozen=True)
class ExpectedAmount:
    expected_amount: float
    is_fixed: bool
    display_ceiling: float


@dataclass(frozen=True)
class PaymentMatch:
    total_paid: float
    count: int
    last_date: Optional[str] = None


def resolve_expected(sub_category: SubCategory) -> Optional[ExpectedAmount]:
    """Return the amount expected for one period, or ``None`` when untracked."""
    charge = sub_category.charge
    if isinstance(charge, FixedCharge):
        return ExpectedAmount(charge.amount, True, charge.amount)
    if isinstance(charge, CappedCharge):
        return ExpectedAmount(charge.limit * INSTALLMENT_RATIO, False, charge.limit)
    return None


def parse_year_month(date_text: Any) -> Optional[Tuple[int, int]]:
    """Extract ``(year, month)`` from a ``YYYY-MM-DD`` string.

    The components are read straight from the text so the result never
    depends on the local timezone.  Returns ``None`` for anything else.
    """
    if not isinstance(date_text, str):
        return None
    match = _DATE_PREFIX.match(date_text.strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None
    return year, month


def match_payments(sub_category_id: str, expenses: Iterable[Expense], period: Period) -> PaymentMatch:
    """Sum the expenses booked against a subcategory within ``period``."""
    total = 0.0
    count = 0
    last_date: Optional[str] = None
    for expense in expenses:
        if expense.sub_category_id != sub_category_id:
            continue
        parsed = parse_year_month(expense.date)
        if parsed is None:
            logger.debug("Skipping expense %s with malformed date %r", expense.id, expense.date)
            continue
        if not period.contains(*parsed):
            continue
        total += expense.amount
        count += 1
        if last_date is None or expense.date > last_date:
            last_date = expense.date
    return PaymentMatch(total, count, last_date)


def matching_window(category: Category, period: Period) -> Period:
    """Annual categories are always matched against the whole year."""
    if category.is_annual:
        return period.as_year()
    return period


def aggregate_mandatory_expenses(
    categories: Sequence[Category],
    expenses: Sequence[Expense],
    period: Period,
) -> List[PaymentStatus]:
    """Build the pending payments feed for ``period``.

    Only mandatory subcategories that are unpaid or partially paid are
    returned, in category/subcategory input order.  A capped subcategory
    counts as paid once its installment (``INSTALLMENT_RATIO`` of the
    limit) is covered, but the record reports the full limit as
    ``expected_amount``.
    """
    feed: List[PaymentStatus] = []
    for category in categories:
        window = matching_window(category, period)
        for sub_category in category.sub_categories:
            if not sub_category.is_mandatory:
                continue
            expected = resolve_expected(sub_category)
            if expected is None:
                continue

            paid = match_payments(sub_category.id, expenses, window)
            if paid.total_paid >= expected.expected_amount:
                continue

            feed.append(PaymentStatus(
                sub_category_id=sub_category.id,
                sub_category_name=sub_category.name,
                category_id=category.id,
                category_name=category.name,
                category_color=category.color,
                category_expense_type=category.expense_type,
                expected_amount=expected.display_ceiling,
                is_fixed=expected.is_fixed,
                is_paid_this_period=False,
                paid_amount=paid.total_paid,
                payment_count=paid.count,
                last_payment_date=paid.last_date,
            ))
    return feed


def filter_feed(feed: Iterable[PaymentStatus], expense_type: str) -> List[PaymentStatus]:
    """Select the monthly or annual part of the feed (the card's tabs)."""
    return [status for status in feed if status.category_expense_type == expense_type]


def total_remaining(feed: Iterable[PaymentStatus]) -> float:
    return sum(status.remaining_amount for status in feed)


def payment_prefill(status: PaymentStatus) -> Dict[str, Any]:
    """Values used to pre-fill a new expense when paying a pending item."""
    return {
        'categoryId': status.category_id,
        'subCategoryId': status.sub_category_id,
        'amount': status.expected_amount,
        'isFixed': status.is_fixed,
    }
