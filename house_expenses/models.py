"""Domain records for categories, subcategories, expenses and periods.

Records arrive from the backend as camelCase dictionaries.  The
``from_record`` builders turn them into frozen dataclasses so the
dashboard calculations can work on plain, hashable values.

A subcategory's expected charge is modelled as one of three modes:

* :class:`FixedCharge` – an exact amount charged every period (rent).
  Fixed subcategories are always mandatory.
* :class:`CappedCharge` – a ceiling (``budgetLimit``) with variable spending.
* :class:`Untracked` – neither amount configured.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from . import config

logger = logging.getLogger(__name__)

MONTHLY = 'monthly'
ANNUAL = 'annual'
EXPENSE_TYPES = (MONTHLY, ANNUAL)

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]


def normalize_expense_type(value: Any) -> str:
    """Return ``'annual'`` or ``'monthly'``; anything unknown counts as monthly."""
    normalized = value.strip().lower() if isinstance(value, str) else ''
    return normalized if normalized in EXPENSE_TYPES else MONTHLY


def optional_amount(value: Any) -> Optional[float]:
    """Parse an optional numeric field, returning ``None`` when unset or unusable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric amount %r", value)
        return None


@dataclass(frozen=True)
class FixedCharge:
    amount: float


@dataclass(frozen=True)
class CappedCharge:
    limit: float


@dataclass(frozen=True)
class Untracked:
    pass


ChargeMode = Union[FixedCharge, CappedCharge, Untracked]


def charge_mode(fixed_amount: Optional[float], budget_limit: Optional[float]) -> ChargeMode:
    """Pick the single active charge mode; a fixed amount wins over a limit."""
    if fixed_amount is not None and fixed_amount > 0:
        return FixedCharge(float(fixed_amount))
    if budget_limit is not None and budget_limit > 0:
        return CappedCharge(float(budget_limit))
    return Untracked()


@dataclass(frozen=True)
class SubCategory:
    id: str
    name: str
    category_id: str
    charge: ChargeMode = field(default_factory=Untracked)
    is_mandatory: bool = False
    icon: Optional[str] = None
    display_order: int = 0

    def __post_init__(self) -> None:
        # fixed implies mandatory
        if isinstance(self.charge, FixedCharge) and not self.is_mandatory:
            object.__setattr__(self, 'is_mandatory', True)

    @classmethod
    def create(
        cls,
        id: str,
        name: str,
        category_id: str,
        *,
        fixed_amount: Optional[float] = None,
        budget_limit: Optional[float] = None,
        is_mandatory: bool = False,
        icon: Optional[str] = None,
        display_order: int = 0,
    ) -> 'SubCategory':
        return cls(
            id=id,
            name=name,
            category_id=category_id,
            charge=charge_mode(fixed_amount, budget_limit),
            is_mandatory=bool(is_mandatory),
            icon=icon,
            display_order=display_order,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any], category_id: Optional[str] = None) -> 'SubCategory':
        return cls.create(
            id=str(record['id']),
            name=str(record.get('name') or ''),
            category_id=str(record.get('categoryId') or category_id or ''),
            fixed_amount=optional_amount(record.get('fixedAmount')),
            budget_limit=optional_amount(record.get('budgetLimit')),
            is_mandatory=bool(record.get('isMandatory')),
            icon=record.get('icon'),
            display_order=int(record.get('displayOrder') or 0),
        )

    @property
    def is_fixed(self) -> bool:
        return isinstance(self.charge, FixedCharge)

    @property
    def fixed_amount(self) -> Optional[float]:
        return self.charge.amount if isinstance(self.charge, FixedCharge) else None

    @property
    def budget_limit(self) -> Optional[float]:
        return self.charge.limit if isinstance(self.charge, CappedCharge) else None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icon: str = ''
    color: str = ''
    expense_type: str = MONTHLY
    display_order: int = 0
    sub_categories: Tuple[SubCategory, ...] = ()

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Category':
        category_id = str(record['id'])
        return cls(
            id=category_id,
            name=str(record.get('name') or ''),
            icon=str(record.get('icon') or ''),
            color=str(record.get('color') or ''),
            expense_type=normalize_expense_type(record.get('expenseType')),
            display_order=int(record.get('displayOrder') or 0),
            sub_categories=parse_sub_categories(record.get('subCategories') or [], category_id),
        )

    @property
    def is_annual(self) -> bool:
        return self.expense_type == ANNUAL


@dataclass(frozen=True)
class Expense:
    id: str
    amount: float
    date: str
    category_id: Optional[str] = None
    category_name: Optional[str] = None
    sub_category_id: Optional[str] = None
    sub_category_name: Optional[str] = None
    description: Optional[str] = None
    expense_type: str = MONTHLY

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> 'Expense':
        """Build an expense from a backend record.

        Raises ``KeyError``/``ValueError``/``TypeError`` when the id or
        amount is missing or not numeric; :func:`parse_expenses` skips
        such records.
        """
        category = _nested(record, 'category')
        sub_category = _nested(record, 'subCategory')
        sub_id = sub_category.get('id') or record.get('subCategoryId')
        return cls(
            id=str(record['id']),
            amount=float(record['amount']),
            date=str(record.get('date') or ''),
            category_id=_optional_str(category.get('id') or record.get('categoryId')),
            category_name=category.get('name'),
            sub_category_id=_optional_str(sub_id),
            sub_category_name=sub_category.get('name'),
            description=record.get('description'),
            expense_type=normalize_expense_type(record.get('expenseType')),
        )


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _nested(record: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    # nested references that are not objects are ignored
    value = record.get(key)
    return value if isinstance(value, Mapping) else {}


@dataclass(frozen=True)
class Period:
    """A calendar month, or a whole calendar year when ``month`` is ``None``."""

    year: int
    month: Optional[int] = None

    @classmethod
    def for_date(cls, day: date) -> 'Period':
        return cls(day.year, day.month)

    @classmethod
    def from_key(cls, key: str) -> 'Period':
        """Parse a ``"{year}-{month}"`` key.  Raises ``ValueError`` when malformed."""
        parts = str(key).strip().split('-')
        if len(parts) != 2:
            raise ValueError(f"Invalid period key: {key!r}")
        year, month = int(parts[0]), int(parts[1])
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month in period key: {key!r}")
        return cls(year, month)

    @property
    def key(self) -> str:
        if self.month is None:
            return str(self.year)
        return f"{self.year}-{self.month}"

    @property
    def is_annual(self) -> bool:
        return self.month is None

    @property
    def label(self) -> str:
        if self.month is None:
            return str(self.year)
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    def as_year(self) -> 'Period':
        return Period(self.year)

    def contains(self, year: int, month: int) -> bool:
        if year != self.year:
            return False
        return self.month is None or month == self.month

    def previous_month(self) -> 'Period':
        month = self.month or 1
        if month == 1:
            return Period(self.year - 1, 12)
        return Period(self.year, month - 1)


@dataclass(frozen=True)
class BudgetLimits:
    monthly: Optional[float] = None
    annual: Optional[float] = None

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> 'BudgetLimits':
        record = record or {}
        return cls(
            monthly=optional_amount(record.get('monthlyBudgetLimit')),
            annual=optional_amount(record.get('annualBudgetLimit')),
        )


@dataclass(frozen=True)
class PaymentStatus:
    sub_category_id: str
    sub_category_name: str
    category_id: str
    category_name: str
    category_color: str
    category_expense_type: str
    expected_amount: float
    is_fixed: bool
    is_paid_this_period: bool
    paid_amount: float
    payment_count: int
    last_payment_date: Optional[str] = None

    @property
    def remaining_amount(self) -> float:
        return self.expected_amount - self.paid_amount


@dataclass(frozen=True)
class BudgetLimitStatus:
    limit: float
    current_spending: float
    remaining_amount: float
    utilization_percentage: float
    is_exceeded: bool

    @property
    def level(self) -> str:
        """Colour band used by the budget card: ok, warning, danger or exceeded."""
        if self.is_exceeded:
            return 'exceeded'
        if self.utilization_percentage >= config.DANGER_PERCENT:
            return 'danger'
        if self.utilization_percentage >= config.WARNING_PERCENT:
            return 'warning'
        return 'ok'


@dataclass(frozen=True)
class UnpaidExpenseAlert:
    id: str
    sub_category_id: str
    sub_category_name: str
    category_name: str
    expected_amount: float
    month: int
    year: int
    message: str
    created_at: str
    type: str = 'unpaid_expense'

    @staticmethod
    def make_id(sub_category_id: str, month: int, year: int) -> str:
        return f"unpaid-{sub_category_id}-{month}-{year}"


def parse_sub_categories(records: Iterable[Mapping[str, Any]], category_id: str) -> Tuple[SubCategory, ...]:
    """Build a category's subcategories, skipping malformed ones."""
    sub_categories: List[SubCategory] = []
    for record in records:
        try:
            sub_categories.append(SubCategory.from_record(record, category_id))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed subcategory record in %s: %s", category_id, exc)
    return tuple(sub_categories)


def parse_categories(records: Iterable[Mapping[str, Any]]) -> List[Category]:
    """Build categories from backend records, skipping ones without an id."""
    categories: List[Category] = []
    for record in records or []:
        try:
            categories.append(Category.from_record(record))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed category record: %s", exc)
    return categories


def parse_expenses(records: Iterable[Mapping[str, Any]]) -> List[Expense]:
    """Build expenses from backend records, skipping unusable ones."""
    expenses: List[Expense] = []
    for record in records or []:
        try:
            expenses.append(Expense.from_record(record))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed expense record: %s", exc)
    return expenses


def sort_categories(categories: Iterable[Category]) -> List[Category]:
    """Order categories monthly-first, then by ``display_order`` (stable)."""
    type_rank: Dict[str, int] = {MONTHLY: 0, ANNUAL: 1}
    return sorted(categories, key=lambda c: (type_rank.get(c.expense_type, 0), c.display_order))
