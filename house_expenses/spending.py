"""Spending totals, chart series and category breakdowns.

These functions take the expenses already fetched for the dashboard and
reduce them with pandas.  Every function accepts either a sequence of
:class:`~house_expenses.models.Expense` records or a frame produced by
:func:`expenses_frame`.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd

from .models import Category, Expense, Period

FRAME_COLUMNS = [
    'Id', 'Date', 'Amount', 'Category Id', 'Category',
    'SubCategory Id', 'SubCategory', 'Description', 'Type',
]
WEEKDAY_LABELS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
MONTH_LABELS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

UNKNOWN_CATEGORY = {'name': 'Unknown', 'icon': 'help-circle', 'color': '#95A5A6'}

ExpenseData = Union[pd.DataFrame, Sequence[Expense]]


@dataclass
class ChartData:
    points: pd.DataFrame
    total: float
    average: float


def expenses_frame(expenses: Iterable[Expense]) -> pd.DataFrame:
    """Convert expenses to a DataFrame with a parsed ``Date`` column.

    Dates are parsed with an explicit ``%Y-%m-%d`` format into naive
    timestamps; rows with malformed dates or amounts are dropped.
    """
    rows = [
        {
            'Id': e.id,
            'Date': e.date,
            'Amount': e.amount,
            'Category Id': e.category_id,
            'Category': e.category_name,
            'SubCategory Id': e.sub_category_id,
            'SubCategory': e.sub_category_name,
            'Description': e.description,
            'Type': e.expense_type,
        }
        for e in expenses
    ]
    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df['Date'] = pd.to_datetime(
        df['Date'].astype(str).str.slice(0, 10), format='%Y-%m-%d', errors='coerce'
    )
    df['Amount'] = pd.to_numeric(df['Amount'], errors='coerce')
    df = df.dropna(subset=['Date', 'Amount'])
    return df.reset_index(drop=True)


def _as_frame(data: ExpenseData) -> pd.DataFrame:
    if isinstance(data, pd.DataFrame):
        return data
    return expenses_frame(data)


def week_range(day: date) -> Tuple[date, date]:
    """Monday to Sunday of the week containing ``day``."""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def period_range(period: Period) -> Tuple[date, date]:
    if period.is_annual:
        return date(period.year, 1, 1), date(period.year, 12, 31)
    last_day = calendar.monthrange(period.year, period.month)[1]
    return date(period.year, period.month, 1), date(period.year, period.month, last_day)


def _total_between(df: pd.DataFrame, start: date, end: date) -> float:
    if df.empty:
        return 0.0
    mask = (df['Date'] >= pd.Timestamp(start)) & (df['Date'] <= pd.Timestamp(end))
    return float(df.loc[mask, 'Amount'].sum())


def period_total(data: ExpenseData, period: Period) -> float:
    """Total spent within a calendar month or year."""
    return _total_between(_as_frame(data), *period_range(period))


def spending_totals(data: ExpenseData, today: Optional[date] = None) -> Dict[str, float]:
    """Totals for the current week, month and year.

    Returns:
        Dictionary with ``'weekly'``, ``'monthly'`` and ``'annual'`` totals
    """
    today = today or date.today()
    df = _as_frame(data)
    return {
        'weekly': _total_between(df, *week_range(today)),
        'monthly': period_total(df, Period.for_date(today)),
        'annual': period_total(df, Period(today.year)),
    }


def _chart(labels: List[str], values: List[float]) -> ChartData:
    total = float(sum(values))
    average = round(total / len(values), 2) if values else 0.0
    points = pd.DataFrame({'label': labels, 'value': values}, columns=['label', 'value'])
    return ChartData(points=points, total=total, average=average)


def weekly_chart_data(data: ExpenseData, day: Optional[date] = None) -> ChartData:
    """Daily totals for the Monday–Sunday week containing ``day``."""
    df = _as_frame(data)
    start, _ = week_range(day or date.today())
    values = []
    for offset in range(7):
        current = start + timedelta(days=offset)
        values.append(_total_between(df, current, current))
    return _chart(list(WEEKDAY_LABELS), values)


def monthly_chart_data(data: ExpenseData, period: Period) -> ChartData:
    """Weekly totals for a month, in 7-day buckets counted from the 1st."""
    df = _as_frame(data)
    month_start, month_end = period_range(period)
    labels: List[str] = []
    values: List[float] = []
    week_start = month_start
    week_number = 1
    while week_start <= month_end:
        week_end = min(week_start + timedelta(days=6), month_end)
        labels.append(f"Week {week_number}")
        values.append(_total_between(df, week_start, week_end))
        week_start = week_end + timedelta(days=1)
        week_number += 1
    return _chart(labels, values)


def annual_chart_data(data: ExpenseData, year: int, today: Optional[date] = None) -> ChartData:
    """Monthly totals for a year; the current year stops at the current month."""
    df = _as_frame(data)
    today = today or date.today()
    labels: List[str] = []
    values: List[float] = []
    for month in range(1, 13):
        if year == today.year and date(year, month, 1) > today:
            break
        labels.append(MONTH_LABELS[month - 1])
        values.append(period_total(df, Period(year, month)))
    return _chart(labels, values)


def category_breakdown(
    data: ExpenseData,
    categories: Sequence[Category],
    period: Period,
    limit: Optional[int] = None,
) -> pd.DataFrame:
    """Spending per category within ``period``, largest first.

    Args:
        data: Expenses or an expenses frame
        categories: Known categories, used for names, icons and colours
        period: Month or year to analyse
        limit: Optional number of top categories to keep

    Returns:
        DataFrame with columns: Category Id, Category, Icon, Color, Amount, Percentage
    """
    columns = ['Category Id', 'Category', 'Icon', 'Color', 'Amount', 'Percentage']
    df = _as_frame(data)
    if df.empty:
        return pd.DataFrame(columns=columns)

    start, end = period_range(period)
    scoped = df[(df['Date'] >= pd.Timestamp(start)) & (df['Date'] <= pd.Timestamp(end))]
    totals = scoped.groupby('Category Id')['Amount'].sum()
    if totals.empty:
        return pd.DataFrame(columns=columns)

    grand_total = float(totals.sum())
    lookup = {c.id: c for c in categories}
    rows = []
    for category_id, amount in totals.items():
        category = lookup.get(category_id)
        rows.append({
            'Category Id': category_id,
            'Category': category.name if category else UNKNOWN_CATEGORY['name'],
            'Icon': category.icon if category else UNKNOWN_CATEGORY['icon'],
            'Color': category.color if category else UNKNOWN_CATEGORY['color'],
            'Amount': float(amount),
            'Percentage': round(float(amount) * 100.0 / grand_total, 2) if grand_total > 0 else 0.0,
        })

    result = pd.DataFrame(rows, columns=columns)
    result = result.sort_values('Amount', ascending=False, kind='stable').reset_index(drop=True)
    if limit is not None:
        result = result.head(limit)
    return result
