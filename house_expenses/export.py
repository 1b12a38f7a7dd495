"""Expense export to CSV and JSON files."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from . import config
from .models import Expense

CSV_COLUMNS = ['Date', f'Amount ({config.CURRENCY})', 'Category', 'Subcategory', 'Description', 'Type']
EXPORT_FORMATS = ('csv', 'json')


def safe_filename(name: str, default: str = 'export') -> str:
    """Lower-case, underscore-separated filename stem.

    Example:
        >>> safe_filename("January 2026")
        'january_2026'
    """
    if not name:
        return default
    cleaned = '_'.join(name.lower().split())
    cleaned = ''.join(c for c in cleaned if c.isascii() and (c.isalnum() or c == '_'))
    return cleaned or default


def export_filename(period_label: str, fmt: str) -> str:
    return f"expenses_{safe_filename(period_label)}.{fmt}"


def expenses_to_csv(expenses: Sequence[Expense]) -> str:
    """Render expenses as CSV with amounts to two decimals."""
    df = pd.DataFrame(
        [
            [
                e.date,
                f"{e.amount:.2f}",
                e.category_name or '',
                e.sub_category_name or '',
                e.description or '',
                e.expense_type,
            ]
            for e in expenses
        ],
        columns=CSV_COLUMNS,
    )
    return df.to_csv(index=False, lineterminator='\n')


def expenses_to_json(
    expenses: Sequence[Expense],
    period_type: str,
    period_label: str,
    total_amount: float,
    exported_at: Optional[str] = None,
) -> str:
    payload = {
        'exportedAt': exported_at or datetime.now(timezone.utc).isoformat(timespec='seconds'),
        'period': period_type,
        'periodLabel': period_label,
        'totalAmount': round(float(total_amount), 2),
        'expenseCount': len(expenses),
        'expenses': [
            {
                'id': e.id,
                'date': e.date,
                'amount': e.amount,
                'category': e.category_name,
                'subcategory': e.sub_category_name,
                'description': e.description,
                'type': e.expense_type,
            }
            for e in expenses
        ],
    }
    return json.dumps(payload, indent=2)


def render_export(expenses: Sequence[Expense], fmt: str, period_type: str, period_label: str) -> str:
    """Render an export document in ``fmt`` (``'csv'`` or ``'json'``)."""
    if fmt not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {fmt}")
    if fmt == 'csv':
        return expenses_to_csv(expenses)
    total = sum(e.amount for e in expenses)
    return expenses_to_json(expenses, period_type, period_label, total)


def write_export(
    expenses: Sequence[Expense],
    fmt: str,
    period_type: str,
    period_label: str,
    directory: Path | None = None,
) -> Path:
    """Write an export file and return its path."""
    content = render_export(expenses, fmt, period_type, period_label)
    target_dir = Path(directory) if directory is not None else config.EXPORTS_DIR
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / export_filename(period_label, fmt)
    with target.open('w', encoding='utf-8', newline='') as handle:
        handle.write(content)
    return target
