"""Formatting utilities for currency and percentage display."""

from __future__ import annotations

from typing import Union

from . import config


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a currency amount with proper formatting.

    Args:
        amount: The amount to format
        include_sign: Whether to include the currency symbol

    Returns:
        Formatted currency string (e.g., "€1,234.56" or "1,234.56")

    Example:
        >>> format_currency(1234.56)
        '€1,234.56'
        >>> format_currency(-200)
        '-€200.00'
    """
    formatted = f"{abs(amount):,.2f}"
    sign = '-' if amount < 0 else ''
    symbol = config.CURRENCY_SYMBOL if include_sign else ''
    return f"{sign}{symbol}{formatted}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format a percentage value, e.g. ``format_percentage(120)`` -> ``'120.0%'``."""
    return f"{value:.{decimals}f}%"

