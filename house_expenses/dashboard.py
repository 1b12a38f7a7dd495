"""Streamlit app for the house expenses dashboard.

This module loads categories, expenses and the user's budget limits
from the backend, then renders spending totals, the budget limit card,
the pending payments feed, rollover alerts and the category breakdown.

To run the dashboard from the command line::

    streamlit run house_expenses/dashboard.py

or use ``run_dashboard.py`` at the project root.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date
from typing import List, Optional, Sequence

import pandas as pd
import streamlit as st

# Support both ``streamlit run house_expenses/dashboard.py`` and package imports.
if __package__:
    from . import config
    from . import visualization as viz
    from .api_client import ApiError, HouseExpensesClient
    from .budget_limit import evaluate_user_limits
    from .export import export_filename, render_export
    from .formatting import format_currency, format_percentage
    from .mandatory import aggregate_mandatory_expenses, filter_feed, payment_prefill, total_remaining
    from .models import ANNUAL, MONTHLY, Expense, Period, PaymentStatus, sort_categories
    from .rollover import MonthRolloverDetector
    from .spending import (
        annual_chart_data,
        category_breakdown,
        expenses_frame,
        monthly_chart_data,
        period_total,
        spending_totals,
        weekly_chart_data,
    )
    from .state_storage import JsonFileStore
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from house_expenses import config  # type: ignore
    from house_expenses import visualization as viz  # type: ignore
    from house_expenses.api_client import ApiError, HouseExpensesClient  # type: ignore
    from house_expenses.budget_limit import evaluate_user_limits  # type: ignore
    from house_expenses.export import export_filename, render_export  # type: ignore
    from house_expenses.formatting import format_currency, format_percentage  # type: ignore
    from house_expenses.mandatory import (  # type: ignore
        aggregate_mandatory_expenses,
        filter_feed,
        payment_prefill,
        total_remaining,
    )
    from house_expenses.models import ANNUAL, MONTHLY, Expense, Period, PaymentStatus, sort_categories  # type: ignore
    from house_expenses.rollover import MonthRolloverDetector  # type: ignore
    from house_expenses.spending import (  # type: ignore
        annual_chart_data,
        category_breakdown,
        expenses_frame,
        monthly_chart_data,
        period_total,
        spending_totals,
        weekly_chart_data,
    )
    from house_expenses.state_storage import JsonFileStore  # type: ignore

logger = logging.getLogger(__name__)


def available_months(today: date, start: Optional[tuple] = None) -> List[Period]:
    """Months the user can navigate to, newest first, never before the calendar start."""
    start_year, start_month = start or config.CALENDAR_START
    first = Period(start_year, start_month)
    current = Period.for_date(today)
    months: List[Period] = []
    while (current.year, current.month) >= (first.year, first.month):
        months.append(current)
        current = current.previous_month()
    return months or [Period.for_date(today)]


def feed_table(feed: Sequence[PaymentStatus]) -> pd.DataFrame:
    """Tabular view of pending payments for ``st.dataframe``."""
    columns = ['Payment', 'Category', 'Expected', 'Paid', 'Remaining', 'Payments', 'Last Payment', 'Fixed']
    return pd.DataFrame(
        [
            {
                'Payment': s.sub_category_name,
                'Category': s.category_name,
                'Expected': s.expected_amount,
                'Paid': s.paid_amount,
                'Remaining': s.remaining_amount,
                'Payments': s.payment_count,
                'Last Payment': s.last_payment_date or '',
                'Fixed': s.is_fixed,
            }
            for s in feed
        ],
        columns=columns,
    )


def _rollover_detector() -> MonthRolloverDetector:
    if 'rollover_detector' not in st.session_state:
        st.session_state['rollover_detector'] = MonthRolloverDetector(JsonFileStore(config.STATE_PATH))
    return st.session_state['rollover_detector']


def _load_data(client: HouseExpensesClient):
    try:
        categories = sort_categories(client.get_categories())
        expenses = client.get_all_expenses()
        limits = client.get_profile()
    except ApiError as exc:  # pragma: no cover - UI display only
        st.error(f"Failed to load data from the backend: {exc.message}")
        st.stop()
    return categories, expenses, limits


def pay_pending_item(client: HouseExpensesClient, status: PaymentStatus, day: date) -> Optional[Expense]:
    """Book an expense for a pending item using its pre-filled values.

    The amount is the item's expected amount (the fixed charge, or the
    full limit of a capped subcategory), dated ``day``.
    """
    prefill = payment_prefill(status)
    payload = {
        'amount': prefill['amount'],
        'categoryId': prefill['categoryId'],
        'subCategoryId': prefill['subCategoryId'],
        'description': status.sub_category_name,
        'date': day.isoformat(),
    }
    created = client.create_expense(payload)
    logger.info("Booked payment for %s (%s)", status.sub_category_name, payload['amount'])
    return created


def _render_pending_payments(feed: Sequence[PaymentStatus], client: HouseExpensesClient, today: date) -> None:
    st.subheader("Pending Payments")
    month_tab, year_tab = st.tabs(["This Month", "This Year"])
    for tab, expense_type in ((month_tab, MONTHLY), (year_tab, ANNUAL)):
        with tab:
            scoped = filter_feed(feed, expense_type)
            if not scoped:
                st.success("All caught up! No pending mandatory payments.")
                continue
            st.metric("Total Remaining", format_currency(total_remaining(scoped)), f"{len(scoped)} pending")
            st.plotly_chart(viz.create_pending_payments_chart(scoped), use_container_width=True)
            st.dataframe(feed_table(scoped), use_container_width=True)
            for status in scoped:
                cols = st.columns([4, 2, 1])
                cols[0].write(f"**{status.sub_category_name}** · {status.category_name}")
                cols[1].write(format_currency(status.expected_amount))
                if cols[2].button("Pay", key=f"pay-{expense_type}-{status.sub_category_id}"):
                    try:
                        pay_pending_item(client, status, today)
                    except ApiError as exc:  # pragma: no cover - UI display only
                        st.error(f"Could not record the payment: {exc.message}")
                    else:
                        st.rerun()


def _render_rollover_alerts(detector: MonthRolloverDetector) -> None:
    alerts = detector.alerts
    if not alerts:
        return
    st.warning(f"{len(alerts)} fixed expense(s) were not fully paid last month")
    for alert in alerts:
        cols = st.columns([4, 2, 1])
        cols[0].write(f"**{alert.sub_category_name}** · {alert.category_name}")
        cols[1].write(format_currency(alert.expected_amount))
        if cols[2].button("Dismiss", key=f"dismiss-{alert.id}"):
            detector.dismiss(alert.id)
            st.rerun()


def main() -> None:
    """Entry point for the Streamlit app."""
    logging.basicConfig(level=logging.INFO)
    config.ensure_data_directories()
    st.set_page_config(page_title="House Expenses", layout="wide", initial_sidebar_state="expanded")
    st.title("House Expenses")

    today = date.today()
    months = available_months(today)
    st.sidebar.header("Period")
    selected: Period = st.sidebar.selectbox("Month", options=months, format_func=lambda p: p.label, index=0)

    client = HouseExpensesClient()
    categories, expenses, limits = _load_data(client)
    frame = expenses_frame(expenses)

    detector = _rollover_detector()
    detector.check(categories, expenses)
    _render_rollover_alerts(detector)

    totals = spending_totals(frame, today)
    monthly_spent = period_total(frame, selected)
    annual_spent = period_total(frame, selected.as_year())
    week_col, month_col, year_col = st.columns(3)
    week_col.metric("This Week", format_currency(totals['weekly']))
    month_col.metric(f"Spent in {selected.label}", format_currency(monthly_spent))
    year_col.metric(f"Spent in {selected.year}", format_currency(annual_spent))

    limit_statuses = evaluate_user_limits(limits, monthly_spent, annual_spent)
    for name, status in limit_statuses.items():
        if status is None:
            continue
        st.plotly_chart(viz.create_budget_gauge(status, title=f"{name.title()} Budget Limit"), use_container_width=True)
        remaining_label = "Over by" if status.is_exceeded else "Remaining"
        st.caption(
            f"{format_currency(status.current_spending)} of {format_currency(status.limit)} · "
            f"{remaining_label} {format_currency(abs(status.remaining_amount))} · "
            f"{format_percentage(status.utilization_percentage)}"
        )

    feed = aggregate_mandatory_expenses(categories, expenses, selected)
    _render_pending_payments(feed, client, today)

    st.subheader("Top Categories")
    breakdown = category_breakdown(frame, categories, selected, limit=5)
    st.plotly_chart(viz.create_category_breakdown_chart(breakdown), use_container_width=True)

    st.subheader("Spending over time")
    week_tab, month_tab, year_tab = st.tabs(["Week", "Month", "Year"])
    with week_tab:
        st.plotly_chart(viz.create_chart_data_figure(weekly_chart_data(frame, today), "This Week"), use_container_width=True)
    with month_tab:
        st.plotly_chart(viz.create_chart_data_figure(monthly_chart_data(frame, selected), selected.label), use_container_width=True)
    with year_tab:
        st.plotly_chart(
            viz.create_chart_data_figure(annual_chart_data(frame, selected.year, today), str(selected.year)),
            use_container_width=True,
        )

    st.sidebar.header("Export")
    fmt = st.sidebar.radio("Format", options=["csv", "json"], horizontal=True)
    period_expenses = [e for e in expenses if e.date.startswith(f"{selected.year}-{selected.month:02d}")]
    st.sidebar.download_button(
        "Download expenses",
        data=render_export(period_expenses, fmt, MONTHLY, selected.label),
        file_name=export_filename(selected.label, fmt),
        mime="text/csv" if fmt == "csv" else "application/json",
    )


if __name__ == "__main__":  # pragma: no cover
    main()
