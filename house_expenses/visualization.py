"""Plotly visualisation helpers for the house expenses dashboard.

Each function accepts the objects returned by :mod:`spending`,
:mod:`mandatory` and :mod:`budget_limit` and produces an interactive
Plotly figure that Streamlit renders via ``st.plotly_chart``.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import BudgetLimitStatus, PaymentStatus
from .spending import ChartData

LEVEL_COLORS = {
    'ok': '#2ECC71',
    'warning': '#F39C12',
    'danger': '#E74C3C',
    'exceeded': '#E74C3C',
}


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def progress_width(utilization_percentage: float) -> float:
    """Clamp a utilisation percentage to the 0–100 range of a progress bar."""
    return float(np.clip(utilization_percentage, 0.0, 100.0))


def create_budget_gauge(status: Optional[BudgetLimitStatus], title: str = "Budget Limit") -> go.Figure:
    """Horizontal progress bar showing spending against the limit.

    Parameters
    ----------
    status : BudgetLimitStatus, optional
        Evaluated limit.  ``None`` yields an empty figure.
    title : str
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Single-bar chart clamped to 100% with the real figure in the label.
    """
    if status is None:
        return _empty_figure("No budget limit configured")
    width = progress_width(status.utilization_percentage)
    color = LEVEL_COLORS.get(status.level, LEVEL_COLORS['ok'])
    fig = go.Figure(
        go.Bar(
            x=[width],
            y=[""],
            orientation="h",
            marker_color=color,
            text=[f"{status.utilization_percentage:.0f}%"],
            textposition="inside",
        )
    )
    fig.update_layout(
        title=title,
        xaxis=dict(range=[0, 100], title="Utilisation (%)"),
        height=180,
        showlegend=False,
    )
    return fig


def create_pending_payments_chart(feed: Sequence[PaymentStatus], title: str | None = None) -> go.Figure:
    """Stacked bars of paid vs remaining amounts for each pending payment."""
    if not feed:
        return _empty_figure("All caught up!")
    df = pd.DataFrame(
        {
            "Payment": [s.sub_category_name for s in feed],
            "Paid": [s.paid_amount for s in feed],
            "Remaining": [max(s.remaining_amount, 0.0) for s in feed],
        }
    )
    long_df = df.melt(id_vars="Payment", var_name="Status", value_name="Amount")
    fig = px.bar(
        long_df,
        x="Amount",
        y="Payment",
        color="Status",
        orientation="h",
        color_discrete_map={"Paid": LEVEL_COLORS['ok'], "Remaining": LEVEL_COLORS['warning']},
    )
    fig.update_layout(
        title=title or "Pending Payments",
        barmode="stack",
        xaxis_title="Amount",
        yaxis_title="",
    )
    return fig


def create_category_breakdown_chart(breakdown: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Bar chart of spending per category using each category's colour."""
    if breakdown is None or breakdown.empty:
        return _empty_figure()
    colors = [c if c else LEVEL_COLORS['ok'] for c in breakdown["Color"]]
    fig = go.Figure(
        go.Bar(
            x=breakdown["Category"],
            y=breakdown["Amount"],
            marker_color=colors,
            text=[f"{p:.1f}%" for p in breakdown["Percentage"]],
            textposition="outside",
        )
    )
    fig.update_layout(
        title=title or "Top Categories",
        xaxis_title="Category",
        yaxis_title="Amount",
    )
    return fig


def create_chart_data_figure(chart: ChartData, title: str | None = None) -> go.Figure:
    """Bar chart for a weekly, monthly or annual series with its average line."""
    if chart.points.empty:
        return _empty_figure()
    fig = px.bar(chart.points, x="label", y="value")
    fig.add_hline(y=chart.average, line_dash="dash", annotation_text="Average")
    fig.update_layout(
        title=title or "Spending",
        xaxis_title="",
        yaxis_title="Amount",
    )
    return fig
