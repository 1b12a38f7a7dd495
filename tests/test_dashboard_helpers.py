from datetime import date

import pandas as pd

from house_expenses.budget_limit import evaluate_budget_limit
from house_expenses.dashboard import available_months, feed_table, pay_pending_item
from house_expenses.formatting import format_currency, format_percentage
from house_expenses.mandatory import aggregate_mandatory_expenses
from house_expenses.models import Category, Expense, Period, SubCategory
from house_expenses.spending import ChartData, category_breakdown, monthly_chart_data
from house_expenses.visualization import (
    create_budget_gauge,
    create_category_breakdown_chart,
    create_chart_data_figure,
    create_pending_payments_chart,
    progress_width,
)


def _build_feed():
    categories = [
        Category(id='housing', name='Housing', color='#3498DB', sub_categories=(
            SubCategory.create('rent', 'Rent', 'housing', fixed_amount=900),
            SubCategory.create('repairs', 'Repairs', 'housing', budget_limit=250, is_mandatory=True),
        )),
    ]
    expenses = [Expense(id='e1', amount=400, date='2026-01-05', category_id='housing', sub_category_id='rent')]
    return aggregate_mandatory_expenses(categories, expenses, Period(2026, 1))


def test_available_months_newest_first_back_to_start():
    months = available_months(date(2026, 3, 10), start=(2025, 11))

    assert [p.key for p in months] == ['2026-3', '2026-2', '2026-1', '2025-12', '2025-11']
    assert months[0].label == 'March 2026'


def test_available_months_never_empty():
    assert available_months(date(2025, 6, 1), start=(2026, 1)) == [Period(2025, 6)]


def test_feed_table_columns():
    table = feed_table(_build_feed())

    assert list(table.columns) == ['Payment', 'Category', 'Expected', 'Paid', 'Remaining', 'Payments', 'Last Payment', 'Fixed']
    assert list(table['Payment']) == ['Rent', 'Repairs']
    assert list(table['Remaining']) == [500, 250]
    assert list(table['Last Payment']) == ['2026-01-05', '']
    assert feed_table([]).empty


def test_currency_and_percentage_formatting():
    assert format_currency(1234.56) == '€1,234.56'
    assert format_currency(-200) == '-€200.00'
    assert format_currency(5, include_sign=False) == '5.00'
    assert format_percentage(120) == '120.0%'
    assert format_percentage(33.333, decimals=2) == '33.33%'


def test_budget_gauge_clamps_progress():
    assert progress_width(120.0) == 100.0
    assert progress_width(-5.0) == 0.0

    fig = create_budget_gauge(evaluate_budget_limit(1000, 1200), title='Monthly Budget Limit')
    assert fig.data[0].x == (100.0,)
    assert fig.data[0].text == ('120%',)
    assert fig.layout.title.text == 'Monthly Budget Limit'

    assert len(create_budget_gauge(None).data) == 0


def test_figures_from_feed_and_breakdown():
    pending = create_pending_payments_chart(_build_feed())
    assert {trace.name for trace in pending.data} == {'Paid', 'Remaining'}
    assert len(create_pending_payments_chart([]).data) == 0

    expenses = [Expense(id='e1', amount=80, date='2026-01-05', category_id='housing')]
    breakdown = category_breakdown(expenses, [Category(id='housing', name='Housing', color='#3498DB')], Period(2026, 1))
    chart = create_category_breakdown_chart(breakdown)
    assert list(chart.data[0].x) == ['Housing']


def test_chart_data_figure_draws_average_line():
    fig = create_chart_data_figure(monthly_chart_data([], Period(2026, 2)), 'February 2026')
    assert len(fig.data) == 1
    assert len(fig.layout.shapes) == 1

    empty = ChartData(points=pd.DataFrame(columns=['label', 'value']), total=0.0, average=0.0)
    assert len(create_chart_data_figure(empty).data) == 0


class RecordingClient:
    def __init__(self):
        self.payloads = []

    def create_expense(self, payload):
        self.payloads.append(dict(payload))
        return Expense(id='new', amount=payload['amount'], date=payload['date'], sub_category_id=payload['subCategoryId'])


def test_pay_pending_item_books_prefilled_expense():
    rent, repairs = _build_feed()
    client = RecordingClient()

    created = pay_pending_item(client, rent, date(2026, 1, 20))
    pay_pending_item(client, repairs, date(2026, 1, 21))

    assert created.sub_category_id == 'rent'
    assert client.payloads == [
        {
            'amount': 900,
            'categoryId': 'housing',
            'subCategoryId': 'rent',
            'description': 'Rent',
            'date': '2026-01-20',
        },
        {
            'amount': 250,
            'categoryId': 'housing',
            'subCategoryId': 'repairs',
            'description': 'Repairs',
            'date': '2026-01-21',
        },
    ]
