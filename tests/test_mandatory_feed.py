from house_expenses.mandatory import (
    aggregate_mandatory_expenses,
    filter_feed,
    matching_window,
    payment_prefill,
    total_remaining,
)
from house_expenses.models import ANNUAL, MONTHLY, Category, Expense, Period, SubCategory

JANUARY = Period(2026, 1)


def _category(category_id, subs, expense_type=MONTHLY, name=None):
    return Category(
        id=category_id,
        name=name or category_id.title(),
        color='#3498DB',
        expense_type=expense_type,
        sub_categories=tuple(subs),
    )


def _expense(expense_id, amount, day, sub_id):
    return Expense(id=expense_id, amount=amount, date=day, sub_category_id=sub_id)


def test_partial_fixed_payment_is_pending():
    categories = [_category('housing', [SubCategory.create('rent', 'Rent', 'housing', fixed_amount=50)])]
    expenses = [_expense('e1', 20, '2026-01-03', 'rent'), _expense('e2', 20, '2026-01-20', 'rent')]

    feed = aggregate_mandatory_expenses(categories, expenses, JANUARY)

    assert len(feed) == 1
    status = feed[0]
    assert status.sub_category_id == 'rent'
    assert status.is_fixed
    assert not status.is_paid_this_period
    assert status.paid_amount == 40
    assert status.expected_amount == 50
    assert status.payment_count == 2
    assert status.last_payment_date == '2026-01-20'
    assert status.remaining_amount == 10


def test_exact_payment_counts_as_paid():
    categories = [_category('housing', [SubCategory.create('rent', 'Rent', 'housing', fixed_amount=50)])]
    expenses = [_expense('e1', 30, '2026-01-03', 'rent'), _expense('e2', 20, '2026-01-20', 'rent')]

    assert aggregate_mandatory_expenses(categories, expenses, JANUARY) == []


def test_overpayment_counts_as_paid():
    categories = [_category('housing', [SubCategory.create('rent', 'Rent', 'housing', fixed_amount=50)])]
    expenses = [_expense('e1', 80, '2026-01-03', 'rent')]

    assert aggregate_mandatory_expenses(categories, expenses, JANUARY) == []


def test_capped_subcategory_reports_full_limit_but_uses_installment():
    groceries = SubCategory.create('groceries', 'Groceries', 'food', budget_limit=500, is_mandatory=True)
    categories = [_category('food', [groceries])]
    expenses = [_expense('e1', 60, '2026-01-08', 'groceries')]

    feed = aggregate_mandatory_expenses(categories, expenses, JANUARY)

    assert len(feed) == 1
    assert feed[0].expected_amount == 500
    assert not feed[0].is_fixed
    assert feed[0].paid_amount == 60

    # the 20% installment (100) is reached, so the item drops off
    expenses.append(_expense('e2', 40, '2026-01-15', 'groceries'))
    assert aggregate_mandatory_expenses(categories, expenses, JANUARY) == []


def test_optional_subcategories_never_appear():
    subs = [
        SubCategory.create('dining', 'Dining', 'food', budget_limit=300, is_mandatory=False),
        SubCategory.create('snacks', 'Snacks', 'food'),
    ]
    categories = [_category('food', subs)]
    expenses = [_expense('e1', 1, '2026-01-02', 'dining')]

    assert aggregate_mandatory_expenses(categories, expenses, JANUARY) == []


def test_mandatory_without_amounts_is_skipped():
    categories = [_category('misc', [SubCategory.create('gifts', 'Gifts', 'misc', is_mandatory=True)])]
    assert aggregate_mandatory_expenses(categories, [], JANUARY) == []


def test_annual_categories_match_the_whole_year():
    insurance = SubCategory.create('car', 'Car insurance', 'yearly', fixed_amount=300)
    categories = [_category('yearly', [insurance], expense_type=ANNUAL)]
    expenses = [_expense('e1', 200, '2026-03-10', 'car')]

    feed = aggregate_mandatory_expenses(categories, expenses, Period(2026, 11))

    assert len(feed) == 1
    assert feed[0].paid_amount == 200
    assert feed[0].category_expense_type == ANNUAL

    expenses.append(_expense('e2', 100, '2026-07-01', 'car'))
    assert aggregate_mandatory_expenses(categories, expenses, Period(2026, 11)) == []


def test_monthly_categories_ignore_other_months():
    categories = [_category('housing', [SubCategory.create('rent', 'Rent', 'housing', fixed_amount=50)])]
    expenses = [_expense('e1', 50, '2025-12-31', 'rent'), _expense('e2', 50, '2026-02-01', 'rent')]

    feed = aggregate_mandatory_expenses(categories, expenses, JANUARY)

    assert len(feed) == 1
    assert feed[0].paid_amount == 0
    assert feed[0].payment_count == 0
    assert feed[0].last_payment_date is None


def test_feed_order_follows_input_and_is_deterministic():
    categories = [
        _category('utilities', [
            SubCategory.create('water', 'Water', 'utilities', fixed_amount=20),
            SubCategory.create('power', 'Power', 'utilities', fixed_amount=60),
        ]),
        _category('housing', [SubCategory.create('rent', 'Rent', 'housing', fixed_amount=800)]),
        _category('yearly', [SubCategory.create('tax', 'Property tax', 'yearly', fixed_amount=400)], ANNUAL),
    ]
    expenses = [_expense('e1', 10, '2026-01-05', 'water'), _expense('e2', 5, 'oops', 'power')]

    first = aggregate_mandatory_expenses(categories, expenses, JANUARY)
    second = aggregate_mandatory_expenses(categories, expenses, JANUARY)

    assert first == second
    assert [s.sub_category_id for s in first] == ['water', 'power', 'rent', 'tax']


def test_feed_helpers_split_and_total():
    categories = [
        _category('housing', [SubCategory.create('rent', 'Rent', 'housing', fixed_amount=800)]),
        _category('yearly', [SubCategory.create('tax', 'Property tax', 'yearly', fixed_amount=400)], ANNUAL),
    ]
    expenses = [_expense('e1', 300, '2026-01-05', 'rent')]
    feed = aggregate_mandatory_expenses(categories, expenses, JANUARY)

    assert [s.sub_category_id for s in filter_feed(feed, MONTHLY)] == ['rent']
    assert [s.sub_category_id for s in filter_feed(feed, ANNUAL)] == ['tax']
    assert total_remaining(feed) == 500 + 400
    assert payment_prefill(feed[0]) == {
        'categoryId': 'housing',
        'subCategoryId': 'rent',
        'amount': 800,
        'isFixed': True,
    }


def test_matching_window_widens_annual_categories_to_the_year():
    monthly = _category('housing', [])
    annual = _category('yearly', [], expense_type=ANNUAL)

    assert matching_window(monthly, JANUARY) == JANUARY
    window = matching_window(annual, JANUARY)
    assert window == Period(2026)
    assert window.is_annual and not JANUARY.is_annual
