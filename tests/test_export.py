import json

import pytest

from house_expenses.export import (
    CSV_COLUMNS,
    export_filename,
    expenses_to_csv,
    expenses_to_json,
    render_export,
    safe_filename,
    write_export,
)
from house_expenses.models import Expense


def _build_expenses():
    return [
        Expense(
            id='e1', amount=1200.0, date='2026-01-01', category_name='Housing',
            sub_category_name='Rent', description='January rent',
        ),
        Expense(id='e2', amount=12.4, date='2026-01-04', category_name='Food', expense_type='monthly'),
    ]


def test_safe_filename():
    assert safe_filename('January 2026') == 'january_2026'
    assert safe_filename('Año 2026!') == 'ao_2026'
    assert safe_filename('') == 'export'
    assert export_filename('2026', 'json') == 'expenses_2026.json'


def test_csv_has_header_and_two_decimal_amounts():
    lines = expenses_to_csv(_build_expenses()).splitlines()

    assert lines[0] == ','.join(CSV_COLUMNS)
    assert lines[0] == 'Date,Amount (EUR),Category,Subcategory,Description,Type'
    assert lines[1] == '2026-01-01,1200.00,Housing,Rent,January rent,monthly'
    assert lines[2] == '2026-01-04,12.40,Food,,,monthly'


def test_json_document_structure():
    document = json.loads(expenses_to_json(
        _build_expenses(), 'month', 'January 2026', 1212.4, exported_at='2026-02-01T10:00:00+00:00',
    ))

    assert document['exportedAt'] == '2026-02-01T10:00:00+00:00'
    assert document['period'] == 'month'
    assert document['periodLabel'] == 'January 2026'
    assert document['totalAmount'] == 1212.4
    assert document['expenseCount'] == 2
    assert document['expenses'][0] == {
        'id': 'e1',
        'date': '2026-01-01',
        'amount': 1200.0,
        'category': 'Housing',
        'subcategory': 'Rent',
        'description': 'January rent',
        'type': 'monthly',
    }


def test_render_rejects_unknown_format():
    with pytest.raises(ValueError):
        render_export(_build_expenses(), 'xlsx', 'month', 'January 2026')


def test_write_export_creates_file(tmp_path):
    path = write_export(_build_expenses(), 'json', 'month', 'January 2026', directory=tmp_path / 'exports')

    assert path.name == 'expenses_january_2026.json'
    document = json.loads(path.read_text(encoding='utf-8'))
    assert document['totalAmount'] == 1212.4
    assert document['expenseCount'] == 2

    csv_path = write_export([], 'csv', 'year', '2026', directory=tmp_path / 'exports')
    assert csv_path.read_text(encoding='utf-8').splitlines() == [','.join(CSV_COLUMNS)]
