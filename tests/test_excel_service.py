"""
Tests for guest list Excel import/export
"""

import io

import pandas as pd

from app.schemas.guest import Companion, Guest
from app.services.excel_service import ExcelService

def create_test_excel(data):
    """Helper function to create Excel bytes from data"""
    df = pd.DataFrame(data)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, index=False)
    return buffer.getvalue()

def test_validate_excel_structure_valid():
    """Header matching ignores case and surrounding spaces"""
    df = pd.DataFrame({' NAME ': ['John Smith'], 'Allowed Guests': [2]})

    valid, errors = ExcelService.validate_excel_structure(df)
    assert valid
    assert errors == []

def test_validate_excel_structure_missing_columns():
    df = pd.DataFrame({'Name': ['John Smith'], 'Role': ['Friend']})

    valid, errors = ExcelService.validate_excel_structure(df)
    assert not valid
    assert 'missing required columns' in errors[0].lower()
    assert 'allowed guests' in errors[0]

def test_validate_allowed_guests():
    df = pd.DataFrame({
        'Name': ['A', 'B', 'C', 'D'],
        'Allowed Guests': [1, 0, 'two', 1.5],
    })

    valid, errors = ExcelService.validate_data_constraints(df)
    assert not valid
    assert [e.split(':')[0] for e in errors] == ['Row 3', 'Row 4', 'Row 5']

def test_validate_duplicate_names():
    df = pd.DataFrame({
        'Name': ['John Smith', 'john  smith.', 'Mary Johnson'],
        'Allowed Guests': [1, 1, 1],
    })

    valid, errors = ExcelService.validate_data_constraints(df)
    assert not valid
    assert errors == ["Duplicate guest name 'john smith' in file"]

def test_parse_guest_rows():
    content = create_test_excel({
        'Name': [' John Smith ', 'Mary Johnson', None],
        'Allowed Guests': [3, 1, None],
        'Role': ['Friend', None, None],
        'VIP': ['Yes', 'No', None],
        'Table': ['T1', None, None],
        'Notes': ['ignored', 'ignored', None],
    })

    success, errors, rows = ExcelService.parse_guest_rows(content)

    assert success, errors
    assert rows == [
        {'name': 'John Smith', 'allowed_guests': 3, 'role': 'Friend', 'table_number': 'T1', 'is_vip': True},
        {'name': 'Mary Johnson', 'allowed_guests': 1, 'is_vip': False},
    ]

def test_parse_guest_rows_reports_bad_file():
    success, errors, rows = ExcelService.parse_guest_rows(b'not an excel file')

    assert not success
    assert errors[0].startswith('Error reading Excel file')
    assert rows == []

def test_parse_guest_rows_reports_validation_errors():
    content = create_test_excel({'Name': ['John Smith'], 'Allowed Guests': [0]})

    success, errors, rows = ExcelService.parse_guest_rows(content)

    assert not success
    assert errors == ['Row 2: Allowed Guests must be a whole number of at least 1']
    assert rows == []

def test_create_template_is_importable():
    success, errors, rows = ExcelService.parse_guest_rows(ExcelService.create_template())

    assert success, errors
    assert [r['name'] for r in rows] == ['Sample Guest 1', 'Sample Guest 2', 'Sample Guest 3']
    assert rows[2]['is_vip'] is True

def test_export_guests():
    guests = [
        Guest(
            id='g1',
            name='John Smith',
            role='Friend',
            allowed_guests=3,
            companions=[
                Companion(name='Jane Smith', relationship='Spouse'),
                Companion(name='Tom'),
                Companion(),
            ],
            is_vip=True,
            status='confirmed',
        ),
        Guest(id='g2', name='Mary Johnson'),
    ]

    df = pd.read_excel(io.BytesIO(ExcelService.export_guests(guests)))

    assert list(df.columns) == ExcelService.EXPORT_COLUMNS
    assert df.loc[0, 'Name'] == 'John Smith'
    assert df.loc[0, 'Companions'] == 'Jane Smith (Spouse); Tom'
    assert df.loc[0, 'VIP'] == 'Yes'
    assert df.loc[0, 'Status'] == 'confirmed'
    assert df.loc[1, 'VIP'] == 'No'
    assert df.loc[1, 'Allowed Guests'] == 1

def test_validate_allowed_guests_not_finite():
    df = pd.DataFrame({
        'Name': ['A', 'B'],
        'Allowed Guests': [float('inf'), float('-inf')],
    })

    valid, errors = ExcelService.validate_data_constraints(df)
    assert not valid
    assert [e.split(':')[0] for e in errors] == ['Row 2', 'Row 3']
