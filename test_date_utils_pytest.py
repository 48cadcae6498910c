"""
Pytest tests for date_utils.py
Covers day arithmetic across month, year and leap-year boundaries and strict YYYY-MM-DD parsing
"""

import pytest
from datetime import date, datetime

from date_utils import (
    add_days,
    diff_days,
    parse_date,
    format_date,
    is_valid_date_string,
    as_date,
)
from errors import InvalidFormat


def test_add_days_leap_year_boundary():
    """Test that Feb 29 exists in 2024 but not in 2025"""
    assert add_days(date(2024, 2, 28), 1) == date(2024, 2, 29)
    assert add_days(date(2025, 2, 28), 1) == date(2025, 3, 1)


def test_add_days_rolls_over_month_and_year():
    assert add_days(date(2024, 12, 25), 14) == date(2025, 1, 8)
    assert add_days(date(2025, 1, 31), 1) == date(2025, 2, 1)


def test_add_days_negative():
    assert add_days(date(2024, 3, 1), -1) == date(2024, 2, 29)
    assert add_days(date(2025, 1, 1), -1) == date(2024, 12, 31)


def test_add_days_accepts_date_strings():
    assert add_days('2025-01-01', 14) == date(2025, 1, 15)


@pytest.mark.parametrize('days', [10 ** 7, -(10 ** 7), 10 ** 10])
def test_add_days_out_of_range_is_invalid_format(days):
    with pytest.raises(InvalidFormat):
        add_days(date(2025, 1, 1), days)


def test_diff_days_is_signed():
    assert diff_days(date(2025, 1, 15), date(2025, 1, 20)) == 5
    assert diff_days(date(2025, 1, 20), date(2025, 1, 15)) == -5
    assert diff_days(date(2025, 1, 15), date(2025, 1, 15)) == 0


def test_diff_days_across_leap_year():
    assert diff_days(date(2024, 1, 1), date(2025, 1, 1)) == 366
    assert diff_days(date(2025, 1, 1), date(2026, 1, 1)) == 365


@pytest.mark.parametrize('start, n', [
    (date(2024, 2, 28), 1),
    (date(2024, 12, 31), 400),
    (date(2025, 3, 1), -365),
    (date(2000, 2, 29), 0),
])
def test_diff_days_inverts_add_days(start, n):
    assert diff_days(start, add_days(start, n)) == n


def test_diff_days_ignores_time_of_day():
    """Test that a late-evening timestamp still counts as the same calendar day"""
    assert diff_days(datetime(2025, 1, 15, 23, 59), datetime(2025, 1, 16, 0, 1)) == 1
    assert diff_days(datetime(2025, 1, 15, 0, 1), date(2025, 1, 15)) == 0


def test_parse_date_valid():
    assert parse_date('2025-01-15') == date(2025, 1, 15)
    assert parse_date('2024-02-29') == date(2024, 2, 29)


@pytest.mark.parametrize('value', [
    '2024/01/01',
    '2024.01.01',
    '24-01-01',
    '2024-1-5',
    '2024-13-01',
    '2024-00-10',
    '2024-01-00',
    '2024-01-32',
    '2025-02-29',
    '2024-04-31',
    '1899-12-31',
    '3001-01-01',
    '',
    'abcd-ef-gh',
    ' 2024-01-01',
    '2024-01-01\n',
    '٢٠٢٤-01-01',
])
def test_parse_date_rejects_invalid(value):
    with pytest.raises(InvalidFormat):
        parse_date(value)


def test_parse_date_rejects_non_strings():
    with pytest.raises(InvalidFormat):
        parse_date(20250115)


def test_parse_date_year_bounds_are_configurable():
    assert parse_date('1850-06-01', min_year=1800) == date(1850, 6, 1)
    with pytest.raises(InvalidFormat):
        parse_date('2100-01-01', max_year=2099)


def test_invalid_format_is_value_error():
    with pytest.raises(ValueError):
        parse_date('2025-02-30')


def test_format_date_zero_pads():
    assert format_date(date(2025, 3, 7)) == '2025-03-07'
    assert format_date(date(987, 1, 2)) == '0987-01-02'


@pytest.mark.parametrize('d', [date(2024, 2, 29), date(1900, 1, 1), date(3000, 12, 31), date(2025, 10, 9)])
def test_parse_format_round_trip(d):
    assert parse_date(format_date(d)) == d


def test_is_valid_date_string():
    assert is_valid_date_string('2024-02-29')
    assert not is_valid_date_string('2025-02-29')
    assert not is_valid_date_string('not a date')


def test_as_date_normalises_inputs():
    assert as_date(datetime(2025, 1, 15, 18, 30)) == date(2025, 1, 15)
    assert as_date('2025-01-15') == date(2025, 1, 15)
    assert as_date(date(2025, 1, 15)) == date(2025, 1, 15)
    with pytest.raises(InvalidFormat):
        as_date(3.14)
