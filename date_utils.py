"""
Library System Date Utilities
All date handling for loans and returns - dates are calendar days stored as YYYY-MM-DD text
"""

import calendar
import re
from datetime import date, timedelta

from errors import InvalidFormat

DATE_FORMAT = '%Y-%m-%d'

# accepted year range for parsed dates
MIN_YEAR = 1900
MAX_YEAR = 3000

_DATE_PATTERN = re.compile(r'(\d{4})-(\d{2})-(\d{2})', re.ASCII)


def today():
    return date.today()


def add_days(d, n):
    """returns the date n days after d (n may be negative)"""
    start = as_date(d)
    try:
        return start + timedelta(days=n)
    except OverflowError:
        raise InvalidFormat(f"{format_date(start)} + {n} days", 'result is outside the supported date range')


def diff_days(a, b):
    """signed number of whole days from a to b, i.e. b - a"""
    return (as_date(b) - as_date(a)).days


def parse_date(s, min_year=MIN_YEAR, max_year=MAX_YEAR):
    if not isinstance(s, str):
        raise InvalidFormat(s, 'not a string')

    match = _DATE_PATTERN.fullmatch(s)
    if match is None:
        raise InvalidFormat(s)

    year, month, day = (int(part) for part in match.groups())

    if year < min_year or year > max_year:
        raise InvalidFormat(s, f'year must be between {min_year} and {max_year}')
    if month < 1 or month > 12:
        raise InvalidFormat(s, 'month must be between 1 and 12')
    if day < 1 or day > 31:
        raise InvalidFormat(s, 'day must be between 1 and 31')

    # re-check the day against the real month length (leap years included)
    days_in_month = calendar.monthrange(year, month)[1]
    if day > days_in_month:
        raise InvalidFormat(s, f'{calendar.month_name[month]} {year} has only {days_in_month} days')

    return date(year, month, day)


def format_date(d):
    d = as_date(d)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def is_valid_date_string(s, min_year=MIN_YEAR, max_year=MAX_YEAR):
    try:
        parse_date(s, min_year, max_year)
    except InvalidFormat:
        return False
    return True


def as_date(value):
    """accepts a date, a datetime or a YYYY-MM-DD string and returns a plain date"""
    if isinstance(value, str):
        return parse_date(value)
    # datetime is a subclass of date, drop the time part so day counts stay whole
    if hasattr(value, 'date') and callable(value.date):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidFormat(value, f'unsupported type {type(value).__name__}')
