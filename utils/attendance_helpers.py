import calendar
from datetime import datetime, date
from utils.exceptions import ValidationError


"""
Date utility functions for attendance and payroll periods
"""

def parse_datetime(value):
    """Accept a datetime or an ISO-8601 string; a trailing 'Z' is read as UTC."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            raise ValidationError(f"Invalid timestamp: {value}")
    raise ValidationError(f"Invalid timestamp: {value!r}")


def parse_date(value):
    """Parse YYYY-MM-DD string into date."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"Invalid date format: {value}. Expected YYYY-MM-DD")


def validate_period(month, year):
    """Coerce and check a payroll period, returning (month, year) as ints"""
    try:
        month = int(month)
        year = int(year)
    except (TypeError, ValueError):
        raise ValidationError("Month and year must be integers")

    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    if not 1900 <= year <= 9999:
        raise ValidationError(f"Invalid year: {year}")
    return month, year


def days_in_month(year, month):
    return calendar.monthrange(year, month)[1]


def month_range(year, month):
    """First and last calendar day of a month"""
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def to_naive_local(value):
    """Drop timezone info after converting to local time; rows store naive datetimes"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)
