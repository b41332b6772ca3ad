"""Calendar helpers for due dates and cool-off arithmetic."""
from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from fundledger.config import (
    PAYMENT_DUE_DAY,
    DATE_FORMAT_STORAGE,
    DATETIME_FORMAT_STORAGE,
    DATETIME_FORMAT_STORAGE_FRACTIONAL,
)


def as_date(value):
    """Return the calendar date of a date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    return value


def month_diff(earlier, later):
    """Whole calendar months between two dates, ignoring the day of month.

    Jan 31 -> Feb 1 counts as one month; Jan 1 -> Jan 31 counts as zero.
    """
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def first_due_date(start):
    """The due day of the month following `start`."""
    return (as_date(start) + relativedelta(months=1)).replace(day=PAYMENT_DUE_DAY)


def advance_due_date(due):
    """Roll a due date forward one month, pinned to the due day."""
    return (as_date(due).replace(day=1) + relativedelta(months=1)).replace(day=PAYMENT_DUE_DAY)


def installment_due_date(start, number):
    """Due date of installment `number` (1-based) for a loan started on `start`."""
    return (as_date(start).replace(day=1) + relativedelta(months=number)).replace(day=PAYMENT_DUE_DAY)


def is_past_due(now, due):
    """Strict calendar-date comparison; the due day itself is on time."""
    return as_date(now) > as_date(due)


def format_date(value):
    if value is None:
        return None
    return as_date(value).strftime(DATE_FORMAT_STORAGE)


def format_datetime(value):
    if value is None:
        return None
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.microsecond:
        return value.strftime(DATETIME_FORMAT_STORAGE_FRACTIONAL)
    return value.strftime(DATETIME_FORMAT_STORAGE)


def parse_date(value):
    if value is None:
        return None
    return datetime.strptime(str(value)[:10], DATE_FORMAT_STORAGE).date()


def parse_datetime(value):
    if value is None:
        return None
    text = str(value)
    if len(text) <= 10:
        return datetime.strptime(text, DATE_FORMAT_STORAGE)
    if "." in text:
        return datetime.strptime(text, DATETIME_FORMAT_STORAGE_FRACTIONAL)
    return datetime.strptime(text[:19], DATETIME_FORMAT_STORAGE)
