"""Argument checks shared by the ledger services.

Values arrive already parsed from the UI layer. Anything that is not a real,
finite number is rejected; nothing is coerced.
"""
import math
import numbers

from fundledger.config import ALLOWED_TERMS, CURRENCY_PLACES
from fundledger.exceptions import ValidationError
from fundledger.models import FeeDisposition


def require_amount(amount, field_name="amount"):
    """Return `amount` as a float rounded to cents, or raise ValidationError."""
    if isinstance(amount, bool) or not isinstance(amount, numbers.Real):
        raise ValidationError(f"{field_name} must be a number", {field_name: repr(amount)})
    value = float(amount)
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f"{field_name} must be a finite number", {field_name: repr(amount)})
    value = round(value, CURRENCY_PLACES)
    if value <= 0:
        raise ValidationError(f"{field_name} must be at least 0.01", {field_name: amount})
    return value


def require_term(term_months):
    if isinstance(term_months, bool) or not isinstance(term_months, numbers.Integral):
        raise ValidationError("term_months must be an integer", {'term_months': repr(term_months)})
    if int(term_months) not in ALLOWED_TERMS:
        raise ValidationError(
            f"term_months must be one of {ALLOWED_TERMS}",
            {'term_months': int(term_months)}
        )
    return int(term_months)


def require_disposition(disposition):
    if disposition not in FeeDisposition.ALL:
        raise ValidationError(
            f"fee disposition must be one of {FeeDisposition.ALL}",
            {'fee_disposition': repr(disposition)}
        )
    return disposition


def require_id(value, field_name):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be a non-empty string", {field_name: repr(value)})
    return value


def require_year(year):
    if isinstance(year, bool) or not isinstance(year, numbers.Integral):
        raise ValidationError("year must be an integer", {'year': repr(year)})
    return int(year)


def require_non_negative(amount, field_name="amount"):
    """Like require_amount but allows zero (yearly history corrections)."""
    if isinstance(amount, bool) or not isinstance(amount, numbers.Real):
        raise ValidationError(f"{field_name} must be a number", {field_name: repr(amount)})
    value = float(amount)
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f"{field_name} must be a finite number", {field_name: repr(amount)})
    value = round(value, CURRENCY_PLACES)
    if value < 0:
        raise ValidationError(f"{field_name} must not be negative", {field_name: amount})
    return value or 0.0
