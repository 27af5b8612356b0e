"""
Helpers for reading submitted form values.

Each parser returns None for blank input and raises ValueError for malformed
input, so callers can record a field error.
"""
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.core.validators import DecimalValidator
from django.utils import timezone

DATE_FORMAT = '%Y-%m-%d'
DATETIME_FORMATS = ('%Y-%m-%dT%H:%M', '%Y-%m-%d %H:%M', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d')


def clean(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def parse_int(value):
    value = clean(value)
    if not value:
        return None
    return int(value)


def parse_decimal(value, max_digits=None, decimal_places=None):
    """
    Parse a finite decimal.

    When max_digits is given the number must also fit a DecimalField of that
    shape, checked with Django's DecimalValidator.
    """
    value = clean(value)
    if not value:
        return None
    try:
        number = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"Invalid number: {value}")
    if not number.is_finite():
        raise ValueError(f"Invalid number: {value}")
    if max_digits is not None:
        try:
            DecimalValidator(max_digits, decimal_places)(number)
        except ValidationError as e:
            raise ValueError(e.messages[0])
    return number


def parse_date(value):
    if hasattr(value, 'year') and not isinstance(value, str):
        return value
    value = clean(value)
    if not value:
        return None
    return datetime.strptime(value, DATE_FORMAT).date()


def parse_datetime(value):
    """Parse an HTML datetime-local value into an aware datetime."""
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    value = clean(value)
    if not value:
        return None
    for fmt in DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return timezone.make_aware(parsed)
    raise ValueError(f"Invalid date/time: {value}")


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return clean(value).lower() in ('1', 'true', 'on', 'yes')


def parse_choice(value, choices, default=None):
    """Return value if it is one of the choice keys, else default."""
    value = clean(value)
    valid = {str(key) for key, _ in choices}
    return value if value in valid else default
