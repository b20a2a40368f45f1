# backend/services/date_utils.py
import logging
from datetime import datetime, date

import pytz

from services.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = 'Europe/London'


def get_timezone(tz_name=None):
    """Resolve a timezone name, falling back to the default on unknown names."""
    try:
        return pytz.timezone(tz_name or DEFAULT_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{tz_name}', using {DEFAULT_TIMEZONE}")
        return pytz.timezone(DEFAULT_TIMEZONE)


def today_local(tz_name=None):
    """
    Today's date in the shop's timezone.

    A quote duplicated just after midnight local time should carry the local
    date, not the UTC one.
    """
    return datetime.now(get_timezone(tz_name)).date()


def parse_quote_date(value, field='date'):
    """
    Parse the date of a quote.

    Accepts a date/datetime, 'YYYY-MM-DD', or a full ISO timestamp as sent by
    browser date pickers (e.g. "2025-06-07T00:00:00.000Z"). Only the date part
    is kept.

    Raises:
        ValidationError: if the value is missing or cannot be parsed
    """
    if value is None or value == '':
        raise ValidationError('Date is required', field=field)

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    date_str = str(value).strip()
    try:
        if 'T' in date_str:
            if date_str.endswith('Z'):
                date_str = date_str[:-1] + '+00:00'
            return datetime.fromisoformat(date_str).date()
        return date.fromisoformat(date_str)
    except ValueError:
        logger.warning(f"Could not parse quote date '{value}'")
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", field=field)
