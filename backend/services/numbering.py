# backend/services/numbering.py
"""
Quote numbering.

One global counter lives in the settings table under `next_quote_number`.
The read, the increment and the write happen inside a single transaction
with the counter row locked, so two callers can never receive the same
number. Deleting a quote never hands its number back.
"""

import logging
from collections import namedtuple

from sqlalchemy.exc import SQLAlchemyError

from models import db, Setting, Quote
from services.errors import StorageError

logger = logging.getLogger(__name__)

COUNTER_KEY = 'next_quote_number'
PREFIX_KEY = 'quote_prefix'
DEFAULT_PREFIX = '3DQ'

QuoteNumber = namedtuple('QuoteNumber', ['quote_number', 'raw_number'])


def format_quote_number(prefix, counter):
    """'3DQ', 7 -> '3DQ0007'"""
    return f"{prefix}{counter:04d}"


def _current_prefix():
    setting = db.session.get(Setting, PREFIX_KEY)
    if setting and setting.value:
        return setting.value
    return DEFAULT_PREFIX


def _parse_counter(setting):
    try:
        counter = int(setting.value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid quote counter value {setting.value!r}, restarting at 1")
        return 1
    return max(counter, 1)


def _first_unused(prefix, counter):
    """Smallest counter >= `counter` whose formatted number no quote uses yet."""
    # Numbers typed in by hand can sit ahead of the counter.
    while Quote.query.filter_by(quote_number=format_quote_number(prefix, counter)).first() is not None:
        counter += 1
    return counter


def allocate_quote_number():
    """
    Reserve the next number inside the caller's transaction.

    The counter row is read with SELECT ... FOR UPDATE and incremented before
    the caller commits. Callers that need a standalone number use
    next_quote_number() instead.
    """
    counter_row = (
        db.session.query(Setting)
        .filter(Setting.key == COUNTER_KEY)
        .with_for_update()
        .one_or_none()
    )
    if counter_row is None:
        counter_row = Setting(key=COUNTER_KEY, value='1')
        db.session.add(counter_row)

    prefix = _current_prefix()
    counter = _first_unused(prefix, _parse_counter(counter_row))

    counter_row.value = str(counter + 1)
    db.session.flush()

    return QuoteNumber(format_quote_number(prefix, counter), counter)


def next_quote_number():
    """Allocate and commit the next quote number."""
    try:
        number = allocate_quote_number()
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to allocate quote number: {e}")
        raise StorageError('Failed to allocate quote number') from e

    logger.info(f"Allocated quote number {number.quote_number}")
    return number


def peek_quote_number():
    """
    The number the next allocation will return, without consuming it.

    Numbers already saved on a quote are skipped, so the preview is always
    free at the time it is read.
    """
    counter_row = db.session.get(Setting, COUNTER_KEY)
    counter = _parse_counter(counter_row) if counter_row else 1
    prefix = _current_prefix()
    counter = _first_unused(prefix, counter)
    return QuoteNumber(format_quote_number(prefix, counter), counter)
