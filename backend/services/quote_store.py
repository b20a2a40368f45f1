# backend/services/quote_store.py
"""
Persistence for the quote aggregate: a header row plus its filament lines,
hardware lines, print setup and labour.

Every write replaces the header and all four child collections together in
one transaction. total_cost is recomputed from the submitted lines before
each save; the value sent by the client is only compared and logged.
"""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, Quote, QuoteFilament, QuoteHardware, QuotePrintSetup, QuoteLabour
from services import pricing, reference_data
from services.date_utils import parse_quote_date, today_local
from services.errors import NotFoundError, ValidationError, StorageError
from services.numbering import allocate_quote_number
from services.settings_store import get_settings

logger = logging.getLogger(__name__)

CHILD_ATTRIBUTES = ['filaments', 'hardware', 'print_setup', 'labour']


# ---------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------

def _non_negative(value, field, default=0.0):
    if value is None or value == '':
        return default
    number = pricing.to_number(value)
    if number < 0:
        raise ValidationError(f'{field} cannot be negative', field=field)
    return number


def _whole_number(value, field, default, minimum):
    number = _non_negative(value, field, default)
    if number != int(number) or number < minimum:
        raise ValidationError(f'{field} must be a whole number of at least {minimum}', field=field)
    return int(number)


def _text(value):
    if value is None:
        return ''
    return str(value).strip()


def _validate_header(header, existing=None, quick=False):
    """
    Check the header fields and return clean column values.

    `existing` is the quote being updated; its number and title are kept
    when the caller omits them.
    """
    if not isinstance(header, dict):
        raise ValidationError('No data provided')

    quote_number = _text(header.get('quote_number'))
    if not quote_number:
        if existing is None:
            raise ValidationError('Quote number is required', field='quote_number')
        quote_number = existing.quote_number

    customer_name = _text(header.get('customer_name'))
    if not customer_name:
        raise ValidationError('Customer name is required', field='customer_name')

    if quick and header.get('date') in (None, ''):
        quote_date = today_local(_timezone_name())
    else:
        quote_date = parse_quote_date(header.get('date'))

    if not quick:
        for field in ('markup_percent', 'total_cost'):
            if header.get(field) is None:
                raise ValidationError(f'{field} is required', field=field)

    discount_percent = _non_negative(header.get('discount_percent'), 'discount_percent')
    if discount_percent > 100:
        raise ValidationError('discount_percent cannot exceed 100', field='discount_percent')

    title = _text(header.get('title'))
    if not title:
        title = existing.title if existing is not None else f"{quote_number} - {customer_name}"

    return {
        'quote_number': quote_number,
        'title': title,
        'customer_name': customer_name,
        'date': quote_date,
        'notes': _text(header.get('notes')) or None,
        'markup_percent': _non_negative(header.get('markup_percent'), 'markup_percent'),
        'discount_percent': discount_percent,
        'quantity': _whole_number(header.get('quantity'), 'quantity', default=1, minimum=1),
        'is_quick_quote': True if quick else bool(header.get('is_quick_quote', False)),
    }


def _ensure_number_available(quote_number, quote_id=None):
    query = Quote.query.filter(Quote.quote_number == quote_number)
    if quote_id is not None:
        query = query.filter(Quote.id != quote_id)
    if query.first() is not None:
        raise ValidationError(f'Quote number {quote_number} already exists', field='quote_number')


def _tax_rate(header, settings, existing=None):
    """
    Tax rate stored on the quote: the submitted value, else the rate the
    quote was saved with, else the current tax_rate setting. Later changes
    to the setting never reprice a saved quote.
    """
    if header.get('tax_rate') not in (None, ''):
        return _non_negative(header.get('tax_rate'), 'tax_rate')
    if existing is not None:
        return existing.tax_rate or 0.0
    return pricing.to_number(settings.get('tax_rate'))


def _timezone_name():
    return current_app.config.get('TIMEZONE')


def _pricing_settings():
    return get_settings()


# ---------------------------------------------------------------------
# Line builders: copy reference snapshots into new child rows
# ---------------------------------------------------------------------

def _build_filament_lines(lines):
    result = []
    for index, line in enumerate(lines or []):
        field = f'filaments[{index}]'
        if not line.get('filament_id'):
            raise ValidationError('Filament is required', field=f'{field}.filament_id')
        snapshot = reference_data.get_filament(line['filament_id'])

        price_per_gram = line.get('filament_price_per_gram')
        if price_per_gram is None or price_per_gram == '':
            price_per_gram = snapshot['filament_price_per_gram']
        price_per_gram = _non_negative(price_per_gram, f'{field}.filament_price_per_gram')
        grams_used = _non_negative(line.get('grams_used'), f'{field}.grams_used')

        result.append(QuoteFilament(
            filament_id=snapshot['filament_id'],
            filament_name=_text(line.get('filament_name')) or snapshot['filament_name'],
            filament_price_per_gram=price_per_gram,
            grams_used=grams_used,
            total_cost=pricing.filament_line_cost(grams_used, price_per_gram),
        ))
    return result


def _build_hardware_lines(lines):
    result = []
    for index, line in enumerate(lines or []):
        field = f'hardware[{index}]'
        if not line.get('hardware_id'):
            raise ValidationError('Hardware item is required', field=f'{field}.hardware_id')
        snapshot = reference_data.get_hardware(line['hardware_id'])

        unit_price = line.get('unit_price')
        if unit_price is None or unit_price == '':
            unit_price = snapshot['unit_price']
        unit_price = _non_negative(unit_price, f'{field}.unit_price')
        quantity = _whole_number(line.get('quantity'), f'{field}.quantity', default=1, minimum=0)

        result.append(QuoteHardware(
            hardware_id=snapshot['hardware_id'],
            hardware_name=_text(line.get('hardware_name')) or snapshot['hardware_name'],
            quantity=quantity,
            unit_price=unit_price,
            total_cost=pricing.hardware_line_cost(quantity, unit_price),
        ))
    return result


def _build_print_setup(print_setup, electricity_cost_per_kwh):
    if not print_setup:
        return None
    if not print_setup.get('printer_id'):
        raise ValidationError('Printer is required', field='print_setup.printer_id')
    snapshot = reference_data.get_printer(print_setup['printer_id'])

    print_time = _non_negative(print_setup.get('print_time'), 'print_setup.print_time')

    power = print_setup.get('power_cost')
    if power is None or power == '':
        power = pricing.power_cost(snapshot['power_usage'], print_time, electricity_cost_per_kwh)
    depreciation = print_setup.get('depreciation_cost')
    if depreciation is None or depreciation == '':
        depreciation = pricing.depreciation_cost(print_time, snapshot['depreciation_per_hour'])

    return QuotePrintSetup(
        printer_id=snapshot['printer_id'],
        printer_name=_text(print_setup.get('printer_name')) or snapshot['printer_name'],
        print_time=print_time,
        power_cost=_non_negative(power, 'print_setup.power_cost'),
        depreciation_cost=_non_negative(depreciation, 'print_setup.depreciation_cost'),
    )


def _build_labour(labour, default_rate):
    if not labour:
        return None

    rate = labour.get('labour_rate_per_hour')
    if rate is None or rate == '':
        rate = default_rate

    minutes = {
        name: _non_negative(labour.get(name), f'labour.{name}')
        for name in ('design_minutes', 'preparation_minutes', 'post_processing_minutes', 'other_minutes')
    }
    rate = _non_negative(rate, 'labour.labour_rate_per_hour')

    total = pricing.labour_cost(
        minutes['design_minutes'],
        minutes['preparation_minutes'],
        minutes['post_processing_minutes'],
        minutes['other_minutes'],
        rate,
    )
    return QuoteLabour(labour_rate_per_hour=rate, total_cost=total, **minutes)


def lines_payload(lines):
    """Accept both print_setup and the UI's printSetup key."""
    lines = lines or {}
    print_setup = lines.get('print_setup')
    if print_setup is None:
        print_setup = lines.get('printSetup')
    return {
        'filaments': lines.get('filaments') or [],
        'hardware': lines.get('hardware') or [],
        'print_setup': print_setup or None,
        'labour': lines.get('labour') or None,
    }


def check_line_shapes(payload):
    """
    Reject collections that are not lists of objects before anything reads them.

    Raises:
        ValidationError: naming the offending collection or item, e.g. 'filaments[2]'
    """
    for name in ('filaments', 'hardware'):
        if not isinstance(payload[name], list):
            raise ValidationError(f'{name} must be a list', field=name)
        for index, line in enumerate(payload[name]):
            if not isinstance(line, dict):
                raise ValidationError(f'{name}[{index}] must be an object', field=f'{name}[{index}]')
    for name in ('print_setup', 'labour'):
        if payload[name] is not None and not isinstance(payload[name], dict):
            raise ValidationError(f'{name} must be an object', field=name)


def _build_children(lines, settings):
    payload = lines_payload(lines)
    check_line_shapes(payload)

    electricity = pricing.to_number(settings.get('electricity_cost_per_kwh'))
    labour_rate = pricing.to_number(settings.get('labour_rate_per_hour'))

    return {
        'filaments': _build_filament_lines(payload['filaments']),
        'hardware': _build_hardware_lines(payload['hardware']),
        'print_setup': _build_print_setup(payload['print_setup'], electricity),
        'labour': _build_labour(payload['labour'], labour_rate),
    }


# ---------------------------------------------------------------------
# Pricing of persisted / pending aggregates
# ---------------------------------------------------------------------

def _child_dicts(filaments, hardware, print_setup, labour):
    return {
        'filaments': [line.to_dict() for line in filaments],
        'hardware': [line.to_dict() for line in hardware],
        'print_setup': print_setup.to_dict() if print_setup is not None else None,
        'labour': labour.to_dict() if labour is not None else None,
    }


def price_children(children, markup_percent, discount_percent, tax_rate, settings):
    config = pricing.PricingConfig.from_settings(
        settings,
        markup_percent=markup_percent,
        discount_percent=discount_percent,
        tax_rate=tax_rate,
    )
    return pricing.calculate_breakdown(
        children['filaments'],
        children['hardware'],
        children['print_setup'],
        children['labour'],
        config,
    )


def _apply_children(quote, children):
    quote.filaments = children['filaments']
    quote.hardware = children['hardware']
    quote.print_setup = children['print_setup']
    quote.labour = children['labour']


def _log_total_mismatch(header, total_cost, quote_number):
    submitted = pricing.to_number(header.get('total_cost'), None)
    if submitted is not None and pricing.round2(submitted) != pricing.round2(total_cost):
        logger.info(
            f"Quote {quote_number}: submitted total_cost {submitted} replaced by recomputed {total_cost}"
        )


def _commit(action, quote_number):
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.error(f"Integrity error while trying to {action} quote {quote_number}: {e}")
        raise StorageError(f'Failed to {action} quote: a referenced row changed during the save') from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Database error while trying to {action} quote {quote_number}: {e}")
        raise StorageError(f'Failed to {action} quote') from e


def _get_or_raise(quote_id):
    quote = db.session.get(Quote, quote_id)
    if quote is None:
        raise NotFoundError(f'Quote {quote_id} not found', field='id')
    return quote


def resolve_quote(quote, settings=None):
    """
    Header + all four child collections + a computed breakdown.

    This is what the invoice renderer consumes; it never prices anything
    itself.
    """
    settings = settings if settings is not None else _pricing_settings()
    data = quote.to_dict()
    children = {name: data[name] for name in CHILD_ATTRIBUTES}
    breakdown = price_children(
        children, quote.markup_percent, quote.discount_percent, quote.tax_rate or 0.0, settings
    )
    data['breakdown'] = breakdown.to_dict()
    return data


# ---------------------------------------------------------------------
# Store operations
# ---------------------------------------------------------------------

def create_quote(header, lines=None, quick=False):
    """
    Validate and insert a quote with all of its lines in one transaction.

    Raises:
        ValidationError: missing/invalid header or line fields, duplicate number
        NotFoundError: a line references a missing filament, printer or hardware item
        StorageError: the transaction failed and was rolled back
    """
    values = _validate_header(header, quick=quick)
    _ensure_number_available(values['quote_number'])

    settings = _pricing_settings()
    if quick and header.get('markup_percent') in (None, ''):
        values['markup_percent'] = pricing.to_number(settings.get('default_markup_percent'))
    values['tax_rate'] = _tax_rate(header, settings)

    children = _build_children(header if lines is None else lines, settings)
    breakdown = price_children(
        _child_dicts(**children), values['markup_percent'], values['discount_percent'],
        values['tax_rate'], settings
    )
    _log_total_mismatch(header, breakdown.final_total, values['quote_number'])

    quote = Quote(total_cost=breakdown.final_total, **values)
    _apply_children(quote, children)
    db.session.add(quote)
    _commit('create', values['quote_number'])

    logger.info(f"Created quote {quote.quote_number} (id={quote.id}) total={pricing.round2(quote.total_cost)}")
    return resolve_quote(quote, settings)


def create_quick_quote(header, filament=None, print_setup=None):
    """Single-filament / single-printer flow; same aggregate shape as a full quote."""
    lines = {
        'filaments': [filament] if filament else [],
        'print_setup': print_setup,
    }
    return create_quote(header, lines, quick=True)


def get_quote(quote_id):
    """
    Raises:
        NotFoundError: no quote with this id
    """
    return resolve_quote(_get_or_raise(quote_id))


def update_quote(quote_id, header, lines=None):
    """
    Replace the header and all child collections of an existing quote.

    Old children are deleted and the new ones inserted inside the same
    transaction, so no reader ever sees a quote with its lines missing.
    """
    quote = _get_or_raise(quote_id)
    values = _validate_header(header, existing=quote)
    values['is_quick_quote'] = bool(header.get('is_quick_quote', quote.is_quick_quote))
    if values['quote_number'] != quote.quote_number:
        _ensure_number_available(values['quote_number'], quote_id=quote.id)

    settings = _pricing_settings()
    values['tax_rate'] = _tax_rate(header, settings, existing=quote)

    children = _build_children(header if lines is None else lines, settings)
    breakdown = price_children(
        _child_dicts(**children), values['markup_percent'], values['discount_percent'],
        values['tax_rate'], settings
    )
    _log_total_mismatch(header, breakdown.final_total, values['quote_number'])

    try:
        for line in list(quote.filaments) + list(quote.hardware):
            db.session.delete(line)
        for single in (quote.print_setup, quote.labour):
            if single is not None:
                db.session.delete(single)
        db.session.flush()
        db.session.expire(quote, CHILD_ATTRIBUTES)

        for key, value in values.items():
            setattr(quote, key, value)
        quote.total_cost = breakdown.final_total
        _apply_children(quote, children)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Database error while replacing lines of quote {quote_id}: {e}")
        raise StorageError('Failed to update quote') from e
    _commit('update', values['quote_number'])

    logger.info(f"Updated quote {quote.quote_number} (id={quote.id}) total={pricing.round2(quote.total_cost)}")
    return resolve_quote(quote, settings)


def delete_quote(quote_id):
    """Delete a quote; its lines go with it."""
    quote = _get_or_raise(quote_id)
    quote_number = quote.quote_number
    db.session.delete(quote)
    _commit('delete', quote_number)
    logger.info(f"Deleted quote {quote_number} (id={quote_id})")


def duplicate_quote(quote_id):
    """
    Deep-copy a quote under a new id and number.

    The new number is allocated in the same transaction as the copy, so a
    failed copy does not consume a number. The source quote is not modified.
    """
    source = _get_or_raise(quote_id)

    try:
        number = allocate_quote_number()
        copy = Quote(
            quote_number=number.quote_number,
            title=f"{number.quote_number} - {source.customer_name} (Copy)",
            customer_name=source.customer_name,
            date=today_local(_timezone_name()),
            notes=source.notes,
            markup_percent=source.markup_percent,
            discount_percent=source.discount_percent,
            tax_rate=source.tax_rate,
            quantity=source.quantity,
            total_cost=source.total_cost,
            is_quick_quote=source.is_quick_quote,
        )
        copy.filaments = [
            QuoteFilament(
                filament_id=line.filament_id,
                filament_name=line.filament_name,
                filament_price_per_gram=line.filament_price_per_gram,
                grams_used=line.grams_used,
                total_cost=line.total_cost,
            )
            for line in source.filaments
        ]
        copy.hardware = [
            QuoteHardware(
                hardware_id=line.hardware_id,
                hardware_name=line.hardware_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_cost=line.total_cost,
            )
            for line in source.hardware
        ]
        if source.print_setup is not None:
            copy.print_setup = QuotePrintSetup(
                printer_id=source.print_setup.printer_id,
                printer_name=source.print_setup.printer_name,
                print_time=source.print_setup.print_time,
                power_cost=source.print_setup.power_cost,
                depreciation_cost=source.print_setup.depreciation_cost,
            )
        if source.labour is not None:
            copy.labour = QuoteLabour(
                design_minutes=source.labour.design_minutes,
                preparation_minutes=source.labour.preparation_minutes,
                post_processing_minutes=source.labour.post_processing_minutes,
                other_minutes=source.labour.other_minutes,
                labour_rate_per_hour=source.labour.labour_rate_per_hour,
                total_cost=source.labour.total_cost,
            )
        db.session.add(copy)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Database error while duplicating quote {quote_id}: {e}")
        raise StorageError('Failed to duplicate quote') from e
    _commit('duplicate', number.quote_number)

    logger.info(f"Duplicated quote {source.quote_number} as {copy.quote_number} (id={copy.id})")
    return resolve_quote(copy)


def list_quotes():
    """Quote headers, newest first. No child collections."""
    quotes = Quote.query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()
    return [quote.header_dict() for quote in quotes]


def count_quotes():
    return Quote.query.count()
