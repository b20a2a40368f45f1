# backend/services/reference_data.py
"""
Lookups and delete guards for the reference tables (filaments, printers,
hardware) that quote lines draw their snapshots from.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from models import db, Filament, Printer, Hardware, QuoteFilament, QuoteHardware, QuotePrintSetup
from services.errors import NotFoundError, ReferenceConflictError, StorageError, ValidationError
from services import pricing

logger = logging.getLogger(__name__)

ACTIVE = 'Active'
ARCHIVED = 'Archived'
STATUSES = (ACTIVE, ARCHIVED)

# table name -> (model, quote line model, foreign key column, singular label)
REFERENCE_TABLES = {
    'filaments': (Filament, QuoteFilament, QuoteFilament.filament_id, 'filament'),
    'printers': (Printer, QuotePrintSetup, QuotePrintSetup.printer_id, 'printer'),
    'hardware': (Hardware, QuoteHardware, QuoteHardware.hardware_id, 'hardware'),
}


def _table(table):
    try:
        return REFERENCE_TABLES[table]
    except KeyError:
        raise ValidationError(f'Unknown reference table {table}', field='table')


def _get_or_raise(model, label, ref_id):
    row = db.session.get(model, ref_id) if ref_id is not None else None
    if row is None:
        raise NotFoundError(f'{label.capitalize()} not found', field=f'{label}_id')
    return row


def get_filament(filament_id):
    """Snapshot fields a filament line copies at add time."""
    filament = _get_or_raise(Filament, 'filament', filament_id)
    return {
        'filament_id': filament.id,
        'filament_name': filament.name,
        'filament_price_per_gram': filament.price_per_gram,
        'price_per_kg': filament.price_per_kg,
        'status': filament.status,
    }


def get_printer(printer_id):
    printer = _get_or_raise(Printer, 'printer', printer_id)
    return {
        'printer_id': printer.id,
        'printer_name': printer.name,
        'power_usage': printer.power_usage,
        'depreciation_per_hour': printer.depreciation_per_hour,
        'status': printer.status,
    }


def get_hardware(hardware_id):
    hardware = _get_or_raise(Hardware, 'hardware', hardware_id)
    return {
        'hardware_id': hardware.id,
        'hardware_name': hardware.name,
        'unit_price': hardware.unit_price,
        'status': hardware.status,
    }


def count_quote_references(table, ref_id):
    """Number of quote lines pointing at a reference row."""
    _model, line_model, column, _label = _table(table)
    return db.session.query(line_model).filter(column == ref_id).count()


def ensure_deletable(table, ref_id):
    model, _line_model, _column, label = _table(table)
    _get_or_raise(model, label, ref_id)

    references = count_quote_references(table, ref_id)
    if references > 0:
        logger.warning(f"Refusing to delete {label} {ref_id}: used by {references} quote line(s)")
        raise ReferenceConflictError(
            f'Cannot delete {label} as it is used in quotes. Consider archiving it instead.',
            field=f'{label}_id'
        )


def delete_reference(table, ref_id):
    """Delete a reference row after checking no quote line still uses it."""
    ensure_deletable(table, ref_id)
    model, _line_model, _column, label = _table(table)

    row = db.session.get(model, ref_id)
    try:
        db.session.delete(row)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error deleting {label} {ref_id}: {e}")
        raise StorageError(f'Failed to delete {label}') from e

    logger.info(f"Deleted {label} {ref_id}")


def toggle_status(table, ref_id):
    """Flip a reference row between Active and Archived."""
    model, _line_model, _column, label = _table(table)
    row = _get_or_raise(model, label, ref_id)
    row.status = ARCHIVED if row.status == ACTIVE else ACTIVE
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error toggling status of {label} {ref_id}: {e}")
        raise StorageError(f'Failed to update {label} status') from e
    return row


def count_active(table):
    model = _table(table)[0]
    return model.query.filter_by(status=ACTIVE).count()


# ---------------------------------------------------------------------
# Create / update payload normalisation
# ---------------------------------------------------------------------

def _require(data, names):
    missing = [name for name in names if data.get(name) in (None, '')]
    if missing:
        raise ValidationError(f"Please provide all required fields: {', '.join(missing)}", field=missing[0])


def _positive(data, name):
    value = pricing.to_number(data.get(name), None)
    if value is None or value <= 0:
        raise ValidationError(f'{name} must be a positive number', field=name)
    return value


def _non_negative(data, name, default=None):
    raw = data.get(name)
    if raw in (None, '') and default is not None:
        return default
    value = pricing.to_number(raw, None)
    if value is None or value < 0:
        raise ValidationError(f'{name} must be zero or greater', field=name)
    return value


def _status(data):
    status = data.get('status') or ACTIVE
    if status not in STATUSES:
        raise ValidationError(f"status must be one of {', '.join(STATUSES)}", field='status')
    return status


def filament_fields(data):
    """Validated column values for a filament; price_per_kg is derived when absent."""
    _require(data, ['name', 'type', 'diameter', 'spool_weight', 'spool_price', 'color'])
    spool_weight = _positive(data, 'spool_weight')
    spool_price = _non_negative(data, 'spool_price')

    if data.get('price_per_kg') in (None, ''):
        price_per_kg = pricing.price_per_kg_from_spool(spool_price, spool_weight)
    else:
        price_per_kg = _non_negative(data, 'price_per_kg')

    density = data.get('density')
    return {
        'name': str(data['name']).strip(),
        'type': str(data['type']).strip(),
        'diameter': _positive(data, 'diameter'),
        'spool_weight': spool_weight,
        'spool_price': spool_price,
        'density': pricing.to_number(density, None) if density not in (None, '') else None,
        'price_per_kg': price_per_kg,
        'color': str(data['color']).strip(),
        'link': data.get('link') or None,
        'status': _status(data),
    }


def printer_fields(data):
    """Validated column values for a printer; depreciation_per_hour is derived when absent."""
    _require(data, ['name', 'material_diameter', 'price', 'depreciation_time', 'power_usage'])
    price = _non_negative(data, 'price')
    service_cost = _non_negative(data, 'service_cost', default=0.0)
    depreciation_time = _positive(data, 'depreciation_time')

    if data.get('depreciation_per_hour') in (None, ''):
        per_hour = pricing.depreciation_per_hour(price, service_cost, depreciation_time)
    else:
        per_hour = _non_negative(data, 'depreciation_per_hour')

    return {
        'name': str(data['name']).strip(),
        'material_diameter': _positive(data, 'material_diameter'),
        'price': price,
        'depreciation_time': depreciation_time,
        'service_cost': service_cost,
        'power_usage': _non_negative(data, 'power_usage'),
        'depreciation_per_hour': per_hour,
        'status': _status(data),
    }


def hardware_fields(data):
    _require(data, ['name', 'unit_price'])
    return {
        'name': str(data['name']).strip(),
        'unit_price': _non_negative(data, 'unit_price'),
        'link': data.get('link') or None,
        'status': _status(data),
    }


FIELD_BUILDERS = {
    'filaments': filament_fields,
    'printers': printer_fields,
    'hardware': hardware_fields,
}


def list_references(table, active_only=False):
    """Rows of a reference table ordered by name."""
    model = _table(table)[0]
    query = model.query
    if active_only:
        query = query.filter_by(status=ACTIVE)
    return query.order_by(model.name).all()


def get_reference(table, ref_id):
    model, _line_model, _column, label = _table(table)
    return _get_or_raise(model, label, ref_id)


def save_reference(table, data, ref_id=None):
    """
    Create (ref_id=None) or update a reference row from a request payload.

    Existing quote lines keep their snapshots; only quotes created later see
    the new values.
    """
    model, _line_model, _column, label = _table(table)
    if not isinstance(data, dict):
        raise ValidationError('No data provided')
    fields = FIELD_BUILDERS[table](data)

    if ref_id is None:
        row = model(**fields)
        db.session.add(row)
        action = 'create'
    else:
        row = _get_or_raise(model, label, ref_id)
        for key, value in fields.items():
            setattr(row, key, value)
        action = 'update'

    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error trying to {action} {label}: {e}")
        raise StorageError(f'Failed to {action} {label}') from e

    logger.info(f"{action.capitalize()}d {label} {row.id} ({row.name})")
    return row
