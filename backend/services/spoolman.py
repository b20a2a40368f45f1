# backend/services/spoolman.py
"""
Spoolman integration.

Spoolman (https://github.com/Donkie/Spoolman) tracks physical spools. A sync
pulls every spool from its REST API and upserts one filament per spool,
matched on `spoolman_id`, inside a single transaction.
"""

import logging

import requests
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db, Filament
from services import pricing
from services.errors import SpoolmanError, StorageError, ValidationError
from services.reference_data import ACTIVE
from services.settings_store import get_setting

logger = logging.getLogger(__name__)

DEFAULT_URL = 'http://localhost:7912'
SPOOL_ENDPOINT = '/api/v1/spool'

# Used when Spoolman leaves a field empty
DEFAULT_SPOOL_WEIGHT = 1000.0
DEFAULT_DIAMETER = 1.75
DEFAULT_DENSITY = 1.24
DEFAULT_MATERIAL = 'PLA'
DEFAULT_COLOR = '#000000'


def get_status():
    return {
        'enabled': get_setting('spoolman_sync_enabled', 'false') == 'true',
        'url': get_setting('spoolman_url', DEFAULT_URL),
    }


def _fetch_spools(url, params=None):
    endpoint = f"{url.rstrip('/')}{SPOOL_ENDPOINT}"
    timeout = current_app.config.get('SPOOLMAN_TIMEOUT', 10)
    try:
        response = requests.get(endpoint, params=params, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logger.error(f"Spoolman request to {endpoint} failed: {e}")
        raise SpoolmanError(f'Failed to connect to Spoolman: {e}') from e
    except ValueError as e:
        logger.error(f"Spoolman at {endpoint} returned invalid JSON: {e}")
        raise SpoolmanError('Spoolman returned an invalid response') from e


def check_connection(url):
    """
    Check that `url` answers like a Spoolman server.

    Raises:
        ValidationError: no url given
        SpoolmanError: the server could not be reached or answered with an error
    """
    if not url:
        raise ValidationError('Please provide a Spoolman URL', field='url')
    _fetch_spools(url, params={'limit': 1})
    logger.info(f"Spoolman connection to {url} succeeded")
    return {'success': True, 'message': 'Successfully connected to Spoolman API'}


def spools_from_response(data):
    """Spoolman answers with a bare list, or with {"items": [...]} when paginated."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get('items'), list):
        return data['items']
    logger.warning(f"Unexpected Spoolman response of type {type(data).__name__}")
    return []


def filament_fields_from_spool(spool):
    filament = spool.get('filament') or {}
    vendor = filament.get('vendor') or {}

    weight = (pricing.to_number(spool.get('initial_weight'))
              or pricing.to_number(filament.get('weight'))
              or DEFAULT_SPOOL_WEIGHT)
    price = pricing.to_number(spool.get('price')) or pricing.to_number(filament.get('price'))

    return {
        'name': f"{vendor.get('name') or 'Unknown'} {filament.get('name') or 'Filament'}",
        'type': filament.get('material') or DEFAULT_MATERIAL,
        'diameter': pricing.to_number(filament.get('diameter')) or DEFAULT_DIAMETER,
        'spool_weight': weight,
        'spool_price': price,
        'density': pricing.to_number(filament.get('density')) or DEFAULT_DENSITY,
        'price_per_kg': pricing.price_per_kg_from_spool(price, weight),
        'color': filament.get('color_hex') or DEFAULT_COLOR,
        'link': vendor.get('website') or None,
        'status': ACTIVE,
    }


def sync_spools():
    """
    Pull every spool from the configured Spoolman server and upsert filaments.

    Existing filaments are matched on spoolman_id and overwritten; new spools
    become new Active filaments. Quote lines keep their own snapshots, so a
    sync never changes a saved quote. Runs regardless of the
    spoolman_sync_enabled flag as long as a URL is set.

    Returns:
        dict: success flag, message, and the added / updated / skipped counts
    """
    url = get_setting('spoolman_url')
    if not url:
        raise ValidationError('Spoolman URL is not configured', field='spoolman_url')

    spools = spools_from_response(_fetch_spools(url))
    if not spools:
        return {'success': True, 'message': 'No spools found in Spoolman', 'added': 0, 'updated': 0, 'skipped': 0}

    existing = {
        filament.spoolman_id: filament
        for filament in Filament.query.filter(Filament.spoolman_id.isnot(None)).all()
    }
    added = updated = skipped = 0

    try:
        for spool in spools:
            spool_id = spool.get('id') if isinstance(spool, dict) else None
            if not isinstance(spool_id, int) or isinstance(spool_id, bool):
                logger.warning(f"Skipping Spoolman entry without a usable id: {spool!r}")
                skipped += 1
                continue

            fields = filament_fields_from_spool(spool)
            filament = existing.get(spool_id)
            if filament is None:
                filament = Filament(spoolman_id=spool_id, spoolman_synced=True, **fields)
                db.session.add(filament)
                existing[spool_id] = filament
                added += 1
            else:
                for key, value in fields.items():
                    setattr(filament, key, value)
                filament.spoolman_synced = True
                updated += 1

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Error saving Spoolman sync: {e}")
        raise StorageError('Failed to sync spools from Spoolman') from e

    logger.info(f"Spoolman sync from {url}: {added} added, {updated} updated, {skipped} skipped")
    return {
        'success': True,
        'message': f'Successfully synced {added + updated} spools from Spoolman',
        'added': added,
        'updated': updated,
        'skipped': skipped,
    }
