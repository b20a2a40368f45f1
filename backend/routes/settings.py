# backend/routes/settings.py
from flask import Blueprint, request, jsonify
import logging

from services import numbering, settings_store
from services.errors import NotFoundError, ValidationError

settings_bp = Blueprint('settings', __name__)
logger = logging.getLogger(__name__)


@settings_bp.route('', methods=['GET'])
def get_settings():
    """Get all settings as a key -> value object"""
    return jsonify(settings_store.get_settings())


@settings_bp.route('', methods=['PUT'])
def update_settings():
    """Update several settings at once"""
    data = request.get_json(silent=True)
    settings = settings_store.update_settings(data)
    logger.info(f"Updated settings: {', '.join(sorted(data))}")
    return jsonify(settings)


@settings_bp.route('/quote/next-number', methods=['GET'])
def peek_next_quote_number():
    """The number a new quote would get, without reserving it"""
    number = numbering.peek_quote_number()
    return jsonify(number._asdict())


@settings_bp.route('/quote/next-number', methods=['POST'])
def allocate_next_quote_number():
    """
    Reserve the next quote number.

    The counter is incremented even if the caller never saves a quote with
    the returned number.
    """
    number = numbering.next_quote_number()
    return jsonify(number._asdict()), 201


@settings_bp.route('/<key>', methods=['GET'])
def get_setting(key):
    value = settings_store.get_setting(key)
    if value is None:
        raise NotFoundError(f'Setting {key} not found', field='key')
    return jsonify({'key': key, 'value': value})


@settings_bp.route('/<key>', methods=['PUT'])
def update_setting(key):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('No data provided')
    return jsonify(settings_store.update_setting(key, data.get('value')))
