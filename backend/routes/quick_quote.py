# backend/routes/quick_quote.py
from flask import Blueprint, request, jsonify
import logging

from services import quote_store
from services.errors import ValidationError

quick_quote_bp = Blueprint('quick_quote', __name__)
logger = logging.getLogger(__name__)


@quick_quote_bp.route('', methods=['POST'])
def create_quick_quote():
    """Create a quote from a single filament and printer"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('No data provided')

    quote = quote_store.create_quick_quote(
        data,
        filament=data.get('filament'),
        print_setup=data.get('print_setup'),
    )
    return jsonify(quote), 201
