# backend/routes/quotes.py
from flask import Blueprint, request, jsonify, make_response, current_app
import logging

from werkzeug.utils import secure_filename

from services import quote_store
from services.errors import ValidationError
from services.invoice import render_invoice
from services.settings_store import get_setting

quotes_bp = Blueprint('quotes', __name__)
logger = logging.getLogger(__name__)


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('No data provided')
    return data


@quotes_bp.route('', methods=['GET'])
def get_quotes():
    """Get all quote headers, newest first"""
    return jsonify(quote_store.list_quotes())


@quotes_bp.route('/<int:quote_id>', methods=['GET'])
def get_quote(quote_id):
    """Get a quote with its filaments, hardware, print setup, labour and cost breakdown"""
    return jsonify(quote_store.get_quote(quote_id))


@quotes_bp.route('', methods=['POST'])
def create_quote():
    """Create a new quote and all of its lines"""
    data = _json_body()
    quote = quote_store.create_quote(data)
    return jsonify(quote), 201


@quotes_bp.route('/<int:quote_id>', methods=['PUT'])
def update_quote(quote_id):
    """Replace an existing quote's header and lines"""
    data = _json_body()
    quote = quote_store.update_quote(quote_id, data)
    return jsonify(quote)


@quotes_bp.route('/<int:quote_id>', methods=['DELETE'])
def delete_quote(quote_id):
    """Delete a quote and its lines"""
    quote_store.delete_quote(quote_id)
    return jsonify({
        'success': True,
        'message': 'Quote deleted successfully'
    })


@quotes_bp.route('/<int:quote_id>/duplicate', methods=['POST'])
def duplicate_quote(quote_id):
    """Copy a quote under a new quote number"""
    quote = quote_store.duplicate_quote(quote_id)
    return jsonify(quote), 201


@quotes_bp.route('/<int:quote_id>/invoice/<invoice_type>', methods=['GET'])
def get_quote_invoice(quote_id, invoice_type):
    """Generate a PDF invoice ('internal' or 'client') for a quote"""
    quote = quote_store.get_quote(quote_id)

    currency = get_setting('currency_symbol', '£')
    company_name = get_setting('company_name', current_app.config.get('COMPANY_NAME', 'Prints Inc'))

    pdf = render_invoice(quote, invoice_type, currency=currency, company_name=company_name)

    filename = secure_filename(f"{quote['quote_number']}_{invoice_type}_invoice.pdf")
    response = make_response(pdf)
    response.headers['Content-Type'] = 'application/pdf'
    response.headers['Content-Disposition'] = f'inline; filename="{filename}"'
    return response
