# backend/routes/counts.py
from flask import Blueprint, jsonify

from services import quote_store, reference_data

counts_bp = Blueprint('counts', __name__)


@counts_bp.route('', methods=['GET'])
def get_counts():
    """Dashboard counters"""
    return jsonify({
        'quotes': quote_store.count_quotes(),
        'filaments': reference_data.count_active('filaments'),
        'printers': reference_data.count_active('printers'),
        'hardware': reference_data.count_active('hardware'),
    })


@counts_bp.route('/quotes', methods=['GET'])
def count_quotes():
    return jsonify({'count': quote_store.count_quotes()})


@counts_bp.route('/<table>', methods=['GET'])
def count_active_references(table):
    """Active rows in filaments, printers or hardware"""
    return jsonify({'count': reference_data.count_active(table)})
