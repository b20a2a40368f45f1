# backend/routes/spoolman.py
from flask import Blueprint, request, jsonify

from services import spoolman

spoolman_bp = Blueprint('spoolman', __name__)


@spoolman_bp.route('/status', methods=['GET'])
def get_spoolman_status():
    """Whether sync is enabled and which Spoolman server is configured"""
    return jsonify(spoolman.get_status())


@spoolman_bp.route('/test-connection', methods=['POST'])
def test_spoolman_connection():
    data = request.get_json(silent=True) or {}
    return jsonify(spoolman.check_connection(data.get('url')))


@spoolman_bp.route('/sync', methods=['POST'])
def sync_spoolman():
    """Import or refresh filaments from every Spoolman spool"""
    return jsonify(spoolman.sync_spools())
