# backend/routes/filaments.py
from flask import Blueprint, request, jsonify
import logging

from services import reference_data

filaments_bp = Blueprint('filaments', __name__)
logger = logging.getLogger(__name__)

TABLE = 'filaments'


@filaments_bp.route('', methods=['GET'])
def get_filaments():
    """Get all filaments ordered by name"""
    return jsonify([f.to_dict() for f in reference_data.list_references(TABLE)])


@filaments_bp.route('/active', methods=['GET'])
def get_active_filaments():
    """Filaments offered in the quote builder"""
    return jsonify([f.to_dict() for f in reference_data.list_references(TABLE, active_only=True)])


@filaments_bp.route('/<int:filament_id>', methods=['GET'])
def get_filament(filament_id):
    return jsonify(reference_data.get_reference(TABLE, filament_id).to_dict())


@filaments_bp.route('', methods=['POST'])
def create_filament():
    """
    Create a new filament.

    price_per_kg is worked out from spool_price / spool_weight when the
    client does not send it.
    """
    filament = reference_data.save_reference(TABLE, request.get_json(silent=True))
    return jsonify(filament.to_dict()), 201


@filaments_bp.route('/<int:filament_id>', methods=['PUT'])
def update_filament(filament_id):
    filament = reference_data.save_reference(TABLE, request.get_json(silent=True), filament_id)
    return jsonify(filament.to_dict())


@filaments_bp.route('/<int:filament_id>', methods=['DELETE'])
def delete_filament(filament_id):
    """Delete a filament that no quote uses"""
    reference_data.delete_reference(TABLE, filament_id)
    return jsonify({'success': True, 'message': 'Filament deleted successfully'})


@filaments_bp.route('/<int:filament_id>/toggle-status', methods=['PATCH', 'POST'])
def toggle_filament_status(filament_id):
    filament = reference_data.toggle_status(TABLE, filament_id)
    logger.info(f"Filament {filament_id} is now {filament.status}")
    return jsonify(filament.to_dict())
