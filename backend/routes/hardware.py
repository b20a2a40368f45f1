# backend/routes/hardware.py
from flask import Blueprint, request, jsonify
import logging

from services import reference_data

hardware_bp = Blueprint('hardware', __name__)
logger = logging.getLogger(__name__)

TABLE = 'hardware'


@hardware_bp.route('', methods=['GET'])
def get_hardware_items():
    """Get all hardware items ordered by name"""
    return jsonify([h.to_dict() for h in reference_data.list_references(TABLE)])


@hardware_bp.route('/active', methods=['GET'])
def get_active_hardware():
    return jsonify([h.to_dict() for h in reference_data.list_references(TABLE, active_only=True)])


@hardware_bp.route('/<int:hardware_id>', methods=['GET'])
def get_hardware(hardware_id):
    return jsonify(reference_data.get_reference(TABLE, hardware_id).to_dict())


@hardware_bp.route('', methods=['POST'])
def create_hardware():
    hardware = reference_data.save_reference(TABLE, request.get_json(silent=True))
    return jsonify(hardware.to_dict()), 201


@hardware_bp.route('/<int:hardware_id>', methods=['PUT'])
def update_hardware(hardware_id):
    hardware = reference_data.save_reference(TABLE, request.get_json(silent=True), hardware_id)
    return jsonify(hardware.to_dict())


@hardware_bp.route('/<int:hardware_id>', methods=['DELETE'])
def delete_hardware(hardware_id):
    """Delete a hardware item that no quote uses"""
    reference_data.delete_reference(TABLE, hardware_id)
    return jsonify({'success': True, 'message': 'Hardware item deleted successfully'})


@hardware_bp.route('/<int:hardware_id>/toggle-status', methods=['PATCH', 'POST'])
def toggle_hardware_status(hardware_id):
    hardware = reference_data.toggle_status(TABLE, hardware_id)
    logger.info(f"Hardware item {hardware_id} is now {hardware.status}")
    return jsonify(hardware.to_dict())
