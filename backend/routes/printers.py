# backend/routes/printers.py
from flask import Blueprint, request, jsonify
import logging

from services import reference_data

printers_bp = Blueprint('printers', __name__)
logger = logging.getLogger(__name__)

TABLE = 'printers'


@printers_bp.route('', methods=['GET'])
def get_printers():
    """Get all printers ordered by name"""
    return jsonify([p.to_dict() for p in reference_data.list_references(TABLE)])


@printers_bp.route('/active', methods=['GET'])
def get_active_printers():
    return jsonify([p.to_dict() for p in reference_data.list_references(TABLE, active_only=True)])


@printers_bp.route('/<int:printer_id>', methods=['GET'])
def get_printer(printer_id):
    return jsonify(reference_data.get_reference(TABLE, printer_id).to_dict())


@printers_bp.route('', methods=['POST'])
def create_printer():
    """
    Create a new printer.

    depreciation_per_hour defaults to (price + service_cost) / depreciation_time.
    """
    printer = reference_data.save_reference(TABLE, request.get_json(silent=True))
    return jsonify(printer.to_dict()), 201


@printers_bp.route('/<int:printer_id>', methods=['PUT'])
def update_printer(printer_id):
    printer = reference_data.save_reference(TABLE, request.get_json(silent=True), printer_id)
    return jsonify(printer.to_dict())


@printers_bp.route('/<int:printer_id>', methods=['DELETE'])
def delete_printer(printer_id):
    reference_data.delete_reference(TABLE, printer_id)
    return jsonify({'success': True, 'message': 'Printer deleted successfully'})


@printers_bp.route('/<int:printer_id>/toggle-status', methods=['PATCH', 'POST'])
def toggle_printer_status(printer_id):
    """Archive an active printer, or reactivate an archived one"""
    printer = reference_data.toggle_status(TABLE, printer_id)
    logger.info(f"Printer {printer_id} is now {printer.status}")
    return jsonify(printer.to_dict())
