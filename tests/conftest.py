# tests/conftest.py
import pytest

from app import create_app
from models import db
from services import reference_data


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def filament_id(app):
    filament = reference_data.save_reference('filaments', {
        'name': 'PLA Black',
        'type': 'PLA',
        'diameter': 1.75,
        'spool_weight': 1000,
        'spool_price': 17.49,
        'color': 'Black',
    })
    return filament.id


@pytest.fixture
def printer_id(app):
    # (1200 + 200) / 10000h = 0.14 per hour
    printer = reference_data.save_reference('printers', {
        'name': 'Prusa MK4',
        'material_diameter': 1.75,
        'price': 1200,
        'service_cost': 200,
        'depreciation_time': 10000,
        'power_usage': 100,
    })
    return printer.id


@pytest.fixture
def hardware_id(app):
    hardware = reference_data.save_reference('hardware', {
        'name': 'Magnet set',
        'unit_price': 10.29,
    })
    return hardware.id


@pytest.fixture
def quote_payload(filament_id, printer_id, hardware_id):
    """Builds the documented example quote; keyword arguments replace top-level fields."""
    def build(**overrides):
        data = {
            'quote_number': '3DQ0100',
            'customer_name': 'Jane Smith',
            'date': '2025-06-07',
            'notes': 'Two-part enclosure',
            'markup_percent': 75,
            'discount_percent': 5,
            'total_cost': 25.23,
            'filaments': [{'filament_id': filament_id, 'grams_used': 100}],
            'hardware': [{'hardware_id': hardware_id, 'quantity': 1}],
            'print_setup': {'printer_id': printer_id, 'print_time': 360},
            'labour': {'preparation_minutes': 5, 'post_processing_minutes': 5},
        }
        data.update(overrides)
        return data
    return build
