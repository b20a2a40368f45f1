# backend/routes/pricing.py
from flask import Blueprint, request, jsonify

from services import pricing
from services.errors import ValidationError
from services.quote_store import check_line_shapes, lines_payload
from services.settings_store import get_settings

pricing_bp = Blueprint('pricing', __name__)


@pricing_bp.route('/calculate', methods=['POST'])
def calculate():
    """
    Price a set of lines without saving anything.

    The quote builder calls this whenever a line changes. Lines may carry the
    reference values directly (power_usage, depreciation_per_hour) or the
    snapshotted costs.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('No data provided')

    lines = lines_payload(data)
    check_line_shapes(lines)

    config = pricing.PricingConfig.from_settings(
        get_settings(),
        markup_percent=data.get('markup_percent'),
        discount_percent=data.get('discount_percent'),
        tax_rate=data.get('tax_rate'),
        labour_rate_per_hour=data.get('labour_rate_per_hour'),
        electricity_cost_per_kwh=data.get('electricity_cost_per_kwh'),
    )
    breakdown = pricing.calculate_breakdown(
        lines['filaments'],
        lines['hardware'],
        lines['print_setup'],
        lines['labour'],
        config,
    )
    return jsonify({
        'breakdown': breakdown.to_dict(),
        'display': breakdown.rounded(),
    })
