import math

import pytest

from services import pricing
from services.pricing import PricingConfig, calculate_breakdown


EXAMPLE_CONFIG = PricingConfig(
    markup_percent=75,
    discount_percent=5,
    labour_rate_per_hour=13.00,
    electricity_cost_per_kwh=0.2166,
)


def example_lines():
    return dict(
        filaments=[{'grams_used': 100, 'filament_price_per_gram': 17.49 / 1000}],
        hardware=[{'quantity': 1, 'unit_price': 10.29}],
        print_setup={'print_time': 360, 'power_usage': 100, 'depreciation_per_hour': 0.14},
        labour={'preparation_minutes': 5, 'post_processing_minutes': 5},
    )


def test_example_quote_breakdown():
    breakdown = calculate_breakdown(config=EXAMPLE_CONFIG, **example_lines())

    assert breakdown.filament_total == pytest.approx(1.749)
    assert breakdown.hardware_total == pytest.approx(10.29)
    assert breakdown.power_cost == pytest.approx(0.12996)
    assert breakdown.depreciation_cost == pytest.approx(0.84)
    assert breakdown.labour_cost == pytest.approx(2.1667, abs=1e-4)
    assert breakdown.subtotal == pytest.approx(15.1756, abs=1e-3)

    rounded = breakdown.rounded()
    assert rounded['after_markup'] == 26.56
    assert rounded['final_total'] == 25.23


def test_empty_quote_costs_nothing():
    breakdown = calculate_breakdown(config=EXAMPLE_CONFIG)

    assert breakdown.subtotal == 0
    assert breakdown.final_total == 0


def test_invalid_numbers_are_treated_as_zero():
    breakdown = calculate_breakdown(
        filaments=[{'grams_used': 'abc', 'filament_price_per_gram': 0.02},
                   {'grams_used': float('nan'), 'filament_price_per_gram': 0.02}],
        hardware=[{'quantity': None, 'unit_price': ''}],
        config=EXAMPLE_CONFIG,
    )

    assert breakdown.final_total == 0
    assert not math.isnan(breakdown.final_total)


@pytest.mark.parametrize('value, expected', [
    ('12.5', 12.5),
    ('', 0.0),
    (None, 0.0),
    ('nan', 0.0),
    (float('inf'), 0.0),
    (True, 0.0),
    (3, 3.0),
])
def test_to_number(value, expected):
    assert pricing.to_number(value) == expected


def test_calculation_is_repeatable():
    first = calculate_breakdown(config=EXAMPLE_CONFIG, **example_lines())
    second = calculate_breakdown(config=EXAMPLE_CONFIG, **example_lines())
    assert first == second


def test_higher_markup_never_lowers_the_total():
    totals = [
        calculate_breakdown(config=PricingConfig(markup_percent=markup), **example_lines()).final_total
        for markup in (0, 10, 50, 75, 200)
    ]
    assert totals == sorted(totals)


def test_discount_applies_after_markup_and_tax_after_discount():
    config = PricingConfig(markup_percent=50, discount_percent=10, tax_rate=20)
    breakdown = calculate_breakdown(hardware=[{'quantity': 1, 'unit_price': 100}], config=config)

    assert breakdown.after_markup == pytest.approx(150)
    assert breakdown.discount_amount == pytest.approx(15)
    assert breakdown.tax_amount == pytest.approx(27)
    assert breakdown.final_total == pytest.approx(162)


def test_discount_is_capped_at_one_hundred_percent():
    config = PricingConfig(discount_percent=150)
    breakdown = calculate_breakdown(hardware=[{'quantity': 2, 'unit_price': 5}], config=config)
    assert breakdown.final_total == 0


def test_negative_amounts_never_reduce_the_price():
    breakdown = calculate_breakdown(hardware=[{'quantity': -3, 'unit_price': 10}], config=PricingConfig())
    assert breakdown.hardware_total == 0


def test_print_setup_uses_snapshotted_costs_without_printer_values():
    power, depreciation = pricing.print_setup_costs(
        {'print_time': 120, 'power_cost': 0.5, 'depreciation_cost': 0.25}, 0.2166
    )
    assert (power, depreciation) == (0.5, 0.25)


def test_labour_falls_back_to_default_rate():
    assert pricing.labour_total({'design_minutes': 30}, 13.0) == pytest.approx(6.5)
    assert pricing.labour_total({'design_minutes': 30, 'labour_rate_per_hour': 20}, 13.0) == pytest.approx(10)


def test_reference_derivations():
    assert pricing.price_per_kg_from_spool(17.49, 1000) == pytest.approx(17.49)
    assert pricing.price_per_kg_from_spool(20, 0) == 0
    assert pricing.depreciation_per_hour(1200, 200, 10000) == pytest.approx(0.14)
    assert pricing.depreciation_per_hour(1200, 200, 0) == 0


def test_config_from_settings_prefers_overrides():
    settings = {
        'default_markup_percent': '50',
        'tax_rate': '0',
        'labour_rate_per_hour': '13.00',
        'electricity_cost_per_kwh': '0.2166',
    }
    config = PricingConfig.from_settings(settings, markup_percent=75, discount_percent=None)

    assert config.markup_percent == 75
    assert config.discount_percent == 0
    assert config.labour_rate_per_hour == 13.0
    assert config.electricity_cost_per_kwh == pytest.approx(0.2166)
