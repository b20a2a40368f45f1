# backend/services/pricing.py
"""
Cost calculation for 3D print quotes.

Pure functions only: nothing here touches the database or the request. The
store, the quick-quote route and the /api/pricing endpoint all price a quote
through calculate_breakdown() so the stored total_cost always comes from the
same formula the UI sees.
"""

import math
from dataclasses import dataclass, asdict, fields
from typing import Iterable, Mapping, Optional


def to_number(value, default=0.0):
    """
    Coerce user input to a float.

    Empty strings, None, unparseable text, NaN and infinities all become
    `default` so they can never leak into a stored total.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _amount(value):
    # Negative quantities never reduce a price; the store rejects them before this point.
    return max(to_number(value), 0.0)


def round2(value):
    """Round for display only. Stored values keep full precision."""
    return round(to_number(value), 2)


# ---------------------------------------------------------------------
# Reference-data derivations
# ---------------------------------------------------------------------

def price_per_kg_from_spool(spool_price, spool_weight):
    weight = _amount(spool_weight)
    if weight == 0:
        return 0.0
    return _amount(spool_price) / weight * 1000


def depreciation_per_hour(price, service_cost, depreciation_time):
    hours = _amount(depreciation_time)
    if hours == 0:
        return 0.0
    return (_amount(price) + _amount(service_cost)) / hours


# ---------------------------------------------------------------------
# Per-line costs
# ---------------------------------------------------------------------

def filament_line_cost(grams_used, price_per_gram):
    return _amount(grams_used) * _amount(price_per_gram)


def hardware_line_cost(quantity, unit_price):
    return _amount(quantity) * _amount(unit_price)


def power_cost(power_usage_watts, print_time_minutes, electricity_cost_per_kwh):
    return (_amount(power_usage_watts) / 1000) * (_amount(print_time_minutes) / 60) * _amount(electricity_cost_per_kwh)


def depreciation_cost(print_time_minutes, depreciation_per_hour_value):
    return (_amount(print_time_minutes) / 60) * _amount(depreciation_per_hour_value)


def labour_cost(design_minutes, preparation_minutes, post_processing_minutes, other_minutes, labour_rate_per_hour):
    minutes = (_amount(design_minutes) + _amount(preparation_minutes)
               + _amount(post_processing_minutes) + _amount(other_minutes))
    return minutes / 60 * _amount(labour_rate_per_hour)


# ---------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class PricingConfig:
    markup_percent: float = 0.0
    discount_percent: float = 0.0
    tax_rate: float = 0.0
    labour_rate_per_hour: float = 0.0
    electricity_cost_per_kwh: float = 0.0

    @classmethod
    def from_settings(cls, settings: Mapping, **overrides):
        """
        Build a config from the settings table (string values) plus per-quote
        overrides such as markup_percent and discount_percent.
        """
        values = {
            'markup_percent': settings.get('default_markup_percent'),
            'discount_percent': 0.0,
            'tax_rate': settings.get('tax_rate'),
            'labour_rate_per_hour': settings.get('labour_rate_per_hour'),
            'electricity_cost_per_kwh': settings.get('electricity_cost_per_kwh'),
        }
        for key, value in overrides.items():
            if key in values and value is not None:
                values[key] = value
        return cls(**{key: _amount(value) for key, value in values.items()})


@dataclass(frozen=True)
class CostBreakdown:
    filament_total: float = 0.0
    hardware_total: float = 0.0
    power_cost: float = 0.0
    depreciation_cost: float = 0.0
    labour_cost: float = 0.0
    materials_subtotal: float = 0.0
    services_subtotal: float = 0.0
    subtotal: float = 0.0
    markup_amount: float = 0.0
    after_markup: float = 0.0
    discount_amount: float = 0.0
    after_discount: float = 0.0
    tax_amount: float = 0.0
    final_total: float = 0.0

    def to_dict(self):
        return asdict(self)

    def rounded(self):
        return {f.name: round2(getattr(self, f.name)) for f in fields(self)}


def filament_price_per_gram(line: Mapping):
    if 'filament_price_per_gram' in line:
        return line['filament_price_per_gram']
    return line.get('price_per_gram')


def print_setup_costs(print_setup: Optional[Mapping], electricity_cost_per_kwh):
    """
    Return (power_cost, depreciation_cost) for a print setup.

    When the printer's power_usage / depreciation_per_hour are present the
    costs are computed; otherwise the snapshotted costs on the line are used.
    """
    if not print_setup:
        return 0.0, 0.0

    print_time = print_setup.get('print_time')
    if print_setup.get('power_usage') is not None:
        power = power_cost(print_setup['power_usage'], print_time, electricity_cost_per_kwh)
    else:
        power = _amount(print_setup.get('power_cost'))

    if print_setup.get('depreciation_per_hour') is not None:
        depreciation = depreciation_cost(print_time, print_setup['depreciation_per_hour'])
    else:
        depreciation = _amount(print_setup.get('depreciation_cost'))

    return power, depreciation


def labour_total(labour: Optional[Mapping], default_rate):
    if not labour:
        return 0.0
    rate = labour.get('labour_rate_per_hour')
    if to_number(rate, None) is None:
        rate = default_rate
    return labour_cost(
        labour.get('design_minutes'),
        labour.get('preparation_minutes'),
        labour.get('post_processing_minutes'),
        labour.get('other_minutes'),
        rate,
    )


def calculate_breakdown(filaments: Iterable[Mapping] = (),
                        hardware: Iterable[Mapping] = (),
                        print_setup: Optional[Mapping] = None,
                        labour: Optional[Mapping] = None,
                        config: PricingConfig = PricingConfig()) -> CostBreakdown:
    """
    Price a quote from its four line-item collections.

    Markup, discount and tax compound in that order: the discount applies to
    the marked-up price and tax applies to the discounted price.
    """
    filament_total = sum(
        (filament_line_cost(line.get('grams_used'), filament_price_per_gram(line)) for line in filaments or ()),
        0.0,
    )
    hardware_total = sum(
        (hardware_line_cost(line.get('quantity'), line.get('unit_price')) for line in hardware or ()),
        0.0,
    )
    power, depreciation = print_setup_costs(print_setup, config.electricity_cost_per_kwh)
    labour_amount = labour_total(labour, config.labour_rate_per_hour)

    materials_subtotal = filament_total + hardware_total + power + depreciation
    services_subtotal = labour_amount
    subtotal = materials_subtotal + services_subtotal

    markup_amount = subtotal * config.markup_percent / 100
    after_markup = subtotal + markup_amount

    discount_amount = after_markup * min(config.discount_percent, 100.0) / 100
    after_discount = after_markup - discount_amount

    tax_amount = after_discount * config.tax_rate / 100 if config.tax_rate else 0.0
    final_total = after_discount + tax_amount

    return CostBreakdown(
        filament_total=filament_total,
        hardware_total=hardware_total,
        power_cost=power,
        depreciation_cost=depreciation,
        labour_cost=labour_amount,
        materials_subtotal=materials_subtotal,
        services_subtotal=services_subtotal,
        subtotal=subtotal,
        markup_amount=markup_amount,
        after_markup=after_markup,
        discount_amount=discount_amount,
        after_discount=after_discount,
        tax_amount=tax_amount,
        final_total=final_total,
    )
