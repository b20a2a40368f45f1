import pytest

from models import Quote, QuoteFilament, QuoteHardware, QuotePrintSetup, QuoteLabour
from services import quote_store, reference_data, settings_store
from services.date_utils import today_local
from services.errors import NotFoundError, ValidationError


def test_create_and_read_back(app, quote_payload, filament_id, printer_id, hardware_id):
    created = quote_store.create_quote(quote_payload())
    quote = quote_store.get_quote(created['id'])

    assert quote['quote_number'] == '3DQ0100'
    assert quote['title'] == '3DQ0100 - Jane Smith'
    assert quote['date'] == '2025-06-07'
    assert quote['is_quick_quote'] is False

    [filament] = quote['filaments']
    assert filament['filament_id'] == filament_id
    assert filament['filament_name'] == 'PLA Black'
    assert filament['filament_price_per_gram'] == pytest.approx(0.01749)
    assert filament['total_cost'] == pytest.approx(1.749)

    [hardware] = quote['hardware']
    assert hardware['hardware_id'] == hardware_id
    assert hardware['total_cost'] == pytest.approx(10.29)

    assert quote['print_setup']['printer_id'] == printer_id
    assert quote['print_setup']['power_cost'] == pytest.approx(0.12996)
    assert quote['print_setup']['depreciation_cost'] == pytest.approx(0.84)

    assert quote['labour']['design_minutes'] == 0
    assert quote['labour']['labour_rate_per_hour'] == pytest.approx(13.0)
    assert quote['labour']['total_cost'] == pytest.approx(2.1667, abs=1e-4)

    assert round(quote['total_cost'], 2) == 25.23
    assert quote['breakdown']['final_total'] == pytest.approx(quote['total_cost'])


def test_total_cost_is_recomputed(app, quote_payload):
    created = quote_store.create_quote(quote_payload(total_cost=1.0))
    assert round(created['total_cost'], 2) == 25.23


def test_lines_keep_their_snapshot_when_reference_changes(app, quote_payload, filament_id):
    created = quote_store.create_quote(quote_payload())

    reference_data.save_reference('filaments', {
        'name': 'PLA Black v2',
        'type': 'PLA',
        'diameter': 1.75,
        'spool_weight': 1000,
        'spool_price': 30,
        'color': 'Black',
    }, filament_id)

    line = quote_store.get_quote(created['id'])['filaments'][0]
    assert line['filament_name'] == 'PLA Black'
    assert line['filament_price_per_gram'] == pytest.approx(0.01749)


def test_supplied_line_values_override_the_reference(app, quote_payload, filament_id):
    payload = quote_payload(filaments=[{
        'filament_id': filament_id,
        'filament_name': 'Custom PLA',
        'filament_price_per_gram': 0.05,
        'grams_used': 10,
    }])
    line = quote_store.create_quote(payload)['filaments'][0]

    assert line['filament_name'] == 'Custom PLA'
    assert line['filament_price_per_gram'] == 0.05
    assert line['total_cost'] == pytest.approx(0.5)


def test_update_replaces_every_child_collection(app, quote_payload, filament_id):
    created = quote_store.create_quote(quote_payload())

    updated = quote_store.update_quote(created['id'], quote_payload(
        customer_name='John Doe',
        filaments=[{'filament_id': filament_id, 'grams_used': 40},
                   {'filament_id': filament_id, 'grams_used': 60}],
        hardware=[],
        print_setup=None,
        labour=None,
    ))

    assert updated['id'] == created['id']
    assert updated['customer_name'] == 'John Doe'
    assert [line['grams_used'] for line in updated['filaments']] == [40, 60]
    assert updated['hardware'] == []
    assert updated['print_setup'] is None
    assert updated['labour'] is None
    assert QuoteHardware.query.count() == 0
    assert QuotePrintSetup.query.count() == 0
    assert QuoteLabour.query.count() == 0


def test_update_keeps_title_when_omitted(app, quote_payload):
    created = quote_store.create_quote(quote_payload(title='Enclosure'))
    updated = quote_store.update_quote(created['id'], quote_payload(title=None, markup_percent=10))

    assert updated['title'] == 'Enclosure'
    assert updated['markup_percent'] == 10


def test_update_accepts_print_setup_alias(app, quote_payload, printer_id):
    created = quote_store.create_quote(quote_payload(print_setup=None))
    assert created['print_setup'] is None

    payload = quote_payload()
    payload['printSetup'] = payload.pop('print_setup')
    updated = quote_store.update_quote(created['id'], payload)
    assert updated['print_setup']['printer_id'] == printer_id


def test_duplicate_copies_lines_under_a_new_number(app, quote_payload):
    original = quote_store.create_quote(quote_payload())
    copy = quote_store.duplicate_quote(original['id'])

    assert copy['id'] != original['id']
    assert copy['quote_number'] == '3DQ0001'
    assert copy['title'] == '3DQ0001 - Jane Smith (Copy)'
    assert copy['date'] == today_local('Europe/London').isoformat()
    assert copy['total_cost'] == pytest.approx(original['total_cost'])

    def strip(lines):
        return [{k: v for k, v in line.items() if k not in ('id', 'quote_id')} for line in lines]

    assert strip(copy['filaments']) == strip(original['filaments'])
    assert strip(copy['hardware']) == strip(original['hardware'])
    assert strip([copy['labour']]) == strip([original['labour']])

    unchanged = quote_store.get_quote(original['id'])
    assert unchanged['quote_number'] == '3DQ0100'
    assert [line['id'] for line in unchanged['filaments']] == [line['id'] for line in original['filaments']]


def test_delete_removes_lines(app, quote_payload):
    created = quote_store.create_quote(quote_payload())
    quote_store.delete_quote(created['id'])

    assert Quote.query.count() == 0
    assert QuoteFilament.query.count() == 0
    assert QuoteHardware.query.count() == 0
    assert QuotePrintSetup.query.count() == 0
    assert QuoteLabour.query.count() == 0
    with pytest.raises(NotFoundError):
        quote_store.get_quote(created['id'])


def test_list_returns_headers_newest_first(app, quote_payload):
    quote_store.create_quote(quote_payload(quote_number='3DQ0100'))
    quote_store.create_quote(quote_payload(quote_number='3DQ0101'))

    quotes = quote_store.list_quotes()
    assert [q['quote_number'] for q in quotes] == ['3DQ0101', '3DQ0100']
    assert 'filaments' not in quotes[0]
    assert quote_store.count_quotes() == 2


@pytest.mark.parametrize('overrides, field', [
    ({'customer_name': ''}, 'customer_name'),
    ({'quote_number': None}, 'quote_number'),
    ({'date': 'not-a-date'}, 'date'),
    ({'markup_percent': None}, 'markup_percent'),
    ({'discount_percent': 150}, 'discount_percent'),
    ({'quantity': 0}, 'quantity'),
])
def test_invalid_header_is_rejected(app, quote_payload, overrides, field):
    with pytest.raises(ValidationError) as exc_info:
        quote_store.create_quote(quote_payload(**overrides))

    assert exc_info.value.field == field
    assert Quote.query.count() == 0


def test_negative_line_value_is_rejected(app, quote_payload, filament_id):
    with pytest.raises(ValidationError):
        quote_store.create_quote(quote_payload(filaments=[{'filament_id': filament_id, 'grams_used': -5}]))
    assert Quote.query.count() == 0


def test_missing_reference_leaves_nothing_behind(app, quote_payload, filament_id):
    payload = quote_payload(filaments=[{'filament_id': filament_id, 'grams_used': 10},
                                       {'filament_id': 9999, 'grams_used': 10}])
    with pytest.raises(NotFoundError):
        quote_store.create_quote(payload)

    assert Quote.query.count() == 0
    assert QuoteFilament.query.count() == 0


def test_duplicate_quote_number_is_rejected(app, quote_payload):
    quote_store.create_quote(quote_payload())
    with pytest.raises(ValidationError) as exc_info:
        quote_store.create_quote(quote_payload())
    assert exc_info.value.field == 'quote_number'


def test_unknown_quote_raises_not_found(app, quote_payload):
    with pytest.raises(NotFoundError):
        quote_store.get_quote(42)
    with pytest.raises(NotFoundError):
        quote_store.update_quote(42, quote_payload())
    with pytest.raises(NotFoundError):
        quote_store.delete_quote(42)
    with pytest.raises(NotFoundError):
        quote_store.duplicate_quote(42)
    assert Quote.query.count() == 0


def test_failed_update_keeps_the_original_lines(app, quote_payload, filament_id):
    created = quote_store.create_quote(quote_payload())

    with pytest.raises(NotFoundError):
        quote_store.update_quote(created['id'], quote_payload(
            customer_name='John Doe',
            filaments=[{'filament_id': filament_id, 'grams_used': 40},
                       {'filament_id': 9999, 'grams_used': 10}],
            hardware=[],
            labour={'design_minutes': 60},
        ))

    quote = quote_store.get_quote(created['id'])
    assert quote['customer_name'] == 'Jane Smith'
    assert [line['grams_used'] for line in quote['filaments']] == [100]
    assert len(quote['hardware']) == 1
    assert quote['print_setup']['print_time'] == 360
    assert quote['labour']['design_minutes'] == 0
    assert quote['labour']['preparation_minutes'] == 5
    assert quote['total_cost'] == pytest.approx(created['total_cost'])


@pytest.mark.parametrize('overrides, field', [
    ({'filaments': [5]}, 'filaments[0]'),
    ({'filaments': 'abc'}, 'filaments'),
    ({'hardware': [None]}, 'hardware[0]'),
    ({'labour': 'lots'}, 'labour'),
])
def test_malformed_lines_are_rejected(app, quote_payload, overrides, field):
    with pytest.raises(ValidationError) as exc_info:
        quote_store.create_quote(quote_payload(**overrides))

    assert exc_info.value.field == field
    assert Quote.query.count() == 0


def test_saved_quote_keeps_its_tax_rate(app, quote_payload):
    created = quote_store.create_quote(quote_payload())
    assert created['tax_rate'] == 0

    settings_store.update_setting('tax_rate', '20')

    quote = quote_store.get_quote(created['id'])
    assert quote['tax_rate'] == 0
    assert quote['breakdown']['tax_amount'] == 0
    assert quote['breakdown']['final_total'] == pytest.approx(quote['total_cost'])
    assert round(quote['total_cost'], 2) == 25.23


def test_new_quote_takes_the_current_tax_rate(app, quote_payload):
    settings_store.update_setting('tax_rate', '20')

    created = quote_store.create_quote(quote_payload())
    assert created['tax_rate'] == 20
    assert round(created['total_cost'], 2) == 30.28
    assert created['breakdown']['final_total'] == pytest.approx(created['total_cost'])

    settings_store.update_setting('tax_rate', '0')
    updated = quote_store.update_quote(created['id'], quote_payload(customer_name='John Doe'))
    assert updated['tax_rate'] == 20
    assert updated['total_cost'] == pytest.approx(created['total_cost'])

    copy = quote_store.duplicate_quote(created['id'])
    assert copy['tax_rate'] == 20
    assert copy['total_cost'] == pytest.approx(created['total_cost'])


def test_tax_rate_can_be_submitted(app, quote_payload):
    created = quote_store.create_quote(quote_payload(tax_rate=10))
    assert created['tax_rate'] == 10
    assert created['breakdown']['tax_amount'] == pytest.approx(created['breakdown']['after_discount'] * 0.1)

    with pytest.raises(ValidationError) as exc_info:
        quote_store.create_quote(quote_payload(quote_number='3DQ0101', tax_rate=-1))
    assert exc_info.value.field == 'tax_rate'


def test_quick_quote_uses_default_markup_and_today(app, filament_id, printer_id):
    quote = quote_store.create_quick_quote(
        {'quote_number': '3DQ0200', 'customer_name': 'Walk-in'},
        filament={'filament_id': filament_id, 'grams_used': 100},
        print_setup={'printer_id': printer_id, 'print_time': 360},
    )

    assert quote['is_quick_quote'] is True
    assert quote['markup_percent'] == 50
    assert quote['date'] is not None
    assert len(quote['filaments']) == 1
    assert quote['hardware'] == []
    assert quote['labour'] is None
