import pytest

from services import quote_store
from services.errors import ValidationError
from services.invoice import render_invoice


@pytest.mark.parametrize('invoice_type', ['internal', 'client'])
def test_renders_pdf(app, quote_payload, invoice_type):
    quote = quote_store.create_quote(quote_payload(notes='Fragile <handle with care> & pack well'))

    pdf = render_invoice(quote, invoice_type, currency='£', company_name='Prints & Co')

    assert pdf.startswith(b'%PDF')
    assert len(pdf) > 1000


def test_renders_quote_without_optional_sections(app, quote_payload):
    quote = quote_store.create_quote(quote_payload(hardware=[], print_setup=None, labour=None))
    assert render_invoice(quote, 'internal').startswith(b'%PDF')


def test_rejects_unknown_invoice_type(app, quote_payload):
    quote = quote_store.create_quote(quote_payload())
    with pytest.raises(ValidationError):
        render_invoice(quote, 'proforma')


def test_header_fields_are_escaped(app, quote_payload):
    quote = quote_store.create_quote(quote_payload(quote_number='3DQ<0100> & co'))
    quote['date'] = '2025-06-07 <i>'

    for invoice_type in ('internal', 'client'):
        assert render_invoice(quote, invoice_type).startswith(b'%PDF')


def test_tax_row_uses_the_stored_rate(app, quote_payload):
    quote = quote_store.create_quote(quote_payload(tax_rate=12.5))
    assert quote['breakdown']['tax_amount'] > 0
    assert render_invoice(quote, 'client').startswith(b'%PDF')
