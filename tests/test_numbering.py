from models import db, Setting
from services import numbering, quote_store


def test_sequential_numbers_have_no_gaps(app):
    numbers = [numbering.next_quote_number().quote_number for _ in range(12)]

    assert numbers == [f"3DQ{n:04d}" for n in range(1, 13)]
    assert len(set(numbers)) == len(numbers)


def test_peek_does_not_consume(app):
    assert numbering.peek_quote_number().quote_number == '3DQ0001'
    assert numbering.peek_quote_number().quote_number == '3DQ0001'
    assert numbering.next_quote_number().quote_number == '3DQ0001'
    assert numbering.peek_quote_number().quote_number == '3DQ0002'


def test_deleted_numbers_are_not_reused(app, quote_payload):
    number = numbering.next_quote_number()
    created = quote_store.create_quote(quote_payload(quote_number=number.quote_number))
    quote_store.delete_quote(created['id'])

    assert numbering.next_quote_number().quote_number == '3DQ0002'


def test_numbers_typed_by_hand_are_skipped(app, quote_payload):
    quote_store.create_quote(quote_payload(quote_number='3DQ0001'))
    assert numbering.next_quote_number().quote_number == '3DQ0002'


def test_peek_skips_numbers_already_used(app, quote_payload):
    preview = numbering.peek_quote_number()
    quote_store.create_quote(quote_payload(quote_number=preview.quote_number))

    assert numbering.peek_quote_number() == numbering.QuoteNumber('3DQ0002', 2)
    assert numbering.next_quote_number() == numbering.QuoteNumber('3DQ0002', 2)


def test_prefix_comes_from_settings(app):
    db.session.get(Setting, 'quote_prefix').value = 'PRT'
    db.session.commit()

    assert numbering.next_quote_number() == numbering.QuoteNumber('PRT0001', 1)


def test_missing_counter_restarts_at_one(app):
    db.session.delete(db.session.get(Setting, numbering.COUNTER_KEY))
    db.session.commit()

    assert numbering.next_quote_number().quote_number == '3DQ0001'
    assert db.session.get(Setting, numbering.COUNTER_KEY).value == '2'


def test_format_quote_number():
    assert numbering.format_quote_number('3DQ', 7) == '3DQ0007'
    assert numbering.format_quote_number('3DQ', 12345) == '3DQ12345'
