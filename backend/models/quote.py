# backend/models/quote.py

from datetime import datetime
from .base import db


class Quote(db.Model):
    __tablename__ = 'quotes'

    id = db.Column(db.Integer, primary_key=True)
    quote_number = db.Column(db.String(50), unique=True, nullable=False)
    title = db.Column(db.String(300), nullable=False)
    customer_name = db.Column(db.String(200), nullable=False)
    date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    markup_percent = db.Column(db.Float, nullable=False, default=0.0)
    discount_percent = db.Column(db.Float, nullable=False, default=0.0)
    tax_rate = db.Column(db.Float, nullable=False, default=0.0)  # percent, fixed when the quote is saved
    quantity = db.Column(db.Integer, nullable=False, default=1)
    total_cost = db.Column(db.Float, nullable=False, default=0.0)
    is_quick_quote = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    filaments = db.relationship('QuoteFilament', backref='quote', cascade="all, delete-orphan",
                                order_by='QuoteFilament.id', passive_deletes=True)
    hardware = db.relationship('QuoteHardware', backref='quote', cascade="all, delete-orphan",
                               order_by='QuoteHardware.id', passive_deletes=True)
    print_setup = db.relationship('QuotePrintSetup', backref='quote', uselist=False,
                                  cascade="all, delete-orphan", passive_deletes=True)
    labour = db.relationship('QuoteLabour', backref='quote', uselist=False,
                             cascade="all, delete-orphan", passive_deletes=True)

    def header_dict(self):
        """Serializes the quote header without its child collections."""
        return {
            'id': self.id,
            'quote_number': self.quote_number,
            'title': self.title,
            'customer_name': self.customer_name,
            'date': self.date.isoformat() if self.date else None,
            'notes': self.notes,
            'markup_percent': self.markup_percent,
            'discount_percent': self.discount_percent,
            'tax_rate': self.tax_rate,
            'quantity': self.quantity,
            'total_cost': self.total_cost,
            'is_quick_quote': bool(self.is_quick_quote),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_dict(self):
        """Serializes the quote header joined with all four child collections."""
        data = self.header_dict()
        data['filaments'] = [line.to_dict() for line in self.filaments]
        data['hardware'] = [line.to_dict() for line in self.hardware]
        data['print_setup'] = self.print_setup.to_dict() if self.print_setup else None
        data['labour'] = self.labour.to_dict() if self.labour else None
        return data

    def __repr__(self):
        return f'<Quote id={self.id} number={self.quote_number}>'


class QuoteFilament(db.Model):
    __tablename__ = 'quote_filaments'

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    filament_id = db.Column(db.Integer, db.ForeignKey('filaments.id', ondelete='RESTRICT'), nullable=False)
    filament_name = db.Column(db.String(200), nullable=False)
    filament_price_per_gram = db.Column(db.Float, nullable=False)
    grams_used = db.Column(db.Float, nullable=False)
    total_cost = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'quote_id': self.quote_id,
            'filament_id': self.filament_id,
            'filament_name': self.filament_name,
            'filament_price_per_gram': self.filament_price_per_gram,
            'grams_used': self.grams_used,
            'total_cost': self.total_cost,
        }


class QuoteHardware(db.Model):
    __tablename__ = 'quote_hardware'

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False)
    hardware_id = db.Column(db.Integer, db.ForeignKey('hardware.id', ondelete='RESTRICT'), nullable=False)
    hardware_name = db.Column(db.String(200), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    unit_price = db.Column(db.Float, nullable=False)
    total_cost = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'quote_id': self.quote_id,
            'hardware_id': self.hardware_id,
            'hardware_name': self.hardware_name,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total_cost': self.total_cost,
        }


class QuotePrintSetup(db.Model):
    __tablename__ = 'quote_print_setup'

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False, unique=True)
    printer_id = db.Column(db.Integer, db.ForeignKey('printers.id', ondelete='RESTRICT'), nullable=False)
    printer_name = db.Column(db.String(200), nullable=False)
    print_time = db.Column(db.Float, nullable=False)  # minutes
    power_cost = db.Column(db.Float, nullable=False)
    depreciation_cost = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'quote_id': self.quote_id,
            'printer_id': self.printer_id,
            'printer_name': self.printer_name,
            'print_time': self.print_time,
            'power_cost': self.power_cost,
            'depreciation_cost': self.depreciation_cost,
        }


class QuoteLabour(db.Model):
    __tablename__ = 'quote_labour'

    id = db.Column(db.Integer, primary_key=True)
    quote_id = db.Column(db.Integer, db.ForeignKey('quotes.id', ondelete='CASCADE'), nullable=False, unique=True)
    design_minutes = db.Column(db.Float, nullable=False, default=0)
    preparation_minutes = db.Column(db.Float, nullable=False, default=0)
    post_processing_minutes = db.Column(db.Float, nullable=False, default=0)
    other_minutes = db.Column(db.Float, nullable=False, default=0)
    labour_rate_per_hour = db.Column(db.Float, nullable=False)
    total_cost = db.Column(db.Float, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'quote_id': self.quote_id,
            'design_minutes': self.design_minutes,
            'preparation_minutes': self.preparation_minutes,
            'post_processing_minutes': self.post_processing_minutes,
            'other_minutes': self.other_minutes,
            'labour_rate_per_hour': self.labour_rate_per_hour,
            'total_cost': self.total_cost,
        }
