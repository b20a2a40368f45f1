# backend/models/filament.py

from datetime import datetime
from .base import db


class Filament(db.Model):
    __tablename__ = 'filaments'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(50), nullable=False)
    diameter = db.Column(db.Float, nullable=False)
    spool_weight = db.Column(db.Float, nullable=False)  # grams
    spool_price = db.Column(db.Float, nullable=False)
    density = db.Column(db.Float, nullable=True)
    price_per_kg = db.Column(db.Float, nullable=False)
    color = db.Column(db.String(50), nullable=False)
    link = db.Column(db.String(500), nullable=True)
    status = db.Column(db.String(20), nullable=False, default='Active')
    spoolman_id = db.Column(db.Integer, unique=True, nullable=True)  # spool id in Spoolman, set by sync
    spoolman_synced = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def price_per_gram(self):
        return (self.price_per_kg or 0.0) / 1000

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'diameter': self.diameter,
            'spool_weight': self.spool_weight,
            'spool_price': self.spool_price,
            'density': self.density,
            'price_per_kg': self.price_per_kg,
            'price_per_gram': self.price_per_gram,
            'color': self.color,
            'link': self.link,
            'status': self.status,
            'spoolman_id': self.spoolman_id,
            'spoolman_synced': bool(self.spoolman_synced),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Filament id={self.id} name={self.name} status={self.status}>'
