# backend/models/printer.py

from datetime import datetime
from .base import db


class Printer(db.Model):
    __tablename__ = 'printers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    material_diameter = db.Column(db.Float, nullable=False)
    price = db.Column(db.Float, nullable=False)
    depreciation_time = db.Column(db.Float, nullable=False)  # hours
    service_cost = db.Column(db.Float, nullable=False)
    power_usage = db.Column(db.Float, nullable=False)  # watts
    depreciation_per_hour = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='Active')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'material_diameter': self.material_diameter,
            'price': self.price,
            'depreciation_time': self.depreciation_time,
            'service_cost': self.service_cost,
            'power_usage': self.power_usage,
            'depreciation_per_hour': self.depreciation_per_hour,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Printer id={self.id} name={self.name} status={self.status}>'
