# backend/models/setting.py

from .base import db


class Setting(db.Model):
    __tablename__ = 'settings'

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False)

    def __repr__(self):
        return f'<Setting {self.key}={self.value}>'
