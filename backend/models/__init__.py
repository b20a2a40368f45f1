# backend/models/__init__.py

from .base import db

# Reference data must be registered before the quote tables that point at it.
from .setting import Setting
from .filament import Filament
from .printer import Printer
from .hardware import Hardware

from .quote import Quote, QuoteFilament, QuoteHardware, QuotePrintSetup, QuoteLabour

__all__ = [
    'db',
    'Setting',
    'Filament',
    'Printer',
    'Hardware',
    'Quote',
    'QuoteFilament',
    'QuoteHardware',
    'QuotePrintSetup',
    'QuoteLabour',
]
