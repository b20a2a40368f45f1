# backend/services/errors.py
"""
Error taxonomy for the quoting core.

Services raise these; the HTTP layer (middleware/errors.py) turns them into
JSON responses. Nothing in the core retries or swallows them.
"""


class QuoteError(Exception):
    """Base class for errors raised by the quoting services"""
    status_code = 500
    code = 'ERROR'

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        data = {
            'error': self.message,
            'code': self.code,
        }
        if self.field:
            data['field'] = self.field
        return data


class ValidationError(QuoteError):
    """A required field is missing or a value is out of range. Raised before any write."""
    status_code = 400
    code = 'VALIDATION_ERROR'


class NotFoundError(QuoteError):
    """The targeted quote, filament, printer or hardware row does not exist."""
    status_code = 404
    code = 'NOT_FOUND'


class ReferenceConflictError(QuoteError):
    """A reference row is still used by at least one quote line."""
    status_code = 409
    code = 'REFERENCE_CONFLICT'


class StorageError(QuoteError):
    """The underlying transaction failed and was rolled back."""
    status_code = 500
    code = 'STORAGE_ERROR'


class SpoolmanError(QuoteError):
    """The Spoolman API could not be reached or returned an unusable response."""
    status_code = 400
    code = 'SPOOLMAN_ERROR'
