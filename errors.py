"""
Error taxonomy for the progression engine.

Every error carries a stable ``kind`` and an HTTP status so the request
boundary can turn it into a structured JSON payload.
"""


class ProgressionError(Exception):
    """Base class for all expected failures."""
    kind = 'error'
    status_code = 500

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {'success': False, 'error': self.kind, 'message': self.message}
        if self.details:
            payload['details'] = self.details
        return payload


class InvalidInput(ProgressionError):
    """Missing required field, non-numeric XP, empty file."""
    kind = 'invalid_input'
    status_code = 400


class NotFound(ProgressionError):
    """Referenced student, class, mission, level or character does not exist."""
    kind = 'not_found'
    status_code = 404


class Conflict(ProgressionError):
    """Duplicate unique name on class or student creation."""
    kind = 'conflict'
    status_code = 409


class StorageUnavailable(ProgressionError):
    """Object store not configured or the write failed."""
    kind = 'storage_unavailable'
    status_code = 503


class StoreUnavailable(ProgressionError):
    """Database unreachable."""
    kind = 'store_unavailable'
    status_code = 503
