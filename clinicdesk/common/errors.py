"""Error kinds raised by the clinic services.

Each error names the entity it is about so the activity log can record
kind + operation + entity id for rejected operations.
"""
from typing import Optional


class ClinicError(Exception):
    kind = 'error'

    def __init__(self, message: str, entity: Optional[str] = None, entity_id=None):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.entity_id = entity_id


class ValidationError(ClinicError, ValueError):
    """A required field is missing or malformed. Raised before any mutation."""
    kind = 'validation'


class SchedulingConflict(ClinicError):
    """The requested slot overlaps an existing appointment (buffer included)."""
    kind = 'conflict'

    def __init__(self, message: str, entity_id=None, conflicting_id=None):
        super().__init__(message, 'appointment', entity_id)
        self.conflicting_id = conflicting_id


class NotFound(ClinicError, LookupError):
    kind = 'not_found'

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found", entity, entity_id)


class AuthFailure(ClinicError):
    """Bad credentials. Services return None/False for these; the API raises it."""
    kind = 'auth'
