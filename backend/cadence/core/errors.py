"""
Error taxonomy shared by the store, the tracker and the API layer.
"""
from typing import List, Optional


class CadenceError(Exception):
    """Base class for all cadence backend errors."""


class ValidationError(CadenceError):
    """A required field is missing or malformed."""

    def __init__(self, fields: List[str], message: Optional[str] = None):
        self.fields = list(fields)
        super().__init__(message or f"Invalid or missing fields: {', '.join(self.fields)}")


class NotFoundError(CadenceError):
    """No session record exists with the requested id."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Session record not found: {record_id}")


class PersistenceError(CadenceError):
    """The underlying storage could not be read or written."""


class SensorUpdateError(CadenceError):
    """The motion sensor feed reported an error instead of a sample."""


class NetworkSaveError(CadenceError):
    """A finished session could not be handed to the record store."""
