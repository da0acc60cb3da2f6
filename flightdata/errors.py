"""
Failure taxonomy shared by the write and read paths.

- ValidationError: malformed or missing required input. The client's
  fault; resolved before anything reaches the store.
- StoreFailure: the store could not complete the operation (connectivity,
  constraint violation, timeout, aborted transaction). May be transient,
  never retried here.

An unknown device or an empty time window is not an error; queries simply
return an empty list.
"""

from typing import Optional


class FlightDataError(Exception):
    """Base class for all FlightData failures."""

    error = 'flightdata_error'
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'error': self.error, 'message': self.message}


class ValidationError(FlightDataError):
    """Input was rejected before touching the store."""

    error = 'validation_error'
    status_code = 400

    @property
    def reason(self) -> str:
        return self.message


class StoreFailure(FlightDataError):
    """
    The store failed to complete a read or write.

    `kind` is one of the constants below and is stable across releases,
    so callers can decide on retry policy without parsing messages.
    """

    CONNECTIVITY = 'connectivity'
    CONSTRAINT_VIOLATION = 'constraint_violation'
    TIMEOUT = 'timeout'
    TRANSACTION_ABORTED = 'transaction_aborted'

    error = 'store_failure'
    status_code = 500

    def __init__(self, kind: str, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.operation = operation

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload['kind'] = self.kind
        if self.operation:
            payload['operation'] = self.operation
        return payload

    def __str__(self) -> str:
        return f'{self.kind}: {self.message}'
