"""Scheduling error taxonomy.

Every error raised by the ledger or the services is one of these; the API
layer maps them to HTTP responses in ``main.py``.
"""


class SchedulingError(Exception):
    """Base class for scheduling failures"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Missing or malformed request data. Not retryable."""

    status_code = 400


class ConflictError(SchedulingError):
    """The (doctor, date, slot) key is already occupied. Not retryable."""

    status_code = 409

    def __init__(self, message: str = "This time slot is already booked for the selected doctor."):
        super().__init__(message)


class NotFoundError(SchedulingError):
    status_code = 404

    def __init__(self, message: str = "Appointment not found."):
        super().__init__(message)


class StoreUnavailable(SchedulingError):
    """The store failed or timed out. The outcome is unknown; safe to retry."""

    status_code = 503

    def __init__(self, message: str = "The scheduling service is temporarily unavailable. Please try again."):
        super().__init__(message)
