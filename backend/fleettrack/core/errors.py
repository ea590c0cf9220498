"""
Exception types shared by services and routes.
"""


class MileageValidationError(ValueError):
    """Raised when a trip write is rejected by mileage validation."""

    def __init__(self, result):
        self.result = result
        super().__init__(result.message)


class StoreReadError(RuntimeError):
    """Raised when trip, vehicle or acknowledgement data cannot be read."""


class NotFoundError(LookupError):
    """Raised when a referenced record does not exist."""
