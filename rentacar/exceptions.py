"""
Custom exception classes for the reservation engine.

These exceptions provide precise error types that controllers can catch
to render friendly messages instead of generic 500 errors. Storage and I/O
failures are never wrapped in them.
"""


class ReservationError(Exception):
    """Base class for business errors raised by the reservation engine."""

    default_message = "Error: reservation request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class InvalidWindowError(ReservationError):
    """Raised when pick-up is in the past or not strictly before drop-off."""

    default_message = "Error: reservation time is incorrect"


class CarUnavailableError(ReservationError):
    """Raised when the requested window conflicts with an active reservation."""

    default_message = "Error: car is not available for the selected time"


class LifecycleViolationError(ReservationError):
    """Raised when a CANCELED or DONE reservation is asked to change."""

    default_message = "Error: reservation status can not be changed"


class ReservationNotFoundError(ReservationError):
    """Raised when a reservation ID cannot be found in the system."""

    default_message = "Error: reservation not found"


class CarNotFoundError(ReservationError):
    """Raised when a car ID cannot be found in the system."""

    default_message = "Error: car not found"


class UserNotFoundError(ReservationError):
    """Raised when a user ID cannot be found in the system."""

    default_message = "Error: user not found"


class InvalidPageRequestError(ReservationError):
    """Raised for an unknown sort field, bad direction or non-positive page size."""

    default_message = "Error: invalid page request"


NOT_FOUND_ERRORS = (ReservationNotFoundError, CarNotFoundError, UserNotFoundError)
