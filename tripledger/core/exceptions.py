"""
Domain errors raised by the ledger services.

Every error carries the HTTP status it maps to and a machine-readable code;
the message is shown to the acting user as-is, so it names the precise reason.
"""
from fastapi import status


class TripLedgerError(Exception):
    """Base class for all domain errors."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TripLedgerError):
    """Bad input shape: non-positive amount, empty participant set, bad dates."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"


class PayerNotParticipantError(ValidationError):
    """The designated payer is not a current participant of the trip."""
    code = "payer_not_participant"


class ConflictError(TripLedgerError):
    """Duplicate invitation, already a member, already accepted."""
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class NotFoundError(TripLedgerError):
    """A trip, expense, split, invitation or participant does not exist."""
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class UnauthorizedError(TripLedgerError):
    """The acting user lacks the role required for the operation."""
    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"


class ExpiredError(TripLedgerError):
    """The invitation is at or past its expiry time."""
    status_code = status.HTTP_410_GONE
    code = "expired"


class PartialAggregationError(TripLedgerError):
    """One aggregation sub-query failed. Logged, never propagated."""
    status_code = status.HTTP_200_OK
    code = "partial_aggregation"

    def __init__(self, field: str, cause: Exception):
        super().__init__(f"Could not compute '{field}': {cause}")
        self.field = field
        self.cause = cause
