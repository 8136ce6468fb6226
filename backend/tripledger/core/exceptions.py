"""
Domain-specific exceptions for the ledger engine.

Services raise these for business rule violations; the API layer converts
them into JSON error responses using ``status_code``.
"""


class LedgerError(Exception):
    """Base exception for all ledger service errors."""
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(LedgerError):
    """Raised when no valid session identifies the caller."""
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(LedgerError):
    """Raised when a role or membership check fails."""
    status_code = 403
    default_message = "Forbidden"


class NotAMember(Forbidden):
    """Raised when the caller is not a member of the trip."""
    default_message = "Not a member of this trip"


class InsufficientRole(Forbidden):
    """Raised when the caller's trip role does not allow the action."""
    default_message = "Only organizers or co-organizers can perform this action"


class LastOrganizerViolation(Forbidden):
    """Raised when a change would leave a trip without an organizer."""
    default_message = "Trip must have at least one organizer"


class NotFound(LedgerError):
    """Raised when a trip, item, member or notification does not exist."""
    status_code = 404
    default_message = "Not found"


class InvalidCode(NotFound):
    """Raised when no trip matches a join code."""
    default_message = "Invalid join code"


class ValidationError(LedgerError):
    """Raised when input violates a shape or value rule."""
    status_code = 400
    default_message = "Invalid input"


class AlreadyMember(ValidationError):
    """Raised when a user is already a member of the trip."""
    default_message = "Already a member of this trip"


class EmptyTrip(ValidationError):
    """Raised when a budget operation targets a trip without members."""
    default_message = "Trip has no members to distribute the budget across"


class SplitMismatch(ValidationError):
    """Raised when participant shares do not add up to the expense amount."""
    default_message = "Participant splits must sum to total amount"


class InvalidParticipant(ValidationError):
    """Raised when a share references someone who is not a trip member."""
    default_message = "Invalid participant selected"
