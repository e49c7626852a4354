"""
Domain errors raised by the rental request lifecycle.

Every error carries a stable, machine-readable ``code`` that clients branch
on. Guard violations and not-found errors are distinct classes so callers
never confuse a missing row with a business-rule refusal.
"""

from enum import Enum
from typing import Optional


class RentalRequestErrorCode(str, Enum):
    # guard violations
    ALREADY_VILLAGER = "ALREADY_VILLAGER"
    PENDING_EXISTS = "PENDING_EXISTS"
    UNACKNOWLEDGED_REJECTION = "UNACKNOWLEDGED_REJECTION"
    ALREADY_DECIDED = "ALREADY_DECIDED"
    UNIT_UNAVAILABLE = "UNIT_UNAVAILABLE"
    INVALID_PERIOD = "INVALID_PERIOD"
    EMPTY_REJECTION_REASON = "EMPTY_REJECTION_REASON"
    NOT_REJECTED = "NOT_REJECTED"
    NOT_REQUEST_OWNER = "NOT_REQUEST_OWNER"
    NOT_APPLICANT = "NOT_APPLICANT"
    LEASE_NOT_ACTIVE = "LEASE_NOT_ACTIVE"

    # not found
    REQUEST_NOT_FOUND = "REQUEST_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    UNIT_NOT_FOUND = "UNIT_NOT_FOUND"
    LEASE_NOT_FOUND = "LEASE_NOT_FOUND"

    def __str__(self):
        return self.value


class RentalRequestError(Exception):
    def __init__(self, code: RentalRequestErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or code.value
        super().__init__(self.message)


class GuardViolationError(RentalRequestError):
    """A business-rule precondition was not met. Never retried."""


class ResourceNotFoundError(RentalRequestError):
    """The request, unit, user or lease does not exist."""
