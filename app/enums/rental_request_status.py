from enum import Enum


class RentalRequestStatus(str, Enum):
    """Persisted status of a rental request"""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    def __str__(self):
        return self.value


class RentalRequestState(str, Enum):
    """
    Lifecycle state of a rental request.

    Folds ``status`` and ``rejection_acknowledged`` into one value so that
    combinations such as "approved but awaiting acknowledgement" cannot be
    expressed.
    """

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED_UNACKNOWLEDGED = "REJECTED_UNACKNOWLEDGED"
    REJECTED_ACKNOWLEDGED = "REJECTED_ACKNOWLEDGED"

    def __str__(self):
        return self.value


RENTAL_REQUEST_TRANSITIONS = {
    RentalRequestState.PENDING: {
        RentalRequestState.APPROVED,
        RentalRequestState.REJECTED_UNACKNOWLEDGED,
    },
    RentalRequestState.REJECTED_UNACKNOWLEDGED: {
        RentalRequestState.REJECTED_ACKNOWLEDGED,
    },
    RentalRequestState.APPROVED: set(),
    RentalRequestState.REJECTED_ACKNOWLEDGED: set(),
}


def to_state(status: RentalRequestStatus, rejection_acknowledged: bool) -> RentalRequestState:
    if status == RentalRequestStatus.PENDING:
        return RentalRequestState.PENDING
    if status == RentalRequestStatus.APPROVED:
        return RentalRequestState.APPROVED
    if rejection_acknowledged:
        return RentalRequestState.REJECTED_ACKNOWLEDGED
    return RentalRequestState.REJECTED_UNACKNOWLEDGED


def can_transition(current: RentalRequestState, target: RentalRequestState) -> bool:
    return target in RENTAL_REQUEST_TRANSITIONS.get(current, set())
