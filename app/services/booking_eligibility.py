"""
Booking eligibility projection.

Pure derivation of what a user may do on the booking page from their role,
their most recent rental request and the lease it produced. No I/O happens
here; ``RentalRequestService.get_latest_request_status`` loads fresh rows on
every call and hands them in.
"""

from typing import Optional

from database.models.lease_model import Lease
from database.models.rental_request_model import RentalRequest
from enums.lease_status import LeaseStatus
from enums.rental_request_status import RentalRequestState
from enums.user_role import UserRole
from schemas.rental_request_response import BookingEligibilityResponse

MESSAGE_CAN_BOOK = "You can submit a new booking request"
MESSAGE_PENDING = "Your booking request is pending approval"
MESSAGE_ACTIVE_LEASE = "You already have an active lease"
MESSAGE_APPROVED = "Your booking request has been approved"
MESSAGE_NOT_APPLICANT = "Only regular user accounts can submit booking requests"
MESSAGE_ACKNOWLEDGE = (
    "Please acknowledge your previous rejection before submitting a new request"
)


def lease_has_ended(lease: Optional[Lease]) -> bool:
    return lease is not None and lease.status != LeaseStatus.ACTIVE


def build_booking_eligibility(
    role: UserRole,
    latest_request: Optional[RentalRequest] = None,
    resulting_lease: Optional[Lease] = None,
    active_lease: Optional[Lease] = None,
) -> BookingEligibilityResponse:
    # role is the source of truth for "currently leased"
    has_active_lease = role == UserRole.VILLAGER
    # submission only accepts USER accounts
    may_apply = role == UserRole.USER
    shown_lease = active_lease or resulting_lease

    if latest_request is None:
        if may_apply:
            message = MESSAGE_CAN_BOOK
        elif has_active_lease:
            message = MESSAGE_ACTIVE_LEASE
        else:
            message = MESSAGE_NOT_APPLICANT
        return BookingEligibilityResponse(
            can_create_new_request=may_apply,
            has_active_lease=has_active_lease,
            lease_id=shown_lease.id if shown_lease else None,
            lease_end_date=shown_lease.end_date if shown_lease else None,
            status_message=message,
        )

    state = latest_request.state
    unlocked = state == RentalRequestState.REJECTED_ACKNOWLEDGED or (
        state == RentalRequestState.APPROVED and lease_has_ended(resulting_lease)
    )
    can_create = may_apply and unlocked
    requires_acknowledgement = state == RentalRequestState.REJECTED_UNACKNOWLEDGED

    if state == RentalRequestState.PENDING:
        message = MESSAGE_PENDING
    elif requires_acknowledgement:
        message = MESSAGE_ACKNOWLEDGE
    elif has_active_lease:
        message = MESSAGE_ACTIVE_LEASE
    elif not may_apply:
        message = MESSAGE_NOT_APPLICANT
    elif can_create:
        message = MESSAGE_CAN_BOOK
    else:
        message = MESSAGE_APPROVED

    return BookingEligibilityResponse(
        can_create_new_request=can_create,
        is_pending=state == RentalRequestState.PENDING,
        is_approved=state == RentalRequestState.APPROVED,
        is_rejected=state
        in (RentalRequestState.REJECTED_UNACKNOWLEDGED, RentalRequestState.REJECTED_ACKNOWLEDGED),
        requires_acknowledgement=requires_acknowledgement,
        has_active_lease=has_active_lease,
        request_id=latest_request.id,
        unit_id=latest_request.unit_id,
        unit_room_number=latest_request.unit.room_number if latest_request.unit else None,
        status=latest_request.status,
        state=state,
        request_date=latest_request.request_date,
        decision_date=latest_request.decision_date,
        rejection_reason=latest_request.rejection_reason,
        rejection_acknowledged_at=latest_request.rejection_acknowledged_at,
        lease_id=shown_lease.id if shown_lease else None,
        lease_end_date=shown_lease.end_date if shown_lease else None,
        status_message=message,
    )
