# tests/test_booking_eligibility.py
from datetime import date

from conftest import rental_request_in
from database.models import Lease, RentalRequest
from enums.lease_status import LeaseStatus
from enums.rental_request_status import RentalRequestState, RentalRequestStatus
from enums.user_role import UserRole
from services.booking_eligibility import (
    MESSAGE_ACKNOWLEDGE,
    MESSAGE_ACTIVE_LEASE,
    MESSAGE_APPROVED,
    MESSAGE_CAN_BOOK,
    MESSAGE_NOT_APPLICANT,
    MESSAGE_PENDING,
    build_booking_eligibility,
)
from services.rental_request_service import RentalRequestService

service = RentalRequestService()


def _request(status, acknowledged=False, **values):
    return RentalRequest(
        id=7,
        user_id=1,
        unit_id=3,
        status=status,
        rejection_acknowledged=acknowledged,
        **values,
    )


def _lease(status):
    return Lease(
        id=11,
        unit_id=3,
        tenant_user_id=1,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
        status=status,
    )


def test_no_request_user_can_book():
    result = build_booking_eligibility(UserRole.USER)

    assert result.can_create_new_request is True
    assert not (result.is_pending or result.is_approved or result.is_rejected)
    assert result.requires_acknowledgement is False
    assert result.has_active_lease is False
    assert result.request_id is None
    assert result.status_message == MESSAGE_CAN_BOOK


def test_no_request_villager_cannot_book():
    result = build_booking_eligibility(UserRole.VILLAGER)

    assert result.can_create_new_request is False
    assert result.has_active_lease is True
    assert result.status_message == MESSAGE_ACTIVE_LEASE


def test_pending_request_blocks_booking():
    result = build_booking_eligibility(UserRole.USER, _request(RentalRequestStatus.PENDING))

    assert result.can_create_new_request is False
    assert result.is_pending is True
    assert result.state == RentalRequestState.PENDING
    assert result.request_id == 7
    assert result.status_message == MESSAGE_PENDING


def test_unacknowledged_rejection_requires_acknowledgement():
    latest = _request(RentalRequestStatus.REJECTED, rejection_reason="incomplete documents")

    result = build_booking_eligibility(UserRole.USER, latest)

    assert result.can_create_new_request is False
    assert result.is_rejected is True
    assert result.requires_acknowledgement is True
    assert result.rejection_reason == "incomplete documents"
    assert result.status_message == MESSAGE_ACKNOWLEDGE


def test_acknowledged_rejection_unlocks_booking():
    latest = _request(RentalRequestStatus.REJECTED, acknowledged=True, rejection_reason="x")

    result = build_booking_eligibility(UserRole.USER, latest)

    assert result.can_create_new_request is True
    assert result.is_rejected is True
    assert result.requires_acknowledgement is False
    assert result.state == RentalRequestState.REJECTED_ACKNOWLEDGED
    assert result.status_message == MESSAGE_CAN_BOOK


def test_approved_with_active_lease_blocks_booking():
    lease = _lease(LeaseStatus.ACTIVE)
    latest = _request(RentalRequestStatus.APPROVED, resulting_lease_id=lease.id)

    result = build_booking_eligibility(UserRole.VILLAGER, latest, resulting_lease=lease, active_lease=lease)

    assert result.can_create_new_request is False
    assert result.is_approved is True
    assert result.has_active_lease is True
    assert result.lease_id == 11
    assert result.lease_end_date == date(2025, 12, 31)
    assert result.status_message == MESSAGE_ACTIVE_LEASE


def test_approved_with_ended_lease_unlocks_booking():
    lease = _lease(LeaseStatus.TERMINATED)
    latest = _request(RentalRequestStatus.APPROVED, resulting_lease_id=lease.id)

    result = build_booking_eligibility(UserRole.USER, latest, resulting_lease=lease)

    assert result.can_create_new_request is True
    assert result.is_approved is True
    assert result.has_active_lease is False
    assert result.status_message == MESSAGE_CAN_BOOK


def test_approved_with_lease_still_active_keeps_booking_locked():
    lease = _lease(LeaseStatus.ACTIVE)
    latest = _request(RentalRequestStatus.APPROVED, resulting_lease_id=lease.id)

    result = build_booking_eligibility(UserRole.USER, latest, resulting_lease=lease)

    assert result.can_create_new_request is False
    assert result.has_active_lease is False
    assert result.status_message == MESSAGE_APPROVED


def test_admin_can_never_book():
    assert build_booking_eligibility(UserRole.ADMIN).can_create_new_request is False

    latest = _request(RentalRequestStatus.REJECTED, acknowledged=True, rejection_reason="x")
    result = build_booking_eligibility(UserRole.ADMIN, latest)

    assert result.can_create_new_request is False
    assert result.has_active_lease is False
    assert result.status_message == MESSAGE_NOT_APPLICANT


def test_villager_role_wins_over_acknowledged_rejection():
    latest = _request(RentalRequestStatus.REJECTED, acknowledged=True, rejection_reason="x")

    result = build_booking_eligibility(UserRole.VILLAGER, latest)

    assert result.can_create_new_request is False
    assert result.has_active_lease is True


def test_projection_reads_the_latest_request(db, make_user, make_unit, admin):
    user = make_user()
    unit = make_unit()
    first = service.submit_request(db, user.id, rental_request_in(unit.id))
    service.reject(db, first.id, admin.id, "incomplete documents")
    service.acknowledge_rejection(db, first.id, user.id)
    second = service.submit_request(db, user.id, rental_request_in(unit.id))

    result = service.get_latest_request_status(db, user.id)

    assert result.request_id == second.id
    assert result.is_pending is True
    assert result.unit_room_number == unit.room_number
    assert result.can_create_new_request is False


def test_projection_is_recomputed_after_each_decision(db, make_user, make_unit, admin):
    user = make_user()
    rental_request = service.submit_request(db, user.id, rental_request_in(make_unit().id))
    assert service.get_latest_request_status(db, user.id).is_pending is True

    service.approve(db, rental_request.id, admin.id, date(2025, 1, 1), date(2025, 12, 31))

    result = service.get_latest_request_status(db, user.id)
    assert result.is_approved is True
    assert result.has_active_lease is True
    assert result.lease_id == rental_request.resulting_lease_id
