import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from database.models.user_model import User
from exceptions.rental_request_exceptions import (
    GuardViolationError,
    ResourceNotFoundError,
)
from schemas.lease_schema import LeaseResponse
from schemas.rental_request_response import ApprovalResponse
from schemas.rental_request_schema import (
    ApprovalRequest,
    RejectionRequest,
    RentalRequestCreate,
)
from services.email_service import EmailService
from services.rental_request_service import RentalRequestService
from utils.dependencies import admin_required, get_current_user, is_admin
from utils.id_generator import generate_request_reference, generate_unit_code
from responses.success import data_response, created_response, success_response
from responses.error import (
    forbidden_error,
    guard_violation_error,
    internal_server_error,
    resource_not_found_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rental-requests", tags=["Rental Requests"])
rental_request_service = RentalRequestService()
email_service = EmailService()


@router.post("")
async def submit_rental_request(
    request_in: RentalRequestCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        rental_request = rental_request_service.submit_request(db, current_user.id, request_in)
    except GuardViolationError as e:
        return guard_violation_error(e)
    except ResourceNotFoundError as e:
        return resource_not_found_error(e)
    except Exception as e:
        logger.exception("Failed to submit rental request")
        return internal_server_error(str(e))

    background_tasks.add_task(
        email_service.send_rental_request_submitted_email,
        rental_request.email,
        generate_request_reference(rental_request.id),
        rental_request.unit.room_number,
    )
    return created_response(
        rental_request_service.format_rental_request_response(rental_request),
        message="Rental request submitted successfully.",
    )


@router.get("/me/latest")
def get_my_latest_request_status(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """What the booking page should show: form, waiting screen or rejection notice"""
    try:
        return data_response(rental_request_service.get_latest_request_status(db, current_user.id))
    except ResourceNotFoundError as e:
        return resource_not_found_error(e)
    except Exception as e:
        logger.exception("Failed to load booking eligibility")
        return internal_server_error(str(e))


@router.get("/me")
def get_my_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    requests = rental_request_service.get_by_user(db, current_user.id)
    return data_response([rental_request_service.format_rental_request_response(r) for r in requests])


@router.get("/pending")
def get_pending_requests(
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    requests = rental_request_service.get_pending_requests(db)
    return data_response([rental_request_service.format_rental_request_response(r) for r in requests])


@router.get("")
def get_all_requests(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    requests = rental_request_service.get_all(db, skip=skip, limit=limit)
    return data_response([rental_request_service.format_rental_request_response(r) for r in requests])


@router.get("/{request_id}")
def get_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        rental_request = rental_request_service.get_or_raise(db, request_id)
    except ResourceNotFoundError as e:
        return resource_not_found_error(e)

    if rental_request.user_id != current_user.id and not is_admin(current_user):
        return forbidden_error("You are not authorized to view this request.")
    return data_response(rental_request_service.format_rental_request_response(rental_request))


@router.post("/{request_id}/approve")
async def approve_request(
    request_id: int,
    approval: ApprovalRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    try:
        rental_request, lease = rental_request_service.approve(
            db,
            request_id,
            current_user.id,
            approval.start_date,
            approval.end_date,
        )
    except GuardViolationError as e:
        return guard_violation_error(e)
    except ResourceNotFoundError as e:
        return resource_not_found_error(e)
    except Exception as e:
        logger.exception("Failed to approve rental request %s", request_id)
        return internal_server_error(str(e))

    background_tasks.add_task(
        email_service.send_rental_request_approved_email,
        rental_request.email,
        generate_request_reference(rental_request.id),
        rental_request.unit.room_number,
        lease.start_date,
        lease.end_date,
    )

    lease_response = LeaseResponse.model_validate(lease)
    if lease_response.unit:
        lease_response.unit.unit_code = generate_unit_code(lease_response.unit.id)
    return success_response(
        "Rental request approved and lease created.",
        ApprovalResponse(
            lease_id=lease.id,
            lease=lease_response,
            request=rental_request_service.format_rental_request_response(rental_request),
        ),
    )


@router.post("/{request_id}/reject")
async def reject_request(
    request_id: int,
    rejection: RejectionRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    try:
        rental_request = rental_request_service.reject(
            db, request_id, current_user.id, rejection.reason
        )
    except GuardViolationError as e:
        return guard_violation_error(e)
    except ResourceNotFoundError as e:
        return resource_not_found_error(e)
    except Exception as e:
        logger.exception("Failed to reject rental request %s", request_id)
        return internal_server_error(str(e))

    background_tasks.add_task(
        email_service.send_rental_request_rejected_email,
        rental_request.email,
        generate_request_reference(rental_request.id),
        rental_request.unit.room_number,
        rental_request.rejection_reason,
    )
    return success_response(
        "Rental request rejected.",
        rental_request_service.format_rental_request_response(rental_request),
    )


@router.post("/{request_id}/acknowledge")
def acknowledge_rejection(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        result = rental_request_service.acknowledge_rejection(db, request_id, current_user.id)
        return data_response(result)
    except GuardViolationError as e:
        return guard_violation_error(e)
    except ResourceNotFoundError as e:
        return resource_not_found_error(e)
    except Exception as e:
        logger.exception("Failed to acknowledge rejection of request %s", request_id)
        return internal_server_error(str(e))
