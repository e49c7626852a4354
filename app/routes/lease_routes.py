import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from database.init import get_db
from database.models.lease_model import Lease
from database.models.user_model import User
from enums.lease_status import LeaseStatus
from exceptions.rental_request_exceptions import (
    GuardViolationError,
    ResourceNotFoundError,
)
from schemas.lease_schema import LeaseResponse, LeaseTerminateRequest
from services.lease_service import LeaseService
from utils.dependencies import admin_required, get_current_user
from utils.id_generator import generate_unit_code
from responses.success import data_response, success_response
from responses.error import (
    guard_violation_error,
    internal_server_error,
    resource_not_found_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leases", tags=["Leases"])
lease_service = LeaseService()


def format_lease_response(lease: Lease) -> LeaseResponse:
    response = LeaseResponse.model_validate(lease)
    if response.unit:
        response.unit.unit_code = generate_unit_code(response.unit.id)
    return response


@router.get("/me")
def get_my_leases(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    leases = lease_service.get_by_tenant(db, current_user.id)
    return data_response([format_lease_response(lease) for lease in leases])


@router.get("")
def get_leases(
    skip: int = 0,
    limit: int = 100,
    status: Optional[LeaseStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    leases = lease_service.get_all(db, skip=skip, limit=limit, status=status)
    return data_response([format_lease_response(lease) for lease in leases])


@router.post("/{lease_id}/terminate")
def terminate_lease(
    lease_id: int,
    payload: Optional[LeaseTerminateRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    """Ends a lease early. The unit is released and the tenant can book again."""
    checkout_date = payload.checkout_date if payload else None
    try:
        lease = lease_service.terminate_lease(db, lease_id, current_user.id, checkout_date)
    except GuardViolationError as e:
        return guard_violation_error(e)
    except ResourceNotFoundError as e:
        return resource_not_found_error(e)
    except Exception as e:
        logger.exception("Failed to terminate lease %s", lease_id)
        return internal_server_error(str(e))

    return success_response("Lease terminated.", format_lease_response(lease))
