import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from database.init import get_db
from enums.unit_status import UnitStatus
from schemas.unit_schema import UnitCreate
from services.unit_service import UnitService
from utils.dependencies import admin_required, get_current_user
from responses.success import data_response, created_response
from responses.error import conflict_error, not_found_error, internal_server_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/units", tags=["Units"])
unit_service = UnitService()


@router.post("")
def create_unit(
    unit_in: UnitCreate,
    db: Session = Depends(get_db),
    current_user=Depends(admin_required),
):
    if unit_service.get_by_room_number(db, unit_in.room_number):
        return conflict_error(f"Room {unit_in.room_number} already exists.")

    try:
        unit = unit_service.create_unit(db, unit_in)
        logger.info("Unit %s (room %s) created by admin %s", unit.id, unit.room_number, current_user.id)
        return created_response(unit_service.format_unit_response(unit))
    except Exception as e:
        logger.exception("Failed to create unit")
        return internal_server_error(str(e))


@router.get("")
def get_units(
    skip: int = 0,
    limit: int = 100,
    status: Optional[UnitStatus] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    units = unit_service.get_units(db, skip=skip, limit=limit, status=status)
    return data_response([unit_service.format_unit_response(u) for u in units])


@router.get("/available")
def get_available_units(
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    """Units a user can pick on the booking form"""
    units = unit_service.get_units(db, status=UnitStatus.AVAILABLE)
    return data_response([unit_service.format_unit_response(u) for u in units])


@router.get("/{unit_id}")
def get_unit(
    unit_id: int,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_user),
):
    unit = unit_service.get_unit(db, unit_id)
    if not unit:
        return not_found_error(f"Unit with ID {unit_id} not found.", code="UNIT_NOT_FOUND")
    return data_response(unit_service.format_unit_response(unit))
