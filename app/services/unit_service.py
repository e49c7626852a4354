from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session

from database.models.unit_model import Unit
from enums.unit_status import UnitStatus
from schemas.unit_schema import UnitCreate, UnitResponse
from services.base_service import BaseService
from utils.id_generator import generate_unit_code


class UnitService(BaseService):
    def __init__(self):
        super().__init__(Unit)

    def create_unit(self, db: Session, unit_in: UnitCreate) -> Unit:
        return self.create(db, unit_in)

    def get_unit(self, db: Session, unit_id: int) -> Optional[Unit]:
        return self.get(db, unit_id)

    def get_by_room_number(self, db: Session, room_number: str) -> Optional[Unit]:
        return db.query(Unit).filter(Unit.room_number == room_number).first()

    def get_units(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        status: Optional[UnitStatus] = None,
    ) -> List[Unit]:
        query = db.query(Unit)
        if status is not None:
            query = query.filter(Unit.status == status)
        return query.order_by(Unit.room_number).offset(skip).limit(limit).all()

    def set_unit_status(
        self,
        db: Session,
        unit_id: int,
        status: UnitStatus,
        expected: Optional[UnitStatus] = None,
    ) -> bool:
        """
        Set the unit status inside the caller's transaction.

        With ``expected`` the write only happens if the unit is still in that
        status at write time. Returns whether a row was changed.
        """
        stmt = update(Unit).where(Unit.id == unit_id)
        if expected is not None:
            stmt = stmt.where(Unit.status == expected)
        result = db.execute(
            stmt.values(status=status).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def format_unit_response(self, unit: Unit) -> UnitResponse:
        response = UnitResponse.model_validate(unit)
        response.unit_code = generate_unit_code(unit.id)
        return response
