from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum
from sqlalchemy.sql import func
from database.init import Base
from enums.unit_type import UnitType
from enums.unit_status import UnitStatus


class Unit(Base):
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    room_number = Column(String(20), unique=True, index=True, nullable=False)
    floor = Column(Integer, nullable=False)
    unit_type = Column(Enum(UnitType), nullable=False)
    status = Column(Enum(UnitStatus), nullable=False, default=UnitStatus.AVAILABLE)
    rent_amount = Column(Numeric(10, 2), nullable=False)
    size_sqm = Column(Numeric(8, 2), nullable=True)
    description = Column(String(2000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
