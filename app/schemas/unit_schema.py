from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from enums.unit_type import UnitType
from enums.unit_status import UnitStatus


class UnitCreate(BaseModel):
    room_number: str = Field(min_length=1, max_length=20)
    floor: int
    unit_type: UnitType
    rent_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    size_sqm: Optional[Decimal] = Field(default=None, gt=0)
    description: Optional[str] = None


class UnitMinimumResponse(BaseModel):
    id: int
    unit_code: Optional[str] = None
    room_number: str
    floor: int
    rent_amount: float

    model_config = ConfigDict(from_attributes=True)


class UnitResponse(UnitMinimumResponse):
    unit_type: UnitType
    status: UnitStatus
    size_sqm: Optional[float] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
