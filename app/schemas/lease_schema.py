from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date, datetime

from enums.lease_status import LeaseStatus
from .unit_schema import UnitMinimumResponse


class LeaseTerminateRequest(BaseModel):
    checkout_date: Optional[date] = None


class LeaseResponse(BaseModel):
    id: int
    unit_id: int
    tenant_user_id: int
    start_date: date
    end_date: date
    monthly_rent: float
    status: LeaseStatus
    created_by_user_id: Optional[int] = None
    terminated_at: Optional[datetime] = None
    unit: Optional[UnitMinimumResponse] = None

    model_config = ConfigDict(from_attributes=True)
