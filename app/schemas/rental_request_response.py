from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import date, datetime

from enums.rental_request_status import RentalRequestStatus, RentalRequestState
from .unit_schema import UnitMinimumResponse
from .lease_schema import LeaseResponse


class RentalRequestResponse(BaseModel):
    id: int
    reference: Optional[str] = None
    user_id: int
    unit_id: int
    unit: Optional[UnitMinimumResponse] = None
    first_name: str
    last_name: str
    email: str
    phone: str
    occupation: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    notes: Optional[str] = None
    lease_duration_months: int
    monthly_rent: Optional[float] = None
    total_amount: Optional[float] = None
    status: RentalRequestStatus
    state: RentalRequestState
    request_date: datetime
    decision_date: Optional[datetime] = None
    decided_by_user_id: Optional[int] = None
    rejection_reason: Optional[str] = None
    rejection_acknowledged: bool
    rejection_acknowledged_at: Optional[datetime] = None
    resulting_lease_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ApprovalResponse(BaseModel):
    lease_id: int
    lease: LeaseResponse
    request: RentalRequestResponse


class AcknowledgeResponse(BaseModel):
    request_id: int
    acknowledged_at: Optional[datetime] = None
    message: str
    can_create_new_request: bool


class BookingEligibilityResponse(BaseModel):
    """What the booking page needs to decide between form, waiting screen and rejection modal."""

    can_create_new_request: bool
    is_pending: bool = False
    is_approved: bool = False
    is_rejected: bool = False
    requires_acknowledgement: bool = False
    has_active_lease: bool = False

    request_id: Optional[int] = None
    unit_id: Optional[int] = None
    unit_room_number: Optional[str] = None
    status: Optional[RentalRequestStatus] = None
    state: Optional[RentalRequestState] = None
    request_date: Optional[datetime] = None
    decision_date: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    rejection_acknowledged_at: Optional[datetime] = None

    lease_id: Optional[int] = None
    lease_end_date: Optional[date] = None

    status_message: str
