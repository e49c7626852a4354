from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date


class ApplicantSnapshot(BaseModel):
    """Applicant details as entered on the booking form. Stored as a copy, not a join."""

    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=20)
    occupation: Optional[str] = Field(default=None, max_length=100)
    emergency_contact: Optional[str] = Field(default=None, max_length=255)
    emergency_phone: Optional[str] = Field(default=None, max_length=20)


class RentalRequestCreate(ApplicantSnapshot):
    unit_id: int
    lease_duration_months: int = Field(gt=0)
    notes: Optional[str] = None


class ApprovalRequest(BaseModel):
    start_date: date
    # defaults to start_date + lease_duration_months
    end_date: Optional[date] = None


class RejectionRequest(BaseModel):
    reason: str
