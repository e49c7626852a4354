from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Enum,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from database.init import Base
from enums.rental_request_status import RentalRequestStatus, RentalRequestState, to_state


def _utcnow():
    return datetime.now(timezone.utc)


class RentalRequest(Base):
    """
    One booking attempt by one user for one unit.

    ``pending_user_id`` mirrors ``user_id`` while the request is PENDING and
    is NULL afterwards. Its UNIQUE constraint allows at most one PENDING
    request per user on any backend, NULLs being distinct.
    """

    __tablename__ = "rental_requests"
    __table_args__ = (
        CheckConstraint(
            "(status = 'PENDING' AND pending_user_id IS NOT NULL)"
            " OR (status <> 'PENDING' AND pending_user_id IS NULL)",
            name="ck_rental_requests_pending_slot",
        ),
        CheckConstraint(
            "status <> 'APPROVED' OR resulting_lease_id IS NOT NULL",
            name="ck_rental_requests_approved_has_lease",
        ),
        CheckConstraint(
            "status <> 'REJECTED' OR rejection_reason IS NOT NULL",
            name="ck_rental_requests_rejected_has_reason",
        ),
        CheckConstraint(
            "lease_duration_months > 0",
            name="ck_rental_requests_positive_duration",
        ),
        Index("ix_rental_requests_user_request_date", "user_id", "request_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)

    # applicant snapshot, copied at submission time
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(20), nullable=False)
    occupation = Column(String(100), nullable=True)
    emergency_contact = Column(String(255), nullable=True)
    emergency_phone = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)

    lease_duration_months = Column(Integer, nullable=False)
    status = Column(Enum(RentalRequestStatus), nullable=False, default=RentalRequestStatus.PENDING, index=True)
    pending_user_id = Column(Integer, unique=True, nullable=True)
    # bumped by every write, claims the row against concurrent decisions
    version = Column(Integer, nullable=False, default=1)

    request_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    decision_date = Column(DateTime(timezone=True), nullable=True)
    decided_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    rejection_reason = Column(Text, nullable=True)
    rejection_acknowledged = Column(Boolean, nullable=False, default=False)
    rejection_acknowledged_at = Column(DateTime(timezone=True), nullable=True)

    resulting_lease_id = Column(Integer, ForeignKey("leases.id"), nullable=True)

    updated_at = Column(DateTime(timezone=True), onupdate=_utcnow, nullable=True)

    user = relationship("User", foreign_keys=[user_id], back_populates="rental_requests")
    decided_by = relationship("User", foreign_keys=[decided_by_user_id])
    unit = relationship("Unit")
    resulting_lease = relationship("Lease")

    @property
    def state(self) -> RentalRequestState:
        return to_state(self.status, bool(self.rejection_acknowledged))

    @property
    def requires_acknowledgement(self) -> bool:
        return self.state == RentalRequestState.REJECTED_UNACKNOWLEDGED

    @property
    def monthly_rent(self):
        return self.unit.rent_amount if self.unit is not None else None

    @property
    def total_amount(self):
        if self.unit is None or self.lease_duration_months is None:
            return None
        return self.unit.rent_amount * self.lease_duration_months
