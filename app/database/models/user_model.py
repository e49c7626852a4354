from database.init import Base

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from enums.user_role import UserRole


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True)
    hashed_password = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.USER)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    rental_requests = relationship(
        "RentalRequest",
        foreign_keys="RentalRequest.user_id",
        back_populates="user",
        order_by="RentalRequest.request_date",
    )
    leases = relationship(
        "Lease",
        foreign_keys="Lease.tenant_user_id",
        back_populates="tenant",
    )
