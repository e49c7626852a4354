from sqlalchemy import Column, Integer, Numeric, Date, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from database.init import Base
from enums.lease_status import LeaseStatus


class Lease(Base):
    __tablename__ = "leases"
    __table_args__ = (
        Index("ix_leases_unit_status", "unit_id", "status"),
        Index("ix_leases_tenant_status", "tenant_user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)
    tenant_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    monthly_rent = Column(Numeric(10, 2), nullable=False)
    status = Column(Enum(LeaseStatus), nullable=False, default=LeaseStatus.ACTIVE)

    created_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    terminated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    unit = relationship("Unit")
    tenant = relationship("User", foreign_keys=[tenant_user_id], back_populates="leases")
