import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from database.models.lease_model import Lease
from enums.lease_status import LeaseStatus
from enums.unit_status import UnitStatus
from enums.user_role import UserRole
from exceptions.rental_request_exceptions import (
    GuardViolationError,
    RentalRequestErrorCode,
    ResourceNotFoundError,
)
from services import auth_service
from services.unit_service import UnitService
from utils.transaction import run_in_transaction

logger = logging.getLogger(__name__)


class LeaseService:
    def __init__(self):
        self.unit_service = UnitService()

    def get(self, db: Session, lease_id: int) -> Optional[Lease]:
        return (
            db.query(Lease)
            .options(joinedload(Lease.unit))
            .filter(Lease.id == lease_id)
            .first()
        )

    def get_all(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        status: Optional[LeaseStatus] = None,
    ) -> List[Lease]:
        query = db.query(Lease).options(joinedload(Lease.unit))
        if status is not None:
            query = query.filter(Lease.status == status)
        return query.order_by(Lease.id.desc()).offset(skip).limit(limit).all()

    def get_by_tenant(self, db: Session, tenant_user_id: int) -> List[Lease]:
        return (
            db.query(Lease)
            .options(joinedload(Lease.unit))
            .filter(Lease.tenant_user_id == tenant_user_id)
            .order_by(Lease.start_date.desc(), Lease.id.desc())
            .all()
        )

    def get_active_lease_for_tenant(self, db: Session, tenant_user_id: int) -> Optional[Lease]:
        return (
            db.query(Lease)
            .options(joinedload(Lease.unit))
            .filter(
                Lease.tenant_user_id == tenant_user_id,
                Lease.status == LeaseStatus.ACTIVE,
            )
            .order_by(Lease.start_date.desc(), Lease.id.desc())
            .first()
        )

    def count_active_leases_for_tenant(
        self, db: Session, tenant_user_id: int, exclude_lease_id: Optional[int] = None
    ) -> int:
        query = db.query(Lease).filter(
            Lease.tenant_user_id == tenant_user_id,
            Lease.status == LeaseStatus.ACTIVE,
        )
        if exclude_lease_id is not None:
            query = query.filter(Lease.id != exclude_lease_id)
        return query.count()

    def has_overlapping_active_lease(
        self,
        db: Session,
        unit_id: int,
        start_date: date,
        end_date: date,
        exclude_lease_id: Optional[int] = None,
    ) -> bool:
        """Checks whether an active lease on the unit overlaps the given period."""
        query = db.query(Lease.id).filter(
            Lease.unit_id == unit_id,
            Lease.status == LeaseStatus.ACTIVE,
            Lease.start_date < end_date,
            Lease.end_date > start_date,
        )
        if exclude_lease_id is not None:
            query = query.filter(Lease.id != exclude_lease_id)
        return query.first() is not None

    def create_lease(
        self,
        db: Session,
        unit_id: int,
        tenant_user_id: int,
        start_date: date,
        end_date: date,
        monthly_rent: Decimal,
        created_by_user_id: Optional[int] = None,
    ) -> Lease:
        """Insert an ACTIVE lease inside the caller's transaction."""
        lease = Lease(
            unit_id=unit_id,
            tenant_user_id=tenant_user_id,
            start_date=start_date,
            end_date=end_date,
            monthly_rent=monthly_rent,
            status=LeaseStatus.ACTIVE,
            created_by_user_id=created_by_user_id,
        )
        db.add(lease)
        db.flush()
        return lease

    def terminate_lease(
        self,
        db: Session,
        lease_id: int,
        admin_user_id: int,
        checkout_date: Optional[date] = None,
    ) -> Lease:
        """
        End an active lease early.

        The unit becomes AVAILABLE and the tenant drops from VILLAGER back to
        USER unless another active lease remains, all in one transaction. The
        rental request that produced the lease keeps its APPROVED status.
        """

        def operation(session: Session) -> Lease:
            lease = self.get(session, lease_id)
            if lease is None:
                raise ResourceNotFoundError(
                    RentalRequestErrorCode.LEASE_NOT_FOUND,
                    f"Lease with ID {lease_id} not found.",
                )
            if lease.status != LeaseStatus.ACTIVE:
                raise GuardViolationError(
                    RentalRequestErrorCode.LEASE_NOT_ACTIVE,
                    f"Lease {lease_id} is {lease.status.value}, only active leases can be terminated.",
                )
            if checkout_date is not None and not (lease.start_date <= checkout_date <= lease.end_date):
                raise GuardViolationError(
                    RentalRequestErrorCode.INVALID_PERIOD,
                    "Checkout date must fall within the lease period.",
                )
            self._release(session, lease, LeaseStatus.TERMINATED, checkout_date)
            return lease

        lease = run_in_transaction(db, operation)
        db.refresh(lease)
        logger.info(
            "Lease %s terminated by admin %s (checkout %s)",
            lease.id,
            admin_user_id,
            lease.end_date,
        )
        return lease

    def expire_due_leases(self, db: Session, today: Optional[date] = None) -> List[int]:
        """Expire every active lease whose end date has passed. One transaction per lease."""
        today = today or date.today()
        due_ids = [
            lease_id
            for (lease_id,) in db.query(Lease.id)
            .filter(Lease.status == LeaseStatus.ACTIVE, Lease.end_date < today)
            .order_by(Lease.id)
            .all()
        ]

        expired = []
        for lease_id in due_ids:

            def operation(session: Session, lease_id=lease_id) -> bool:
                lease = self.get(session, lease_id)
                if lease is None or lease.status != LeaseStatus.ACTIVE:
                    return False
                self._release(session, lease, LeaseStatus.EXPIRED)
                return True

            try:
                released = run_in_transaction(db, operation)
            except GuardViolationError as exc:
                # terminated concurrently, nothing left to expire
                logger.info("Lease %s skipped by expiry: %s", lease_id, exc.code.value)
                continue
            if released:
                expired.append(lease_id)
                logger.info("Lease %s expired", lease_id)
        return expired

    def _release(
        self,
        db: Session,
        lease: Lease,
        new_status: LeaseStatus,
        end_date: Optional[date] = None,
    ) -> None:
        values = {
            "status": new_status,
            "terminated_at": datetime.now(timezone.utc),
        }
        if end_date is not None:
            values["end_date"] = end_date
        result = db.execute(
            update(Lease)
            .where(Lease.id == lease.id, Lease.status == LeaseStatus.ACTIVE)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise GuardViolationError(
                RentalRequestErrorCode.LEASE_NOT_ACTIVE,
                f"Lease {lease.id} is no longer active.",
            )

        self.unit_service.set_unit_status(
            db, lease.unit_id, UnitStatus.AVAILABLE, expected=UnitStatus.OCCUPIED
        )

        if self.count_active_leases_for_tenant(db, lease.tenant_user_id, exclude_lease_id=lease.id) == 0:
            auth_service.set_user_role(
                lease.tenant_user_id, UserRole.USER, db, expected=UserRole.VILLAGER
            )
