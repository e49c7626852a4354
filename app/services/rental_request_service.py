import logging
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from database.models.lease_model import Lease
from database.models.rental_request_model import RentalRequest
from database.models.user_model import User
from enums.rental_request_status import (
    RentalRequestState,
    RentalRequestStatus,
    can_transition,
)
from enums.unit_status import UnitStatus
from enums.user_role import UserRole
from exceptions.rental_request_exceptions import (
    GuardViolationError,
    RentalRequestErrorCode,
    ResourceNotFoundError,
)
from schemas.rental_request_response import (
    AcknowledgeResponse,
    BookingEligibilityResponse,
    RentalRequestResponse,
)
from schemas.rental_request_schema import RentalRequestCreate
from services import auth_service
from services.booking_eligibility import build_booking_eligibility
from services.lease_service import LeaseService
from services.unit_service import UnitService
from utils.id_generator import generate_request_reference, generate_unit_code
from utils.transaction import run_in_transaction

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RentalRequestService:
    """
    Rental request lifecycle: submit, approve, reject, acknowledge.

    Every mutation runs through ``run_in_transaction`` and guards its write
    with a compare-and-swap on the row's status, so concurrent admins and
    double submissions resolve to exactly one winner. Losers get a
    ``GuardViolationError`` with a stable code.
    """

    def __init__(self):
        self.model = RentalRequest
        self.unit_service = UnitService()
        self.lease_service = LeaseService()

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------
    def get(self, db: Session, request_id: int) -> Optional[RentalRequest]:
        return (
            db.query(RentalRequest)
            .options(joinedload(RentalRequest.unit))
            .filter(RentalRequest.id == request_id)
            .first()
        )

    def get_or_raise(self, db: Session, request_id: int) -> RentalRequest:
        rental_request = self.get(db, request_id)
        if rental_request is None:
            raise ResourceNotFoundError(
                RentalRequestErrorCode.REQUEST_NOT_FOUND,
                f"Rental request with ID {request_id} not found.",
            )
        return rental_request

    def get_all(self, db: Session, skip: int = 0, limit: int = 100) -> List[RentalRequest]:
        return (
            db.query(RentalRequest)
            .options(joinedload(RentalRequest.unit))
            .order_by(RentalRequest.request_date.desc(), RentalRequest.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_pending_requests(self, db: Session) -> List[RentalRequest]:
        """Pending requests, oldest first, as the admin works through them."""
        return (
            db.query(RentalRequest)
            .options(joinedload(RentalRequest.unit))
            .filter(RentalRequest.status == RentalRequestStatus.PENDING)
            .order_by(RentalRequest.request_date.asc(), RentalRequest.id.asc())
            .all()
        )

    def get_by_user(self, db: Session, user_id: int) -> List[RentalRequest]:
        return (
            db.query(RentalRequest)
            .options(joinedload(RentalRequest.unit))
            .filter(RentalRequest.user_id == user_id)
            .order_by(RentalRequest.request_date.desc(), RentalRequest.id.desc())
            .all()
        )

    def get_latest_for_user(self, db: Session, user_id: int) -> Optional[RentalRequest]:
        return (
            db.query(RentalRequest)
            .options(joinedload(RentalRequest.unit), joinedload(RentalRequest.resulting_lease))
            .filter(RentalRequest.user_id == user_id)
            .order_by(RentalRequest.request_date.desc(), RentalRequest.id.desc())
            .first()
        )

    # ------------------------------------------------------------------
    # submission
    # ------------------------------------------------------------------
    def submit_request(
        self, db: Session, user_id: int, request_in: RentalRequestCreate
    ) -> RentalRequest:
        def operation(session: Session) -> RentalRequest:
            user = auth_service.lock_user(user_id, session)
            if user is None:
                raise ResourceNotFoundError(
                    RentalRequestErrorCode.USER_NOT_FOUND,
                    f"User with ID {user_id} not found.",
                )
            self.check_submission_guards(session, user)

            unit = self.unit_service.get_unit(session, request_in.unit_id)
            if unit is None:
                raise ResourceNotFoundError(
                    RentalRequestErrorCode.UNIT_NOT_FOUND,
                    f"Unit with ID {request_in.unit_id} not found.",
                )
            if unit.status != UnitStatus.AVAILABLE:
                raise GuardViolationError(
                    RentalRequestErrorCode.UNIT_UNAVAILABLE,
                    "Selected unit is not available for rent. Please choose an available unit.",
                )

            rental_request = RentalRequest(
                user_id=user.id,
                pending_user_id=user.id,
                status=RentalRequestStatus.PENDING,
                request_date=_utcnow(),
                **request_in.model_dump(),
            )
            session.add(rental_request)
            try:
                session.flush()
            except IntegrityError as exc:
                # a concurrent submission took the pending slot first
                if "pending_user_id" in str(exc.orig):
                    raise GuardViolationError(
                        RentalRequestErrorCode.PENDING_EXISTS,
                        "You already have a pending rental request.",
                    ) from exc
                raise
            return rental_request

        try:
            rental_request = run_in_transaction(db, operation)
        except GuardViolationError as exc:
            logger.warning("Submission by user %s refused: %s", user_id, exc.code.value)
            raise

        db.refresh(rental_request)
        logger.info(
            "Rental request %s submitted by user %s for unit %s",
            rental_request.id,
            user_id,
            rental_request.unit_id,
        )
        return rental_request

    def check_submission_guards(self, db: Session, user: User) -> None:
        if user.role == UserRole.VILLAGER:
            raise GuardViolationError(
                RentalRequestErrorCode.ALREADY_VILLAGER,
                "You are already an approved tenant and cannot submit new rental requests.",
            )
        if user.role != UserRole.USER:
            raise GuardViolationError(
                RentalRequestErrorCode.NOT_APPLICANT,
                "Only regular user accounts can submit rental requests.",
            )

        pending = (
            db.query(RentalRequest.id)
            .filter(
                RentalRequest.user_id == user.id,
                RentalRequest.status == RentalRequestStatus.PENDING,
            )
            .first()
        )
        if pending is not None:
            raise GuardViolationError(
                RentalRequestErrorCode.PENDING_EXISTS,
                "You already have a pending rental request. Please wait for the admin decision.",
            )

        unacknowledged = (
            db.query(RentalRequest.id)
            .filter(
                RentalRequest.user_id == user.id,
                RentalRequest.status == RentalRequestStatus.REJECTED,
                RentalRequest.rejection_acknowledged.is_(False),
            )
            .first()
        )
        if unacknowledged is not None:
            raise GuardViolationError(
                RentalRequestErrorCode.UNACKNOWLEDGED_REJECTION,
                "Please acknowledge your previous rejection before submitting a new request.",
            )

    # ------------------------------------------------------------------
    # eligibility
    # ------------------------------------------------------------------
    def get_latest_request_status(self, db: Session, user_id: int) -> BookingEligibilityResponse:
        # never answer from the identity map, a decision may have landed since the last poll
        db.expire_all()

        user = auth_service.get_user_by_id(user_id, db)
        if user is None:
            raise ResourceNotFoundError(
                RentalRequestErrorCode.USER_NOT_FOUND,
                f"User with ID {user_id} not found.",
            )

        latest = self.get_latest_for_user(db, user_id)
        active_lease = None
        if user.role == UserRole.VILLAGER:
            active_lease = self.lease_service.get_active_lease_for_tenant(db, user_id)

        return build_booking_eligibility(
            user.role,
            latest,
            resulting_lease=latest.resulting_lease if latest else None,
            active_lease=active_lease,
        )

    # ------------------------------------------------------------------
    # decisions
    # ------------------------------------------------------------------
    def approve(
        self,
        db: Session,
        request_id: int,
        admin_user_id: int,
        start_date: date,
        end_date: Optional[date] = None,
    ) -> Tuple[RentalRequest, Lease]:
        """
        Approve a pending request.

        Creates the lease, marks the request APPROVED, promotes the applicant
        to VILLAGER and marks the unit OCCUPIED in one transaction. Any
        failure leaves all four records untouched.
        """

        def operation(session: Session) -> Tuple[RentalRequest, Lease]:
            rental_request = self.get_or_raise(session, request_id)
            if not can_transition(rental_request.state, RentalRequestState.APPROVED):
                raise GuardViolationError(
                    RentalRequestErrorCode.ALREADY_DECIDED,
                    f"Rental request {request_id} has already been decided.",
                )

            lease_end = end_date or start_date + relativedelta(
                months=rental_request.lease_duration_months
            )
            if lease_end <= start_date:
                raise GuardViolationError(
                    RentalRequestErrorCode.INVALID_PERIOD,
                    "End date must be after start date.",
                )

            self._claim(session, rental_request)

            unit_id = rental_request.unit_id
            occupied = self.unit_service.set_unit_status(
                session, unit_id, UnitStatus.OCCUPIED, expected=UnitStatus.AVAILABLE
            )
            if not occupied or self.lease_service.has_overlapping_active_lease(
                session, unit_id, start_date, lease_end
            ):
                raise GuardViolationError(
                    RentalRequestErrorCode.UNIT_UNAVAILABLE,
                    f"Unit {unit_id} is no longer available.",
                )

            unit = self.unit_service.get_unit(session, unit_id)
            lease = self.lease_service.create_lease(
                session,
                unit_id=unit_id,
                tenant_user_id=rental_request.user_id,
                start_date=start_date,
                end_date=lease_end,
                monthly_rent=unit.rent_amount,
                created_by_user_id=admin_user_id,
            )

            self._decide(
                session,
                rental_request,
                status=RentalRequestStatus.APPROVED,
                decided_by_user_id=admin_user_id,
                resulting_lease_id=lease.id,
            )
            promoted = auth_service.set_user_role(
                rental_request.user_id, UserRole.VILLAGER, session, expected=UserRole.USER
            )
            if not promoted:
                raise GuardViolationError(
                    RentalRequestErrorCode.NOT_APPLICANT,
                    f"Applicant of request {request_id} no longer holds the USER role.",
                )
            return rental_request, lease

        try:
            rental_request, lease = run_in_transaction(db, operation)
        except GuardViolationError as exc:
            logger.warning("Approval of request %s refused: %s", request_id, exc.code.value)
            raise

        db.refresh(rental_request)
        db.refresh(lease)
        logger.info(
            "Rental request %s approved by admin %s, lease %s created for unit %s",
            rental_request.id,
            admin_user_id,
            lease.id,
            lease.unit_id,
        )
        return rental_request, lease

    def reject(
        self, db: Session, request_id: int, admin_user_id: int, reason: str
    ) -> RentalRequest:
        reason = (reason or "").strip()

        def operation(session: Session) -> RentalRequest:
            rental_request = self.get_or_raise(session, request_id)
            if not reason:
                raise GuardViolationError(
                    RentalRequestErrorCode.EMPTY_REJECTION_REASON,
                    "A rejection reason is required.",
                )
            if not can_transition(rental_request.state, RentalRequestState.REJECTED_UNACKNOWLEDGED):
                raise GuardViolationError(
                    RentalRequestErrorCode.ALREADY_DECIDED,
                    f"Rental request {request_id} has already been decided.",
                )
            self._decide(
                session,
                rental_request,
                status=RentalRequestStatus.REJECTED,
                decided_by_user_id=admin_user_id,
                rejection_reason=reason,
                rejection_acknowledged=False,
            )
            return rental_request

        try:
            rental_request = run_in_transaction(db, operation)
        except GuardViolationError as exc:
            logger.warning("Rejection of request %s refused: %s", request_id, exc.code.value)
            raise

        db.refresh(rental_request)
        logger.info("Rental request %s rejected by admin %s", rental_request.id, admin_user_id)
        return rental_request

    def acknowledge_rejection(
        self, db: Session, request_id: int, user_id: int
    ) -> AcknowledgeResponse:
        """Idempotent: acknowledging twice succeeds twice and writes once."""

        def operation(session: Session) -> RentalRequest:
            rental_request = self.get_or_raise(session, request_id)
            if rental_request.user_id != user_id:
                raise GuardViolationError(
                    RentalRequestErrorCode.NOT_REQUEST_OWNER,
                    "You are not authorized to acknowledge this request.",
                )
            if rental_request.state == RentalRequestState.REJECTED_ACKNOWLEDGED:
                return rental_request
            if not can_transition(rental_request.state, RentalRequestState.REJECTED_ACKNOWLEDGED):
                raise GuardViolationError(
                    RentalRequestErrorCode.NOT_REJECTED,
                    f"Only rejected requests can be acknowledged. Current status: {rental_request.status.value}",
                )

            # a concurrent acknowledgement may win, which is the same outcome
            session.execute(
                update(RentalRequest)
                .where(
                    RentalRequest.id == request_id,
                    RentalRequest.status == RentalRequestStatus.REJECTED,
                    RentalRequest.rejection_acknowledged.is_(False),
                )
                .values(
                    rejection_acknowledged=True,
                    rejection_acknowledged_at=_utcnow(),
                    version=RentalRequest.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            return rental_request

        rental_request = run_in_transaction(db, operation)
        db.refresh(rental_request)
        logger.info("Rejection of request %s acknowledged by user %s", request_id, user_id)

        return AcknowledgeResponse(
            request_id=rental_request.id,
            acknowledged_at=rental_request.rejection_acknowledged_at,
            message="Rejection acknowledged successfully. You can now submit a new booking request.",
            can_create_new_request=self.get_latest_request_status(db, user_id).can_create_new_request,
        )

    def _claim(self, db: Session, rental_request: RentalRequest) -> None:
        """
        Take the write lock on a pending request before touching anything else.

        Fails with ALREADY_DECIDED when another decision committed since the
        row was read.
        """
        result = db.execute(
            update(RentalRequest)
            .where(
                RentalRequest.id == rental_request.id,
                RentalRequest.status == RentalRequestStatus.PENDING,
                RentalRequest.version == rental_request.version,
            )
            .values(version=RentalRequest.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise GuardViolationError(
                RentalRequestErrorCode.ALREADY_DECIDED,
                f"Rental request {rental_request.id} has already been decided.",
            )

    def _decide(
        self,
        db: Session,
        rental_request: RentalRequest,
        status: RentalRequestStatus,
        decided_by_user_id: int,
        **values,
    ) -> None:
        result = db.execute(
            update(RentalRequest)
            .where(
                RentalRequest.id == rental_request.id,
                RentalRequest.status == RentalRequestStatus.PENDING,
            )
            .values(
                status=status,
                pending_user_id=None,
                decision_date=_utcnow(),
                decided_by_user_id=decided_by_user_id,
                version=RentalRequest.version + 1,
                **values,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise GuardViolationError(
                RentalRequestErrorCode.ALREADY_DECIDED,
                f"Rental request {rental_request.id} has already been decided.",
            )

    # ------------------------------------------------------------------
    # presentation
    # ------------------------------------------------------------------
    def format_rental_request_response(self, rental_request: RentalRequest) -> RentalRequestResponse:
        response = RentalRequestResponse.model_validate(rental_request)
        response.reference = generate_request_reference(rental_request.id)
        if response.unit:
            response.unit.unit_code = generate_unit_code(response.unit.id)
        return response
