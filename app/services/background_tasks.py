import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import LEASE_EXPIRY_INTERVAL_MINUTES
from database.init import SessionLocal
from services.lease_service import LeaseService

logger = logging.getLogger(__name__)


class LeaseExpiryScheduler:
    def __init__(self, interval_minutes: int = LEASE_EXPIRY_INTERVAL_MINUTES):
        self.scheduler = AsyncIOScheduler()
        self.lease_service = LeaseService()
        self.interval_minutes = interval_minutes

    def start(self):
        # Expire leases whose end date has passed
        self.scheduler.add_job(
            self.process_expired_leases,
            "interval",
            minutes=self.interval_minutes,
            id="lease_expiry_task",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(
            "Background tasks initialized, lease expiry every %s minutes",
            self.interval_minutes,
        )

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    async def process_expired_leases(self):
        db = SessionLocal()
        try:
            expired = self.lease_service.expire_due_leases(db)
            if expired:
                logger.info("Expired %s leases: %s", len(expired), expired)
            else:
                logger.debug("No leases due for expiry")
        except Exception:
            logger.exception("Error in process_expired_leases")
        finally:
            db.close()
