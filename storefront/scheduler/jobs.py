"""APScheduler jobs — verification code and account cleanup every minute."""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from storefront.application.services.token_service import purge_expired_revocations
from storefront.config import get_settings
from storefront.infrastructure.database import session_scope, utcnow
from storefront.infrastructure.repositories.user_repository import (
    SQLAlchemyUserRepository,
    SQLAlchemyVerificationRepository,
)

settings = get_settings()
logger = logging.getLogger(__name__)
tz = pytz.timezone(settings.TIMEZONE)

scheduler = AsyncIOScheduler(timezone=tz)


def sweep(db: Session, now: Optional[datetime] = None) -> Dict[str, int]:
    """One cleanup pass; returns how many rows each step touched.

    Codes are expired once they outlive the verification TTL and deleted
    once inactive for the same period.
    """
    cutoff = (now or utcnow()) - timedelta(seconds=settings.VERIFICATION_TTL_SECONDS)
    codes = SQLAlchemyVerificationRepository(db)
    return {
        "expired_codes": codes.expire_older_than(cutoff),
        "deleted_codes": codes.purge_inactive_older_than(cutoff),
        "purged_guests": SQLAlchemyUserRepository(db).purge_deleted_guests(),
        "purged_revocations": purge_expired_revocations(db),
    }


async def cleanup_job():
    """Periodic job: expire verification codes and purge dead rows."""
    logger.debug(f"Running cleanup job at {datetime.now(tz).strftime('%d/%m/%Y %H:%M')}")

    with session_scope() as db:
        try:
            result = sweep(db)
            if any(result.values()):
                logger.info(f"Cleanup result: {result}")
        except Exception as e:
            db.rollback()
            logger.error(f"Cleanup job failed: {e}")


def start_scheduler():
    """Start the APScheduler with the one-minute cleanup job."""
    scheduler.add_job(
        cleanup_job,
        trigger=IntervalTrigger(minutes=1, timezone=tz),
        id="verification_cleanup",
        name="Verification Cleanup (Every minute)",
        replace_existing=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started — cleanup every minute ({settings.TIMEZONE})")


def stop_scheduler():
    """Stop the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
