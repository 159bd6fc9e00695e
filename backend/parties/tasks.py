"""
Celery tasks for invitation housekeeping.

Tasks:
- purge_expired_invitations: Delete expired, never-accepted invitations

Usage:
    # Scheduled nightly through CELERY_BEAT_SCHEDULE
    from parties.tasks import purge_expired_invitations
    purge_expired_invitations.delay()
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def purge_expired_invitations(self, dry_run: bool = False) -> dict:
    """
    Delete expired invitations across all party types.

    Returns:
        Dict with the count per party type and the total
    """
    from parties import tokens

    counts = tokens.purge_expired_invitations(dry_run=dry_run)
    total = sum(counts.values())
    logger.info(f"Purged {total} expired invitations (dry_run={dry_run})")
    return {"counts": counts, "total": total, "dry_run": dry_run}
