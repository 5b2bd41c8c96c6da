"""
main.py
-------
Entry point for DueTrack.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Log the upcoming and overdue obligations of the configured user.
"""

from config import DEFAULT_USER_ID, UPCOMING_WINDOW_DAYS
from db.connection import init_pool, close_pool
from db.init_db import create_tables
from services.obligation_service import ObligationService
from utils.logger import get_logger

logger = get_logger(__name__)


def log_due_digest(service: ObligationService, user_id: int) -> None:
    """Write the upcoming / overdue digest for one user to the log."""
    summary = service.dashboard_summary(user_id)
    logger.info(
        f"User {user_id}: {summary['activeObligations']} active obligations, "
        f"monthly commitment {summary['monthlyCommitment']}"
    )

    for ob in service.get_overdue(user_id):
        logger.warning(f"Overdue since {ob.next_due_date}: {ob.name} ({ob.amount})")

    for ob in service.get_upcoming(user_id, days_ahead=UPCOMING_WINDOW_DAYS):
        logger.info(f"Due {ob.next_due_date}: {ob.name} ({ob.amount})")


def main() -> None:
    """Initialize storage and report what is due."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    try:
        create_tables()

        # ── 2. Digest ─────────────────────────────────────
        log_due_digest(ObligationService(), DEFAULT_USER_ID)
    finally:
        # ── 3. Cleanup ────────────────────────────────────
        close_pool()
        logger.info("DueTrack stopped.")


if __name__ == "__main__":
    main()
