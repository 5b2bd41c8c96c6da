"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "duetrack")
DB_USER: str = os.getenv("DB_USER", "duetrack_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "5"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Scheduling ────────────────────────────────────────────
# Upper bound on cycles searched for a single due date.
SCHEDULE_SAFETY_LIMIT: int = int(os.getenv("SCHEDULE_SAFETY_LIMIT", "100"))
DEFAULT_REMINDER_DAYS: int = int(os.getenv("DEFAULT_REMINDER_DAYS", "3"))
UPCOMING_WINDOW_DAYS: int = int(os.getenv("UPCOMING_WINDOW_DAYS", "7"))

# ── Tenant ────────────────────────────────────────────────
DEFAULT_USER_ID: int = int(os.getenv("DEFAULT_USER_ID", "1"))

# ── Currency ──────────────────────────────────────────────
DEFAULT_CURRENCY: str = "EUR"
