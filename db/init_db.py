"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Obligations: investment contributions and bills with a due-date schedule
CREATE TABLE IF NOT EXISTS obligations (
    id              SERIAL PRIMARY KEY,
    user_id         BIGINT NOT NULL,
    name            VARCHAR(100) NOT NULL,
    kind            VARCHAR(20) NOT NULL DEFAULT 'bill' CHECK (kind IN ('investment', 'bill')),
    amount          NUMERIC(12,2) NOT NULL CHECK (amount > 0),
    frequency       VARCHAR(20) NOT NULL
                    CHECK (frequency IN ('monthly', 'quarterly', 'half_yearly', 'yearly', 'one_time')),
    due_day         INT CHECK (due_day BETWEEN 1 AND 31),
    anchor_date     DATE NOT NULL DEFAULT CURRENT_DATE,
    next_due_date   DATE,
    last_paid_date  DATE,
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    reminder_days   INT NOT NULL DEFAULT 3,
    category        VARCHAR(50),
    notes           TEXT,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    CHECK (frequency = 'one_time' OR due_day IS NOT NULL)
);

-- Payments: each row satisfies one due-date instance of an obligation
CREATE TABLE IF NOT EXISTS payments (
    id              SERIAL PRIMARY KEY,
    obligation_id   INT NOT NULL REFERENCES obligations(id) ON DELETE CASCADE,
    amount          NUMERIC(12,2) NOT NULL CHECK (amount > 0),
    paid_date       DATE NOT NULL,
    due_date        DATE NOT NULL,
    status          VARCHAR(10) NOT NULL DEFAULT 'paid'
                    CHECK (status IN ('paid', 'overdue', 'cancelled')),
    notes           TEXT,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_obligations_user ON obligations(user_id);
CREATE INDEX IF NOT EXISTS idx_obligations_due ON obligations(next_due_date) WHERE is_active = TRUE;
CREATE INDEX IF NOT EXISTS idx_payments_obligation ON payments(obligation_id, due_date);
"""


def create_tables() -> None:
    """
    Create the obligations and payments tables and their indexes.
    Safe to call repeatedly (IF NOT EXISTS everywhere).
    """
    with transaction("initialize schema") as cur:
        cur.execute(SCHEMA_SQL)
    logger.info("Database schema ready.")


if __name__ == "__main__":
    from db.connection import close_pool, init_pool
    init_pool()
    try:
        create_tables()
    finally:
        close_pool()
