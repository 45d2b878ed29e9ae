"""Human-readable identifiers backed by database counters."""

from datetime import datetime, UTC
from typing import Optional

from tillkit.database.base import Database

TRANSACTION_SEQUENCE = "transaction"
CUSTOMER_SEQUENCE = "customer"


def generate_transaction_number(db: Database, now: Optional[datetime] = None) -> str:
    """Return the next receipt number, e.g. TXN-20240115-000042."""
    now = now or datetime.now(UTC)
    value = db.next_sequence_value(TRANSACTION_SEQUENCE)
    return f"TXN-{now:%Y%m%d}-{value:06d}"


def generate_customer_number(db: Database) -> str:
    """Return the next customer number, e.g. CUST-000007."""
    value = db.next_sequence_value(CUSTOMER_SEQUENCE)
    return f"CUST-{value:06d}"
