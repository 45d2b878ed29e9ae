"""Runtime settings read from the environment."""

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional

DB_PATH_ENV = "TILLKIT_DB_PATH"
DATABASE_URL_ENV = "TILLKIT_DATABASE_URL"
CASHBACK_RATE_ENV = "TILLKIT_CASHBACK_RATE"
LOG_LEVEL_ENV = "TILLKIT_LOG_LEVEL"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """Application settings."""

    database_path: Optional[str] = None
    database_url: Optional[str] = None
    cashback_rate: Decimal = Decimal("0")
    log_level: str = "WARNING"


def default_database_path() -> str:
    """Return ~/.tillkit/tillkit.db, creating the directory if needed."""
    db_dir = Path.home() / ".tillkit"
    db_dir.mkdir(exist_ok=True)
    return str(db_dir / "tillkit.db")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from environment variables.

    Raises:
        ValueError: If TILLKIT_CASHBACK_RATE is not a number between 0 and 100
    """
    environ = os.environ if environ is None else environ

    raw_rate = environ.get(CASHBACK_RATE_ENV, "0")
    try:
        cashback_rate = Decimal(raw_rate)
    except InvalidOperation:
        raise ValueError(f"{CASHBACK_RATE_ENV} must be a number, got '{raw_rate}'")
    if not cashback_rate.is_finite():
        raise ValueError(f"{CASHBACK_RATE_ENV} must be a number, got '{raw_rate}'")
    if not Decimal("0") <= cashback_rate <= Decimal("100"):
        raise ValueError(f"{CASHBACK_RATE_ENV} must be between 0 and 100")

    return Settings(
        database_path=environ.get(DB_PATH_ENV),
        database_url=environ.get(DATABASE_URL_ENV),
        cashback_rate=cashback_rate,
        log_level=environ.get(LOG_LEVEL_ENV, "WARNING").upper(),
    )


def configure_logging(level: str) -> None:
    """Configure root logging once for command line use."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.WARNING), format=LOG_FORMAT)
