"""Configuration loading for the ledger services and CLI.

Loads settings from .env file and environment variables with sensible defaults.
Validates values and provides clear error messages.
"""

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from dotenv import load_dotenv

from src.services.errors import ConfigError

DEFAULT_DATABASE_URL = "sqlite:///./estate_ledger.db"
DEFAULT_MANAGEMENT_FEE_RATE = Decimal("0.05")


@dataclass
class LedgerConfig:
    """Configuration for ledger computation and reporting."""

    database_url: str = DEFAULT_DATABASE_URL
    """SQLAlchemy database URL (default: local SQLite)"""

    log_file: str = "logs/ledger.log"
    """Path to log file (default: logs/ledger.log)"""

    management_fee_rate: Decimal = DEFAULT_MANAGEMENT_FEE_RATE
    """Share of standard rent retained as management fee (default: 5%)"""


def load_config() -> LedgerConfig:
    """
    Load configuration from .env file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (DATABASE_URL, LOG_FILE, MANAGEMENT_FEE_RATE)
    2. .env file in project root
    3. Default values

    Returns:
        LedgerConfig with all settings

    Raises:
        ConfigError: If a value is present but invalid

    Example:
        Create .env file:
        ```
        DATABASE_URL=sqlite:///./estate_ledger.db
        MANAGEMENT_FEE_RATE=0.05
        ```

        Then call:
        ```
        config = load_config()
        ```
    """
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL).strip()
    log_file = os.getenv("LOG_FILE", "logs/ledger.log")
    raw_rate = os.getenv("MANAGEMENT_FEE_RATE", str(DEFAULT_MANAGEMENT_FEE_RATE))

    if not database_url:
        raise ConfigError(
            "DATABASE_URL is empty. Set DATABASE_URL environment variable or in .env file"
        )

    try:
        management_fee_rate = Decimal(raw_rate.strip())
    except InvalidOperation as e:
        raise ConfigError(f"MANAGEMENT_FEE_RATE is not a number: {raw_rate!r}") from e

    if not (Decimal(0) <= management_fee_rate <= Decimal(1)):
        raise ConfigError(
            f"MANAGEMENT_FEE_RATE must be between 0 and 1, got {management_fee_rate}"
        )

    return LedgerConfig(
        database_url=database_url,
        log_file=log_file,
        management_fee_rate=management_fee_rate,
    )
