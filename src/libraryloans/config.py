"""Configuration management for libraryloans.

Loads configuration from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

DEFAULT_DB_PATH = Path.home() / ".libraryloans" / "library.db"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Application configuration."""

    # Database
    db_path: Path
    busy_timeout: float  # seconds

    # Loan policy
    loan_period_days: int
    max_active_loans: Optional[int]  # None disables the limit

    # Logging
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        db_path_str = os.environ.get("LIBRARYLOANS_DB_PATH", str(DEFAULT_DB_PATH))
        db_path = Path(db_path_str).expanduser() if db_path_str != ":memory:" else Path(db_path_str)

        max_loans = os.environ.get("LIBRARYLOANS_MAX_ACTIVE_LOANS", "").strip()

        return cls(
            db_path=db_path,
            busy_timeout=float(os.environ.get("LIBRARYLOANS_BUSY_TIMEOUT", "30.0")),
            loan_period_days=int(os.environ.get("LIBRARYLOANS_LOAN_PERIOD_DAYS", "14")),
            max_active_loans=int(max_loans) if max_loans else None,
            log_level=os.environ.get("LIBRARYLOANS_LOG_LEVEL", "WARNING").upper(),
        )

    @property
    def is_memory(self) -> bool:
        return str(self.db_path) == ":memory:"

    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.loan_period_days < 1:
            errors.append(f"Loan period must be at least 1 day: {self.loan_period_days}")

        if self.max_active_loans is not None and self.max_active_loans < 1:
            errors.append(f"Active loan limit must be positive: {self.max_active_loans}")

        if self.busy_timeout < 0:
            errors.append(f"Busy timeout cannot be negative: {self.busy_timeout}")

        if self.log_level not in LOG_LEVELS:
            errors.append(f"Unknown log level: {self.log_level}")

        # Check database directory is writable
        if not self.is_memory and not self.db_path.parent.exists():
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                errors.append(f"Cannot create database directory: {self.db_path.parent}")

        return errors


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global config instance. Used for testing."""
    global _config
    _config = None
