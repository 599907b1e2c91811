"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal
from pydantic_settings import BaseSettings
from typing import List, Optional, Tuple


class LedgerConfig(BaseSettings):
    """Transfer ledger configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Seed accounts as (number, balance, currency code) triples.
    # LEDGER_SEED_ACCOUNTS='[["A1", "1000", "USD"]]'
    seed_accounts: List[Tuple[str, Decimal, str]] = [
        ("125746398235", Decimal("1000"), "USD"),
        ("234512768893", Decimal("0"), "USD"),
    ]

    class Config:
        env_prefix = "LEDGER_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
