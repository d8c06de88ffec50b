"""
Configuration settings for Sales Intel.

Values come from the environment so the dashboard and the tests can point
at different databases without code changes.
"""
import logging
import os

# Database configuration
DB_URL = os.environ.get("SALES_INTEL_DB_URL", "sqlite:///data/sales_intel.db")
DB_ECHO = os.environ.get("SALES_INTEL_DB_ECHO", "false").lower() in ("1", "true", "yes")

# Logging configuration
LOG_LEVEL = os.environ.get("SALES_INTEL_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the dashboard process."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
