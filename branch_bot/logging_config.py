"""
Logging configuration for the branch bot.

Usage:
    from branch_bot.logging_config import setup_logging
    setup_logging()  # Call once at application startup (scripts, webhook worker)

Environment variables:
    LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)

Every module logs through ``logging.getLogger(__name__)``, so the level set
on the ``branch_bot`` logger applies to the parser, matcher, recommendation
engine and stores alike. Customer phone numbers are only logged at DEBUG.
"""
import logging
import os
import sys

PACKAGE_LOGGER = "branch_bot"

# Third-party loggers held at WARNING unless debugging
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_log_level(level: str | None = None) -> str:
    """Explicit level, else LOG_LEVEL, else INFO; unknown names fall back to INFO."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()
    return level if level in VALID_LEVELS else "INFO"


def setup_logging(level: str | None = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level name. If not provided, reads LOG_LEVEL.
    """
    level = resolve_log_level(level)
    numeric_level = getattr(logging, level)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    logging.getLogger(PACKAGE_LOGGER).setLevel(numeric_level)

    # NOTSET hands the quiet loggers back to their parents when debugging
    quiet_level = logging.NOTSET if level == "DEBUG" else max(numeric_level, logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    logging.getLogger(__name__).debug("Logging configured at %s level", level)
