"""
Logger Setup
-----------
Centralized logging configuration using loguru.

Every record carries the acting user (``extra["user"]``), bound by the
session gate for the duration of a request. Records bound with
``security=True`` (denied access, rate limiting, failed logins) also go to a
separate security log kept longer than the application log.
"""

import sys
from loguru import logger
from ngo_portal.core.config_manager import settings

ANONYMOUS_USER = "-"

# Bind with ``security_logger.warning(...)`` for access and credential events
security_logger = logger.bind(security=True)


def _is_security_record(record) -> bool:
    return bool(record["extra"].get("security"))


def configure_logger() -> None:
    """
    Configure loguru logger with appropriate settings.
    Removes default handler and adds the console, application and security sinks.
    """
    logger.remove()
    logger.configure(extra={"user": ANONYMOUS_USER})

    logger.add(
        sys.stdout,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<magenta>user={extra[user]}</magenta> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        level=settings.log_level,
        colorize=True,
        backtrace=True,
        diagnose=settings.debug,
    )

    if not settings.debug:
        logger.add(
            "logs/ngo_portal_{time:YYYY-MM-DD}.log",
            rotation="100 MB",
            retention="14 days",
            level=settings.log_level,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | user={extra[user]} | "
                "{name}:{function}:{line} | {message}"
            ),
            backtrace=True,
            diagnose=False,
        )
        logger.add(
            "logs/ngo_portal_security_{time:YYYY-MM-DD}.log",
            rotation="50 MB",
            retention="90 days",
            level="INFO",
            filter=_is_security_record,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | user={extra[user]} | {message}",
            diagnose=False,
        )

    logger.info(f"Logger configured with level: {settings.log_level}")
