"""Logging configuration for the service."""

import logging
import sys
from contextvars import ContextVar
from typing import Dict, Optional

from app.core import config

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

# Id de la petición en curso; lo fija RequestContextMiddleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

NOISY_LOGGERS: Dict[str, str] = {
    "uvicorn.access": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "asyncpg": "WARNING",
}


class RequestIdFilter(logging.Filter):
    """Stamp every record with the id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def setup_logging(level: Optional[str] = None) -> None:
    """Set up the root logger once; later calls only adjust the level."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level or config.LOG_LEVEL)

    if any(getattr(h, "_subscriptions_handler", False) for h in root_logger.handlers):
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    console_handler.addFilter(RequestIdFilter())
    console_handler._subscriptions_handler = True  # type: ignore[attr-defined]
    root_logger.addHandler(console_handler)

    if not config.DB_ECHO:
        for logger_name, noisy_level in NOISY_LOGGERS.items():
            logging.getLogger(logger_name).setLevel(noisy_level)
