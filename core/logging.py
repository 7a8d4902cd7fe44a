"""
Logging configuration for the dashboard.

Store and router logs carry the restaurant they act for and the store
operation through ``extra=``; both are stamped on every record so JSON
lines can be filtered per restaurant.
"""
import logging
import sys
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from core.config import settings


CONTEXT_FIELDS = ("restaurant_id", "operation")
PLAIN_PLACEHOLDER = "-"


def log_context(
    restaurant_id: Optional[str],
    operation: str,
    **fields: Any
) -> Dict[str, Any]:
    """Build the ``extra`` mapping for a restaurant-scoped log call."""
    return {"restaurant_id": restaurant_id, "operation": operation, **fields}


class RestaurantContextFilter(logging.Filter):
    """Give records logged without context placeholder context fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        for field in CONTEXT_FIELDS:
            if getattr(record, field, None) is None:
                setattr(record, field, PLAIN_PLACEHOLDER)
        return True


class RestaurantJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps the app and restaurant context."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any]
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = self.formatTime(record, self.datefmt)
        log_record['level'] = record.levelname
        log_record['app_name'] = settings.app_name
        log_record['environment'] = settings.app_env

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            log_record[field] = None if value == PLAIN_PLACEHOLDER else value


def setup_logging() -> None:
    """
    Configure application logging.

    Staging and production emit one JSON object per line; development
    keeps a human-readable format with the restaurant and operation.
    """
    use_json = settings.app_env in ["production", "staging"]

    if use_json:
        formatter: logging.Formatter = RestaurantJsonFormatter(
            fmt='%(timestamp)s %(level)s %(name)s %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - '
                '[%(restaurant_id)s %(operation)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.addFilter(RestaurantContextFilter())
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.is_development and settings.debug else logging.WARNING
    )

    logging.info(
        "Logging configured",
        extra={"json_logging": use_json, "log_level": settings.log_level}
    )
