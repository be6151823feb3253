"""
Logging configuration with payload truncation for request/response dumps
"""

import logging
import logging.config
from typing import Any, Dict

DEFAULT_MAX_MESSAGE_LENGTH = 2048


class PayloadTruncationFilter(logging.Filter):
    """Filter that shortens oversized request/response dumps."""

    def __init__(self, max_length: int = DEFAULT_MAX_MESSAGE_LENGTH):
        super().__init__()
        self.max_length = max_length

    def filter(self, record: logging.LogRecord) -> bool:
        """Truncate the rendered message of byteedit records that exceed the limit."""
        if not record.name.startswith("byteedit"):
            return True

        message = record.getMessage()
        if len(message) > self.max_length:
            omitted = len(message) - self.max_length
            record.msg = f"{message[:self.max_length]}... [{omitted} chars truncated]"
            record.args = None
        return True  # Never drop records, only shorten them


def get_logging_config(level: str = "INFO", max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH) -> Dict[str, Any]:
    """Get logging configuration with payload truncation."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "payload_truncation_filter": {
                "()": PayloadTruncationFilter,
                "max_length": max_message_length,
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["payload_truncation_filter"]
            }
        },
        "loggers": {
            "byteedit": {
                "handlers": ["default"],
                "level": level.upper(),
                "propagate": False
            },
            "httpx": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO", max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH) -> None:
    """Apply the byteedit logging configuration."""
    logging.config.dictConfig(get_logging_config(level, max_message_length))
