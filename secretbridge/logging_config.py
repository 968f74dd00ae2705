"""
Logging configuration that keeps probe traffic out of the access log
"""

import logging
import logging.config
from typing import Dict, Any

PROBE_PATHS = ("/healthz", "/readyz")


class ProbeAccessFilter(logging.Filter):
    """Filter to suppress liveness and readiness probe logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop uvicorn access records for probe endpoints."""
        if record.name == "uvicorn.access":
            message = record.getMessage()
            if "GET" in message and any(path in message for path in PROBE_PATHS):
                return False
        return True


def _stream_handler(formatter: str, **extra: Any) -> Dict[str, Any]:
    return {
        "class": "logging.StreamHandler",
        "formatter": formatter,
        "stream": "ext://sys.stdout",
        **extra,
    }


def _logger(handler: str, level: str) -> Dict[str, Any]:
    return {"handlers": [handler], "level": level, "propagate": False}


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """
    Build a dictConfig mapping for the controller process.

    The secretbridge package and the root logger follow level. The kubernetes
    client stays at WARNING because it logs every watch reconnect at INFO.
    """
    level = level.upper()
    loggers = {name: _logger("default", "INFO") for name in ("uvicorn", "uvicorn.error")}
    loggers["uvicorn.access"] = _logger("access", "INFO")
    loggers["secretbridge"] = _logger("default", level)
    loggers["kubernetes"] = _logger("default", "WARNING")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"probe_filter": {"()": ProbeAccessFilter}},
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": _stream_handler("default"),
            "access": _stream_handler("access", filters=["probe_filter"]),
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration to the running process."""
    logging.config.dictConfig(get_logging_config(level))
