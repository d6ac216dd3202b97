"""
Logging setup for Shiftboard.

Application modules log through ``logging.getLogger(__name__)``; this module
only wires the root handler. JSON output is rendered by structlog's stdlib
``ProcessorFormatter`` so records from third-party libraries (redis, uvicorn)
come out in the same shape.
"""

import logging
from typing import Optional

import structlog

from .config import LoggingSettings

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def _build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "text":
        return logging.Formatter(_TEXT_FORMAT)

    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(),
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
        ],
    )


def configure_logging(config: Optional[LoggingSettings] = None) -> None:
    """Install a single root handler according to ``config``."""
    config = config or LoggingSettings()

    if config.file_path:
        handler: logging.Handler = logging.FileHandler(config.file_path)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(config.format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(config.level)

    # redis-py logs every retried command at DEBUG
    logging.getLogger("redis").setLevel(max(logging.INFO, root.level))
