import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from src.config.config import Config, config as default_config


class CustomFormatter(logging.Formatter):
    """Custom formatter that implements the required format: [yyyy-mm-dd hh:mm:ss] [log_type] [class_name]: {message}"""

    def format(self, record):
        # Extract class name from the logger name
        class_name = record.name.split('.')[-1] if '.' in record.name else record.name

        # Format timestamp as yyyy-mm-dd hh:mm:ss
        timestamp = self.formatTime(record, '%Y-%m-%d %H:%M:%S')

        # Format the log message
        formatted_message = f"[{timestamp}] [{record.levelname}] [{class_name}]: {record.getMessage()}"

        # Add exception info if present
        if record.exc_info:
            formatted_message += '\n' + self.formatException(record.exc_info)

        return formatted_message


def get_log_file_path(settings: Config) -> Optional[Path]:
    """Get the log file path based on environment, creating the directory if needed."""
    logs_dir = settings.get_log_dir_path()
    if logs_dir is None:
        return None
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir / f"weather_relay_{settings.environment}.log"


def _build_renderer(settings: Config):
    if settings.log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.processors.KeyValueRenderer(key_order=["event"], sort_keys=False)


def setup_logging(settings: Optional[Config] = None):
    """
    Configure logging for the application.

    Sets up console logging (plus a log file when ``log_dir`` is configured)
    with custom format:
    [yyyy-mm-dd hh:mm:ss] [log_type] [class_name]: {message}

    structlog loggers are routed through the standard library, so every
    ``structlog.get_logger(__name__)`` event ends up in the same handlers,
    rendered as JSON or key=value pairs depending on ``log_format``.
    """
    settings = settings or default_config
    level = getattr(logging, settings.log_level.upper())

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers
    root_logger.handlers.clear()

    formatter = CustomFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file_path = get_log_file_path(settings)
    if log_file_path is not None:
        file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _build_renderer(settings),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Log setup completion
    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging configured",
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=str(log_file_path) if log_file_path else None,
    )
