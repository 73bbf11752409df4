import logging

import structlog

from .config import EnvironmentType, Settings

SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def log_level(settings: Settings) -> int:
    """Configured LOG_LEVEL; production never logs below INFO."""
    level = logging.getLevelName(settings.LOG_LEVEL)
    if settings.ENVIRONMENT == EnvironmentType.PRODUCTION:
        return max(level, logging.INFO)
    return level


def setup_logging(settings: Settings) -> None:
    if settings.ENVIRONMENT == EnvironmentType.DEVELOPMENT:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[*SHARED_PROCESSORS, renderer],
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(log_level(settings)),
        # Tests reconfigure between cases
        cache_logger_on_first_use=False,
    )
