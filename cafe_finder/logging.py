import logging
import sys
from typing import List

import structlog
from structlog.typing import Processor

from cafe_finder.core.config import Settings, settings

# Loggers whose per-request INFO lines duplicate our own store logs
NOISY_LOGGERS = ("httpx", "httpcore")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

def resolve_log_format(config: Settings) -> str:
    """Explicit LOG_FORMAT wins; otherwise console in development, json elsewhere."""
    if config.LOG_FORMAT:
        return config.LOG_FORMAT
    return "console" if config.ENV.lower() == "development" else "json"

def resolve_log_level(config: Settings) -> int:
    level = logging.getLevelName(config.LOG_LEVEL.upper())
    return level if isinstance(level, int) else logging.INFO

def build_processors(log_format: str) -> List[Processor]:
    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
    ]
    if log_format == "json":
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors

def configure_logging(config: Settings = settings) -> None:
    """
    Sends structlog events and stdlib records (uvicorn, httpx) to stdout through
    one renderer chosen by LOG_FORMAT or ENV.
    """
    level = resolve_log_level(config)
    structlog.configure(
        processors=build_processors(resolve_log_format(config)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers = []
        uvicorn_logger.propagate = True

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
