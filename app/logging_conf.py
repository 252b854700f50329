import logging
import logging.config
import structlog

from app.settings import settings
from pathlib import Path

LOG_FILE_NAME = "app.json"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Run on structlog events and on records from plain logging.getLogger() alike
SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _formatter(renderer) -> dict:
    return {
        "()": structlog.stdlib.ProcessorFormatter,
        "processor": renderer,
        "foreign_pre_chain": SHARED_PROCESSORS,
    }


def _routed(level: str) -> dict:
    return {"handlers": ["console", "file"], "level": level, "propagate": False}


def configure_logging():
    """
    Route stdlib and structlog output to the console and to a rotating JSON
    file under LOG_DIR. The console renders JSON unless LOG_JSON_FORMAT is off.
    """
    level = settings.LOG_LEVEL.upper()

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": _formatter(structlog.processors.JSONRenderer()),
                "colored": _formatter(structlog.dev.ConsoleRenderer(colors=True)),
            },
            "handlers": {
                "console": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "json" if settings.LOG_JSON_FORMAT else "colored",
                },
                "file": {
                    "level": level,
                    "class": "logging.handlers.RotatingFileHandler",
                    "filename": str(log_dir / LOG_FILE_NAME),
                    "maxBytes": LOG_FILE_MAX_BYTES,
                    "backupCount": LOG_FILE_BACKUPS,
                    "formatter": "json",
                    "encoding": "utf-8",
                },
            },
            "root": {"handlers": ["console", "file"], "level": level},
            "loggers": {
                "uvicorn.access": _routed("INFO"),
                "uvicorn.error": _routed("INFO"),
                "sqlalchemy.engine": {
                    "level": "INFO" if settings.DATABASE_ECHO else "WARNING"
                },
                "aiosqlite": {"level": "WARNING"},
            },
        }
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
