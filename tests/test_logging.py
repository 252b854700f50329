import logging
import logging.handlers
import structlog
from app.logging_conf import configure_logging


def test_file_handler_uses_processor_formatter():
    """
    The root logger writes JSON to app.json through structlog's ProcessorFormatter.
    """
    configure_logging()

    root_logger = logging.getLogger()
    assert root_logger.hasHandlers()

    root_handlers = [
        h
        for h in root_logger.handlers
        if isinstance(h, logging.handlers.RotatingFileHandler)
    ]
    assert len(root_handlers) == 1

    handler = root_handlers[0]
    assert handler.baseFilename.endswith("app.json")
    assert handler.formatter.__class__.__name__ == "ProcessorFormatter"


def test_sqlalchemy_engine_logger_is_quiet_by_default():
    configure_logging()
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_structlog_logger_emits(capsys):
    """
    A structlog emission goes through the stdlib handlers without crashing.
    """
    configure_logging()
    logger = structlog.get_logger()
    logger.info("automated_test_log", value="check_me")
