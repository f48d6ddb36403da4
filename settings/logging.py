"""Logging configuration."""

import logging
import sys

from loguru import logger

from settings import LOG_DIR


class InterceptHandler(logging.Handler):
    """Route stdlib logging records (httpx, duckdb helpers) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", to_file: bool = True):
    """Configure loguru sinks and capture third-party stdlib loggers."""
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <cyan>{extra[tenant]}</cyan> | <level>{message}</level>",
        level=level,
        colorize=True,
    )
    logger.configure(extra={"tenant": "-"})

    if to_file:
        LOG_DIR.mkdir(exist_ok=True)
        logger.add(
            LOG_DIR / "analyst_{time:YYYY-MM-DD}.log",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {extra[tenant]} | {name}:{function}:{line} | {message}",
            level="DEBUG",
            rotation="00:00",
            retention="7 days",
            compression="gz",
        )
        logger.info("Logging to {}", LOG_DIR)

    # httpx logs every request at INFO
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.WARNING, force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return logger
