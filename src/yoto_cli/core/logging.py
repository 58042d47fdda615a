"""
Logging configuration for the Yoto CLI.

Configures loguru and routes standard library logging (httpx, httpcore)
through it. Log output goes to stderr; stdout is reserved for command output.
"""

import logging
import sys

from loguru import logger


class InterceptHandler(logging.Handler):
    """
    Handler that intercepts all log requests and passes them to loguru.

    For more info see:
    https://loguru.readthedocs.io/en/stable/overview.html#entirely-compatible-with-standard-logging
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        # Find caller from where the logged message originated
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level,
            record.getMessage(),
        )


def configure_logging(log_level: str = "warning", debug: bool = False) -> None:
    """
    Configure loguru logging for the CLI.

    Args:
        log_level: Logging level (trace, debug, info, warning, error, critical)
        debug: Force debug level and show request-level logs from httpx
    """
    intercept_handler = InterceptHandler()
    logging.basicConfig(handlers=[intercept_handler], level=logging.NOTSET, force=True)

    actual_level = "debug" if debug else log_level

    # httpx logs every request at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{module}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
        "<level>{message}</level>",
        level=actual_level.upper(),
        colorize=True,
    )

    logger.debug(f"Logging configured at level: {actual_level.upper()}")
