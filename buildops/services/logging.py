"""Logging setup for the BuildOps API server and its command line tools.

Every process logs through the root logger with one line format. The server
writes to stdout and to a size-rotated file under ``logs/``; CLI commands
write to stdout only. ``LOG_LEVEL`` in the environment overrides the level
from settings, which is handy for a one-off ``LOG_LEVEL=DEBUG buildops-api``.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that flood INFO: one line per SQL statement or request
CHATTY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def _formatter() -> logging.Formatter:
    return logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def get_log_level(default: str = "INFO") -> int:
    """Resolve ``LOG_LEVEL`` (falling back to ``default``) to a logging constant.

    Names are case-insensitive; anything logging does not know means INFO.
    """
    level = logging.getLevelName(os.getenv("LOG_LEVEL", default).upper())
    return level if isinstance(level, int) else logging.INFO


def _add_handler(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(_formatter())
    logger.addHandler(handler)


def setup_server_logging(
    log_file: str = "logs/server.log",
    level: str = "INFO",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Send the API server's logs to stdout and to a rotating ``log_file``.

    Replaces whatever handlers the root logger had, so calling it twice does
    not double every line. Below DEBUG the chatty library loggers are held
    at WARNING.

    Args:
        log_file: Log file path; missing parent directories are created
        level: Level name used when LOG_LEVEL is unset
        max_bytes: Size at which the file rolls over to ``<log_file>.1``
        backup_count: Rolled-over files to keep
    """
    log_level = get_log_level(level)
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    _add_handler(root_logger, logging.StreamHandler(sys.stdout), log_level)
    _add_handler(
        root_logger,
        RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        ),
        log_level,
    )

    library_level = log_level if log_level == logging.DEBUG else max(log_level, logging.WARNING)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def setup_cli_logging(name: str = "buildops.cli") -> logging.Logger:
    """Log to stdout in the server's format and return the command's logger."""
    logging.basicConfig(
        level=get_log_level(),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
    )
    return logging.getLogger(name)
