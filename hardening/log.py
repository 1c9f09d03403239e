"""Logger setup for the setup commands and the report mailer."""

import logging
import os
from pathlib import Path
from typing import Union

from rich.logging import RichHandler

from .ui import console

ROOT_LOGGER = "hardening"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _reset_handlers(logger: logging.Logger) -> None:
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()


def _secure_log_file(logger: logging.Logger, log_file: Path) -> None:
    try:
        os.chmod(str(log_file), 0o600)
    except OSError as e:
        logger.warning(f"Could not set permissions on log file {log_file}: {e}")


def setup_logger(log_file: Union[str, Path], name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Set up and configure the setup logger.

    Console output goes through a RichHandler at INFO; the log file receives
    everything at DEBUG.

    Args:
        log_file: Path of the setup log file.
        name: Logger name; module loggers are children of ``hardening``.

    Returns:
        The configured logger.
    """
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    _reset_handlers(logger)

    console_handler = RichHandler(console=console, rich_tracebacks=True)
    console_handler.setLevel(logging.INFO)
    logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s", DATE_FORMAT)
    )
    logger.addHandler(file_handler)

    _secure_log_file(logger, log_file)
    return logger


def setup_report_logger(
    log_file: Union[str, Path], name: str = f"{ROOT_LOGGER}.report"
) -> logging.Logger:
    """Configure the plain ``timestamp - message`` log used by the report mailer."""
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    _reset_handlers(logger)

    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s", DATE_FORMAT))
    logger.addHandler(file_handler)
    return logger
