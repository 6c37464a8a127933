"""Logging setup for the exporter: colored console output, optional rotating log file, progress counts."""

import logging
import logging.handlers
import time
from typing import Any, Dict, Optional

import colorlog

LOGGER_NAME = 'linked_note_exporter'

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    level: Optional[str] = None
) -> logging.Logger:
    """
    Configure the project logger.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG)
        log_file: Optional path of a rotating log file
        level: Explicit level name; wins over verbosity

    Returns:
        The project logger
    """
    if level:
        if level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level '{level}'. Must be one of: {list(LOG_LEVELS)}")
        log_level = getattr(logging, level.upper())
    elif verbosity >= 2:
        log_level = logging.DEBUG
    elif verbosity >= 1:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)

    # Setup runs again once the config is loaded; don't stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(colorlog.ColoredFormatter(
        fmt='%(log_color)s' + LOG_FORMAT,
        datefmt=DATE_FORMAT,
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white',
        }
    ))
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
        except OSError as e:
            logger.warning(f"Cannot write log file {log_file}: {e}")
        else:
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
            logger.addHandler(file_handler)
            logger.debug(f"Logging to {log_file} at {logging.getLevelName(log_level)}")

    return logger


class ProgressTracker:
    """Context manager counting processed and failed items over an open-ended walk."""

    def __init__(self, item_type: str = "items"):
        """
        Initialize progress tracker.

        Args:
            item_type: Description of item type (e.g., "notes")
        """
        self.item_type = item_type
        self.processed_items = 0
        self.failed_items = 0
        self.start_time: Optional[float] = None
        self.logger = logging.getLogger(LOGGER_NAME)

    def __enter__(self) -> 'ProgressTracker':
        self.start_time = time.time()
        self.logger.info(f"Processing {self.item_type}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is None:
            return

        elapsed = time.time() - self.start_time
        log_method = self.logger.warning if self.failed_items else self.logger.info
        log_method(
            f"{self.item_type.capitalize()}: {self.processed_items} processed, "
            f"{self.failed_items} with problems, {elapsed:.1f}s"
        )

    def increment(self, success: bool = True) -> None:
        """
        Count one processed item.

        Args:
            success: False when the item was missing or hit an error
        """
        self.processed_items += 1
        if not success:
            self.failed_items += 1

        if self.processed_items % 10 == 0:
            self.logger.info(f"Processed {self.processed_items} {self.item_type}")


def log_section(title: str) -> None:
    """
    Log a decorative section header.

    Args:
        title: Section title to display
    """
    logger = logging.getLogger(LOGGER_NAME)

    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {title.upper()}")
    logger.info(separator)


def log_config(config: Dict[str, Any]) -> None:
    """Log the effective configuration of a run."""
    logger = logging.getLogger(LOGGER_NAME)
    export_settings = config.get('export') or {}

    log_section("Configuration")

    logger.info(f"Start note: {config.get('parseFilePath')}")
    logger.info(f"Max nesting level: {config.get('levelNesting')}")
    logger.info(f"Source directories: {config.get('filesPaths', [])}")
    logger.info(f"Media directory: {config.get('mediaPath')}")
    logger.info(f"Blacklist: {config.get('blackList') or 'None'}")
    logger.info(f"Staging directory: {export_settings.get('staging_directory', 'export')}")
    logger.info(f"Archive path: {export_settings.get('archive_path', 'export.zip')}")
    logger.info(f"Keep staging: {export_settings.get('keep_staging', False)}")
    logger.info(f"Visit policy: {export_settings.get('visit_policy', 'first_seen')}")
    logger.info(f"Dry run: {export_settings.get('dry_run', False)}")


__all__ = [
    'LOGGER_NAME',
    'setup_logging',
    'ProgressTracker',
    'log_section',
    'log_config'
]
