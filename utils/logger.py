"""
Logging setup for the ranking service (loguru).

Usage:
    from utils.logger import logger

    logger.info("Ranking refresh finished")

Sinks:
- stderr, colored, at the configured level
- {app}_{date}.log: everything at INFO and above
- {app}_errors_{date}.log: WARNING and above, so failed or skipped
  refreshes can be found without reading a whole day of INFO lines
"""
import sys
from pathlib import Path
from loguru import logger

logger.remove()

_configured = False

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def _add_file_sink(path: Path, level: str, retention_days: int):
    logger.add(
        path,
        level=level,
        format=FILE_FORMAT,
        rotation="00:00",
        retention=f"{retention_days} days",
        compression="gz",
        encoding="utf-8",
    )


def setup_logging(
    log_dir: Path = None,
    log_level: str = "INFO",
    app_name: str = "app",
    retention_days: int = 30,
):
    """
    Install the sinks. Only the first call has any effect.

    Args:
        log_dir: Where log files go; None keeps logging on stderr only
        log_level: Console level (files always start at INFO)
        app_name: File name prefix, "api" or "scheduler"
        retention_days: Days of rotated files to keep
    """
    global _configured

    if _configured:
        return

    logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        _add_file_sink(log_dir / f"{app_name}_{{time:YYYY-MM-DD}}.log", "INFO", retention_days)
        _add_file_sink(log_dir / f"{app_name}_errors_{{time:YYYY-MM-DD}}.log", "WARNING", retention_days)
        logger.info(f"Logging to {log_dir}")

    _configured = True


def init_logging(app_name: str = "app"):
    """Configure logging from settings; call once per process."""
    from config import settings, ensure_directories

    ensure_directories()
    setup_logging(
        log_dir=settings.LOG_DIR,
        log_level=settings.LOG_LEVEL,
        app_name=app_name,
        retention_days=settings.LOG_RETENTION_DAYS,
    )


__all__ = ["logger", "setup_logging", "init_logging"]
