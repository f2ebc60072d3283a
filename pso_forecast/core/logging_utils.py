"""
Logging for the PSO forecasting engine.

All modules log through the ``pso_forecast`` logger. Every record carries the
run id of the active run, so the console and the per-run log file can be
matched to the outputs under ``outputs/runs/<run_id>``.
"""
import logging
import sys
import time
from pathlib import Path
from typing import Any, Optional

LOGGER_NAME = 'pso_forecast'
LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(run_id)s | %(message)s'


class RunIdFilter(logging.Filter):
    """Stamps each record with the run id (``-`` outside of a run)."""

    def __init__(self, run_id: Optional[str] = None):
        super().__init__()
        self.run_id = run_id or '-'

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'run_id'):
            record.run_id = self.run_id
        return True


def setup_logging(
    log_dir: Optional[Path] = None,
    run_id: Optional[str] = None,
    level: int = logging.INFO,
    console: bool = True
) -> logging.Logger:
    """
    Configure the package logger for one run.

    Existing handlers are replaced, so calling this again for a new run does
    not duplicate output.

    Args:
        log_dir: Directory for ``<run_id>.log``; no file is written when None
        run_id: Run identifier stamped on every record
        level: Logging level
        console: Whether to also log to stdout

    Returns:
        Configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    run_filter = RunIdFilter(run_id)

    handlers = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f"{run_id or 'forecast'}.log"
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(run_filter)
        logger.addHandler(handler)

    if log_dir is not None:
        logger.info(f"Logging to: {log_dir}")
    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get the package logger, or a child of it."""
    return logging.getLogger(name)


class LogContext:
    """
    Logs the start and end of a pipeline stage with its elapsed time.

    Keyword arguments are shown in the opening banner, e.g.
    ``LogContext(logger, "Forecast run", scenario="baseline", horizon=10)``.
    After the block, ``elapsed`` holds the duration in seconds.
    """

    def __init__(self, logger: logging.Logger, section: str, **details: Any):
        self.logger = logger
        self.section = section
        self.details = details
        self.elapsed: Optional[float] = None
        self._start = None

    def __enter__(self):
        self._start = time.perf_counter()
        banner = f"Starting: {self.section}"
        if self.details:
            banner += " [" + ", ".join(f"{k}={v}" for k, v in self.details.items()) + "]"
        self.logger.info('=' * 60)
        self.logger.info(banner)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self._start
        if exc_type is None:
            self.logger.info(f"Completed: {self.section} ({self.elapsed:.2f}s)")
        else:
            self.logger.error(f"Failed: {self.section} after {self.elapsed:.2f}s: {exc_val}")
        return False
