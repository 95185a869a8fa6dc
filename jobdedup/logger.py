"""
Structured logging for the deduplication engine.

Provides centralized logging with console and file outputs, log levels,
and counters for monitoring how batches are being deduplicated.
"""

import json
import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks dedup metrics (comparisons, clusters, duplicates, lookups).
    """

    def __init__(
        self,
        name: str = "jobdedup",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()

        self._lock = threading.Lock()
        self.metrics = {
            "comparisons": 0,
            "batches": 0,
            "clusters_formed": 0,
            "duplicates_by_reason": {},
            "lookups_attempted": 0,
            "lookups_failed": 0,
            "jobs_dropped": 0,
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"jobdedup_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods; every update holds _lock

    def record_comparisons(self, count: int = 1):
        with self._lock:
            self.metrics["comparisons"] += count

    def record_batch(self, clusters: int):
        """Record one clustered batch and the number of clusters it produced."""
        with self._lock:
            self.metrics["batches"] += 1
            self.metrics["clusters_formed"] += clusters

    def record_duplicate(self, reason: str):
        with self._lock:
            by_reason = self.metrics["duplicates_by_reason"]
            by_reason[reason] = by_reason.get(reason, 0) + 1

    def record_lookup(self, failed: bool = False):
        with self._lock:
            self.metrics["lookups_attempted"] += 1
            if failed:
                self.metrics["lookups_failed"] += 1

    def record_dropped(self, count: int = 1):
        with self._lock:
            self.metrics["jobs_dropped"] += count

    def get_metrics(self) -> dict:
        """Return a copy of current metrics with derived rates."""
        with self._lock:
            metrics_copy = dict(self.metrics)
            metrics_copy["duplicates_by_reason"] = dict(self.metrics["duplicates_by_reason"])
        attempted = metrics_copy["lookups_attempted"]
        if attempted > 0:
            metrics_copy["lookup_failure_rate"] = round(metrics_copy["lookups_failed"] / attempted, 3)
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Deduplication Metrics ===")
        self.info(f"Batches: {metrics['batches']} ({metrics['clusters_formed']} clusters)")
        self.info(f"Comparisons: {metrics['comparisons']}")
        self.info(f"Lookups: {metrics['lookups_attempted']} ({metrics['lookups_failed']} failed)")
        self.info(f"Dropped as already known: {metrics['jobs_dropped']}")

        if metrics["duplicates_by_reason"]:
            self.info("Duplicates by reason:")
            for reason, count in metrics["duplicates_by_reason"].items():
                self.info(f"  {reason}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "jobdedup",
    level: str = "INFO",
    enable_file: bool = False,
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Library callers get a console-only logger; the daily log file is
    opened only when a caller such as the CLI asks for it.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_file: Write logs to a daily file under log_dir
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, enable_file=enable_file, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
