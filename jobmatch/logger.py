"""
Structured logging for the scoring engine.

Console and daily file output, JSON-serialized keyword context, and
counters for scoring runs, skipped profile entries and store activity.
"""

import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks counters for scoring and persistence health.
    """

    def __init__(
        self,
        name: str = "jobmatch",
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
        self.enable_file = enable_file
        self.enable_console = enable_console

        self.metrics = {
            "scores_computed": 0,
            "entries_skipped": {},
            "records_upserted": {},
            "store_failures": 0,
            "media_requests": 0,
            "media_failures": 0,
            "errors_by_type": {},
        }
        self.configure(level, log_dir)

    def configure(self, level: str = "INFO", log_dir: Optional[Path] = None):
        """(Re)build handlers, e.g. once settings have been loaded."""
        self.logger.setLevel(getattr(logging, level.upper()))
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        if self.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if self.enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"jobmatch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # file always gets everything
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

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_score_computation(self):
        """Increment the scored-profile counter."""
        self.metrics["scores_computed"] += 1

    def record_skipped_entry(self, reason: str):
        """Count a profile entry excluded from scoring."""
        skipped = self.metrics["entries_skipped"]
        skipped[reason] = skipped.get(reason, 0) + 1

    def record_upsert(self, status: str):
        """Count a matching record write by outcome (new/updated/no-change)."""
        upserts = self.metrics["records_upserted"]
        upserts[status] = upserts.get(status, 0) + 1

    def record_store_failure(self, error_type: str):
        """Record a failed store operation."""
        self.metrics["store_failures"] += 1
        self._record_error(error_type)

    def record_media_request(self):
        """Increment media store request counter."""
        self.metrics["media_requests"] += 1

    def record_media_failure(self, error_type: str):
        """Record a failed media store request."""
        self.metrics["media_failures"] += 1
        self._record_error(error_type)

    def _record_error(self, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics, with totals for the per-key counters."""
        metrics_copy = self.metrics.copy()
        metrics_copy["entries_skipped_total"] = sum(self.metrics["entries_skipped"].values())
        metrics_copy["records_upserted_total"] = sum(self.metrics["records_upserted"].values())
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Scoring Session Metrics ===")
        self.info(f"Profiles scored: {metrics['scores_computed']}")
        self.info(f"Entries skipped: {metrics['entries_skipped_total']}")
        for reason, count in metrics["entries_skipped"].items():
            self.info(f"  {reason}: {count}")

        self.info(f"Records written: {metrics['records_upserted_total']}")
        for status, count in metrics["records_upserted"].items():
            self.info(f"  {status}: {count}")

        if metrics["media_requests"]:
            self.info(
                f"Media requests: {metrics['media_requests']} "
                f"({metrics['media_failures']} failed)"
            )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "jobmatch",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
