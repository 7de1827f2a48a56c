"""
Structured logging system for hrsync.

Provides centralized logging with console and file outputs plus counters
for the upserts performed during a run.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks how many rows each table received through inserts and updates.
    """

    def __init__(
        self,
        name: str = "hrsync",
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
        self.logger.handlers.clear()  # Remove existing handlers

        self.metrics = {
            "upserts_attempted": 0,
            "rows_inserted": 0,
            "rows_updated": 0,
            "upserts_failed": 0,
            "errors_by_type": {},
            "tables": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
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

            log_file = log_dir / f"hrsync_{datetime.now().strftime('%Y%m%d')}.log"
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

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def _table_stats(self, table: str) -> dict:
        if table not in self.metrics["tables"]:
            self.metrics["tables"][table] = {"inserted": 0, "updated": 0, "failed": 0}
        return self.metrics["tables"][table]

    def record_upsert_attempt(self, table: str):
        """Record that an upsert started against a table."""
        self.metrics["upserts_attempted"] += 1
        self._table_stats(table)

    def record_insert(self, table: str, rows: int):
        """Record rows written by the insert branch."""
        self.metrics["rows_inserted"] += rows
        self._table_stats(table)["inserted"] += rows

    def record_update(self, table: str, rows: int):
        """Record rows written by the update branch."""
        self.metrics["rows_updated"] += rows
        self._table_stats(table)["updated"] += rows

    def record_upsert_failure(self, table: str, error_type: str):
        """Record a failed upsert."""
        self.metrics["upserts_failed"] += 1
        self._table_stats(table)["failed"] += 1

        if error_type not in self.metrics["errors_by_type"]:
            self.metrics["errors_by_type"][error_type] = 0
        self.metrics["errors_by_type"][error_type] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        return self.metrics.copy()

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Upsert Session Metrics ===")
        self.info(f"Upserts: {metrics['upserts_attempted']} attempted, {metrics['upserts_failed']} failed")
        self.info(f"Rows: {metrics['rows_inserted']} inserted, {metrics['rows_updated']} updated")

        if metrics["tables"]:
            self.info("Per table:")
            for table, stats in metrics["tables"].items():
                self.info(
                    f"  {table}: inserted={stats['inserted']} "
                    f"updated={stats['updated']} failed={stats['failed']}"
                )

        if metrics["errors_by_type"]:
            self.info("Error Types:")
            for error_type, count in metrics["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "hrsync",
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
