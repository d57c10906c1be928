"""
Structured logging for the product resolver.

Messages go to stdout and to a daily file under logs/, with keyword context
appended as JSON. The logger also counts resolution outcomes and per-source
attempts so a session can end with a summary of which backends delivered.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

OUTCOMES = ("requested", "delivered", "degraded", "cancelled", "failed")


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=DATE_FORMAT))
    return handler


def _empty_metrics() -> Dict[str, Any]:
    metrics: Dict[str, Any] = {f"resolutions_{outcome}": 0 for outcome in OUTCOMES}
    metrics["source_attempts"] = 0
    metrics["errors_by_type"] = {}
    metrics["source_success_rate"] = {}
    return metrics


class StructuredLogger:
    """Console and file logging plus resolution metrics."""

    def __init__(
        self,
        name: str = "productresolver",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Args:
            name: Name of the underlying logging.Logger
            level: Console threshold (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for daily log files (default: logs/)
            enable_file: Write every record, DEBUG included, to the daily file
            enable_console: Echo records at `level` and above to stdout
        """
        numeric_level = getattr(logging, level.upper())
        self.logger = logging.getLogger(name)
        self.logger.setLevel(numeric_level)
        self.logger.handlers.clear()
        self.metrics = _empty_metrics()

        if enable_console:
            self.logger.addHandler(_handler(logging.StreamHandler(sys.stdout), numeric_level, CONSOLE_FORMAT))

        if enable_file:
            log_dir = Path(log_dir) if log_dir is not None else Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"productresolver_{datetime.now():%Y%m%d}.log"
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            self.logger.addHandler(_handler(file_handler, logging.DEBUG, FILE_FORMAT))

    def set_level(self, level: str):
        """Change the logger and console threshold; the file keeps recording DEBUG."""
        numeric_level = getattr(logging, level.upper(), logging.INFO)
        self.logger.setLevel(numeric_level)
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(numeric_level)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context):
        self._log(logging.ERROR, message, context)

    def critical(self, message: str, **context):
        self._log(logging.CRITICAL, message, context)

    def _log(self, level: int, message: str, context: Dict[str, Any]):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metrics

    def record_resolution(self, outcome: str):
        """Count one resolution outcome (one of OUTCOMES)."""
        self.metrics[f"resolutions_{outcome}"] += 1

    def _source_stats(self, label: str) -> Dict[str, int]:
        return self.metrics["source_success_rate"].setdefault(label, {"attempts": 0, "successes": 0})

    def record_source_attempt(self, label: str):
        self.metrics["source_attempts"] += 1
        self._source_stats(label)["attempts"] += 1

    def record_source_success(self, label: str):
        self._source_stats(label)["successes"] += 1

    def record_source_failure(self, label: str, error_type: str):
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Snapshot of the counters with a success_rate added per source."""
        snapshot = dict(self.metrics)
        snapshot["errors_by_type"] = dict(self.metrics["errors_by_type"])
        snapshot["source_success_rate"] = {}
        for label, stats in self.metrics["source_success_rate"].items():
            entry = dict(stats)
            if stats["attempts"]:
                entry["success_rate"] = round(stats["successes"] / stats["attempts"], 3)
            snapshot["source_success_rate"][label] = entry
        return snapshot

    def log_metrics_summary(self):
        m = self.get_metrics()
        self.info("=== Resolution Session Metrics ===")
        self.info(
            f"Resolutions: {m['resolutions_delivered']}/{m['resolutions_requested']} delivered "
            f"({m['resolutions_degraded']} degraded, {m['resolutions_cancelled']} cancelled, "
            f"{m['resolutions_failed']} failed)"
        )
        self.info(f"Source attempts: {m['source_attempts']}")

        if m["source_success_rate"]:
            self.info("Per-source delivery:")
            for label, stats in m["source_success_rate"].items():
                rate = stats.get("success_rate", 0) * 100
                self.info(f"  {label}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")

        if m["errors_by_type"]:
            self.info("Failures by type:")
            for error_type, count in m["errors_by_type"].items():
                self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "productresolver", level: str = "INFO", **kwargs) -> StructuredLogger:
    """Return the process-wide logger, creating it with these arguments on first use."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)
    return _global_logger


def reset_logger():
    """Forget the process-wide logger so the next get_logger() builds a fresh one."""
    global _global_logger
    _global_logger = None
