"""
Structured logging for TalentMatch.

Console and optional file output, plus counters that describe how the
engine scored its candidate pools (how often coordinates were available,
how often it fell back to name comparison, what inputs were rejected).
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks matching metrics across ranking runs.
    """

    def __init__(
        self,
        name: str = "talentmatch",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = False,
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
            "rankings_run": 0,
            "candidates_scored": 0,
            "geo_comparisons": 0,
            "hierarchy_fallbacks": 0,
            "remote_bypasses": 0,
            "invalid_inputs_by_reason": {},
        }

        if enable_console:
            # stderr keeps stdout free for command output
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

            log_file = log_dir / f"talentmatch_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def set_level(self, level: str):
        """Change the logger and console level; the file handler keeps DEBUG."""
        numeric = getattr(logging, level.upper())
        self.logger.setLevel(numeric)
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(numeric)

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
        if not self.logger.isEnabledFor(level):
            return
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_ranking(self, pool_size: int):
        """Record one ranking run over `pool_size` candidates."""
        with self._lock:
            self.metrics["rankings_run"] += 1
            self.metrics["candidates_scored"] += pool_size

    def record_location_method(self, method: str):
        """Count how a location score was produced (geo, hierarchy, remote)."""
        key = {"geo": "geo_comparisons", "remote": "remote_bypasses"}.get(method, "hierarchy_fallbacks")
        with self._lock:
            self.metrics[key] += 1

    def record_invalid_input(self, reason: str):
        with self._lock:
            reasons = self.metrics["invalid_inputs_by_reason"]
            reasons[reason] = reasons.get(reason, 0) + 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = dict(self.metrics)
        metrics_copy["invalid_inputs_by_reason"] = dict(self.metrics["invalid_inputs_by_reason"])
        runs = metrics_copy["rankings_run"]
        metrics_copy["average_pool_size"] = (
            round(metrics_copy["candidates_scored"] / runs, 1) if runs else 0
        )
        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        self.info("=== Matching Session Metrics ===")
        self.info(f"Rankings: {metrics['rankings_run']} (avg pool {metrics['average_pool_size']})")
        self.info(f"Candidates scored: {metrics['candidates_scored']}")
        self.info(
            f"Location: geo={metrics['geo_comparisons']} "
            f"hierarchy={metrics['hierarchy_fallbacks']} "
            f"remote={metrics['remote_bypasses']}"
        )

        if metrics["invalid_inputs_by_reason"]:
            self.info("Rejected inputs:")
            for reason, count in metrics["invalid_inputs_by_reason"].items():
                self.info(f"  {reason}: {count}")


# Global logger instance
_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "talentmatch",
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
