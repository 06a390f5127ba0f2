"""
Logging setup for the FutureFind client.

Colored console output through colorlog, plus a small in-process aggregator so
repeated failures (a refresh endpoint that is down on every tick, a flaky
network) show up as rates instead of an endless stream of identical lines.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import defaultdict, deque
from typing import Any

import colorlog

_DEBUG_VALUES = ("true", "1", "yes")
_ALERT_WINDOW_SECONDS = 3600


class ErrorAggregator:
    """Counts structured errors per category.

    Only the most recent ``max_per_type`` entries of each category are kept.
    """

    def __init__(self, max_per_type: int = 1000):
        self.max_per_type = max_per_type
        self.errors: dict[str, deque[dict[str, Any]]] = defaultdict(
            lambda: deque(maxlen=self.max_per_type)
        )
        self.lock = threading.Lock()
        self.start_time = time.time()

    def record_error(self, error_type: str, message: str, context: dict[str, Any] | None = None) -> None:
        with self.lock:
            self.errors[error_type].append(
                {"timestamp": time.time(), "message": message, "context": context or {}}
            )

    def get_error_summary(self) -> dict[str, Any]:
        """Per category: retained count, count in the last hour, hourly rate and last entry."""
        with self.lock:
            now = time.time()
            hours = max((now - self.start_time) / 3600, 1)
            summary: dict[str, Any] = {}
            for error_type, entries in self.errors.items():
                total = len(entries)
                summary[error_type] = {
                    "total_count": total,
                    "recent_count": sum(
                        1 for e in entries if now - e["timestamp"] < _ALERT_WINDOW_SECONDS
                    ),
                    "rate_per_hour": total / hours,
                    "last_occurrence": entries[-1] if entries else None,
                }
            return summary

    def should_alert(self, error_type: str, threshold_rate: float = 10.0) -> bool:
        stats = self.get_error_summary().get(error_type)
        return bool(stats) and stats["rate_per_hour"] > threshold_rate

    def reset(self) -> None:
        with self.lock:
            self.errors.clear()
            self.start_time = time.time()

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            logging.info("No errors recorded in current session")
            return
        logging.warning("🚨 ERROR SUMMARY REPORT")
        for error_type, stats in summary.items():
            logging.warning(
                f"  {error_type}: {stats['total_count']} total, "
                f"{stats['recent_count']} in last hour, {stats['rate_per_hour']:.1f}/hour"
            )
            if stats["last_occurrence"]:
                logging.warning(f"    Last: {stats['last_occurrence']['message']}")


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log ``message`` tagged with its category and record it for aggregation.

    Args:
        error_type: Category such as 'network', 'auth' or 'http'.
        message: Descriptive error message.
        exception: The exception that occurred, if any.
        context: Extra key/value pairs appended to the line.
        level: Logging level of the record.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception:
        parts.append(f"Exception: {type(exception).__name__}: {str(exception)}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))

    error_aggregator.record_error(error_type, message, context)
    if error_aggregator.should_alert(error_type):
        rate = error_aggregator.get_error_summary()[error_type]["rate_per_hour"]
        logging.critical(f"🚨 HIGH ERROR RATE ALERT: {error_type} occurring at {rate:.1f}/hour")


class LoggerConfigurator:
    """Configures root logging with colorlog.

    The ``DEBUG`` environment variable ('true', '1' or 'yes') switches the
    level from INFO to DEBUG.
    """

    def configure(self):
        debug = os.environ.get("DEBUG", "").lower() in _DEBUG_VALUES
        log_level = logging.DEBUG if debug else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "magenta",
            },
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logging.basicConfig(level=log_level, handlers=[handler])

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        for h in root_logger.handlers:
            h.setFormatter(formatter)

        # aiohttp client/access chatter is noise at DEBUG
        logging.getLogger("aiohttp").setLevel(logging.INFO)

        atexit.register(self._log_final_error_summary)

    def _log_final_error_summary(self):
        try:
            logging.info("📊 Final error summary before shutdown:")
            error_aggregator.log_summary_report()
        except Exception as e:
            logging.error(f"Failed to log final error summary: {e}")
