"""
Logging for Catering Quotes.

setup_logging() is called once by the app factory. Console output is
human-readable in development and JSON in production (CATERING_ENV);
the rotating file under LOG_DIR is always JSON.
"""
import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone

from catering.core.paths import LOG_DIR

# `extra=` keys the app attaches to records (request timing, quote events)
EXTRA_FIELDS = ("route", "method", "duration_ms", "quote_id", "total")

QUIET_LOGGERS = ("werkzeug", "reportlab", "urllib3")

HUMAN_FORMAT = "%(asctime)s [%(levelname).1s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record):
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update({k: getattr(record, k) for k in EXTRA_FIELDS if hasattr(record, k)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _file_handler(log_dir: str):
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError as e:
        logging.getLogger("catering").warning("File logging disabled: %s", e)
        return None
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(log_dir, "catering.log"), maxBytes=5_000_000, backupCount=5)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(level=None, json_logs=None):
    """
    Args:
        level: log level name (default: LOG_LEVEL env or INFO)
        json_logs: JSON console output (default: CATERING_ENV == production)
    """
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    if json_logs is None:
        json_logs = os.environ.get("CATERING_ENV", "").lower() == "production"

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs
                         else logging.Formatter(HUMAN_FORMAT, "%H:%M:%S"))
    root.addHandler(console)

    handler = _file_handler(LOG_DIR)
    if handler:
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("catering").info("Logging initialized (level=%s, json=%s)",
                                       level, json_logs)
