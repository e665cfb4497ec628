"""Log setup for the memory CLI.

Each CLI invocation gets a short operation id (set_op_context) that is
stamped on every record, so the lines one `add` or `search` produced can be
pulled out of a shared log file. Records go to stderr, leaving stdout to the
command's JSON result, and to `memory.log` under LOG_DIR. LOG_FORMAT=json
switches both to one JSON object per line.
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Any

op_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("op_id", default="-")

LOG_FILE_NAME = "memory.log"

# Libraries that log every HTTP call or model load at INFO
NOISY_LOGGERS = (
    "chromadb",
    "httpx",
    "httpcore",
    "urllib3",
    "sentence_transformers",
    "asyncio",
)

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"op_id", "message"}


def set_op_context(op_id: str) -> None:
    """Tag all following log records with op_id."""
    op_id_var.set(op_id)


class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.op_id = op_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record.

    Fields passed through ``extra=`` are kept as top-level keys; values
    that are not JSON-serializable are stored as their str().
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "op_id": getattr(record, "op_id", "-"),
            "message": record.getMessage(),
        }
        if record.levelno >= logging.WARNING:
            entry["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(self._extras(record))
        return json.dumps(entry, ensure_ascii=False)

    @staticmethod
    def _extras(record: logging.LogRecord) -> dict[str, Any]:
        extras = {}
        for key, value in vars(record).items():
            if key in _RECORD_ATTRS:
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                value = str(value)
            extras[key] = value
        return extras


class TextFormatter(logging.Formatter):
    """``TIME [LEVEL] [op_id] logger: message``; the file log adds the date."""

    def __init__(self, include_date: bool = False):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(op_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S",
        )


def _open_log_file(config: Any) -> logging.Handler:
    log_dir = Path(config.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    write_check = log_dir / ".write_test"
    write_check.touch()
    write_check.unlink()

    path = log_dir / LOG_FILE_NAME
    if config.log_max_bytes > 0:
        return RotatingFileHandler(
            path,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
    return TimedRotatingFileHandler(
        path,
        when="midnight",
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Install the stderr and file handlers on the root logger.

    Any handlers already on the root logger are removed first.

    Args:
        config: Config carrying the LOG_* settings
        verbose: Show DEBUG on the console regardless of LOG_LEVEL

    Returns:
        False if LOG_DIR was not writable and only stderr logging is active
    """
    json_output = config.log_format == "json"
    context_filter = ContextFilter()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO))
    console.setFormatter(JsonFormatter() if json_output else TextFormatter())
    console.addFilter(context_filter)
    root.addHandler(console)

    try:
        file_handler = _open_log_file(config)
    except OSError as e:
        print(
            f"Warning: Cannot write to log directory '{config.log_dir}': {e}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )
        file_enabled = False
    else:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JsonFormatter() if json_output else TextFormatter(include_date=True))
        file_handler.addFilter(context_filter)
        root.addHandler(file_handler)
        file_enabled = True

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return file_enabled
