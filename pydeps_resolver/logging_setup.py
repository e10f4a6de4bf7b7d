"""
JSONL logging bootstrap.
Initializes a canonical JSONL sink plus a stderr handler early in CLI startup.
"""

import json
import logging
import os
import sys
from datetime import UTC
from datetime import datetime
from pathlib import Path

DEFAULT_PATH = os.environ.get("PYDEPS_LOG_PATH", "")
DEFAULT_LEVEL = os.environ.get("PYDEPS_LOG_LEVEL", "INFO").upper()

_RESERVED = frozenset(
    (
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "name",
        "taskName",
    )
)


class JsonlHandler(logging.Handler):
    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._write(record)
        except Exception:
            self.handleError(record)

    def _write(self, record: logging.LogRecord) -> None:
        base = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": {"name": "pydeps.log", "ver": "1.0.0"},
            "logger": record.name,
            "event": getattr(record, "event", None),
            "message": record.getMessage(),
        }
        # Attach extra fields (e.g. the dependency explanation payload)
        for k, v in record.__dict__.items():
            if k in _RESERVED:
                continue
            base.setdefault(k, v)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(base, ensure_ascii=False, default=str) + "\n")


class ExplainOrWarningFilter(logging.Filter):
    """Let through warnings and above, plus dependency explanations."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.WARNING or getattr(record, "event", None) == "dependency:explain"


def init_logging(path: str | None = None, level: str | None = None, stream=None) -> None:
    """Configure the root logger.

    A stderr handler always shows warnings, errors and dependency
    explanations. A JSONL file handler is added when a path is given (or
    ``PYDEPS_LOG_PATH`` is set).
    """
    path = path or DEFAULT_PATH
    level = (level or DEFAULT_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))

    # Remove handlers from a previous call to avoid duplicates
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler) or getattr(h, "_pydeps_console", False):
            root.removeHandler(h)

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(logging.Formatter("%(message)s"))
    console.addFilter(ExplainOrWarningFilter())
    console._pydeps_console = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if path:
        root.addHandler(JsonlHandler(path))
