"""JSON log lines correlated with the current trace and package."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import sys
from typing import Any

import orjson

from .context import get_trace_context


_TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
# Per-request chatter at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def _to_json(value: Any) -> Any:
    """Fallback for values orjson cannot serialize natively."""
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return list(value)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="replace")
    # Exceptions, names and summaries all render usefully through str()
    return str(value)


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, tagged with trace ids and the package being fetched."""

    MAX_MESSAGE_LEN = 2000

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if len(message) > self.MAX_MESSAGE_LEN:
            message = message[: self.MAX_MESSAGE_LEN] + "..."

        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
        }
        entry.update(self._correlation(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Anything passed through ``extra=``
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        )
        return orjson.dumps(entry, default=_to_json).decode("utf-8")

    @staticmethod
    def _correlation(record: logging.LogRecord) -> dict[str, str]:
        ctx = get_trace_context()
        fields = {"trace_id": ctx.get("trace_id", ""), "span_id": ctx.get("span_id", "")}
        if package := ctx.get("package"):
            fields["package"] = package
        if "." in record.name:
            fields["component"] = record.name.rsplit(".", 1)[-1]
        return fields


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Send all logs to stdout, as JSON or plain text.

    Args:
        level: Root log level name, case-insensitive
        json_output: Use :class:`JsonFormatter` when True
        logger_levels: Per-logger overrides, applied last
    """
    root = logging.getLogger()
    root.setLevel(_level(level))
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_TEXT_FORMAT))
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_level(name_level))
