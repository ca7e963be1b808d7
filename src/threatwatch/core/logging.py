# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Structured logging with sensitive data redaction.

Engine log calls attach monitoring context through ``extra``
(``rule_id``, ``source_id``, ``source_type``, ``alert_id``); both
formatters surface whichever of those a record carries.
"""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from typing import Any

REDACT_PATTERNS = [
    re.compile(r"(hooks\.slack\.com/services/[A-Z0-9]{4})[A-Za-z0-9/]*"),
    re.compile(r"(webhook\.office\.com/webhookb2/[a-f0-9\-]{6})[^\s\"']*"),
    re.compile(r"(Auth-Key[\"':\s]+[a-zA-Z0-9]{4})[a-zA-Z0-9]*"),
    re.compile(r"(routing_key[\"':\s]+[a-zA-Z0-9]{4})[a-zA-Z0-9]*"),
    re.compile(r"(Bearer\s+[a-zA-Z0-9\-._~+/]{10})[a-zA-Z0-9\-._~+/]*"),
]

CONTEXT_FIELDS = ("rule_id", "source_id", "source_type", "alert_id")


def redact_sensitive(text: str) -> str:
    for pattern in REDACT_PATTERNS:
        text = pattern.sub(r"\1[REDACTED]", text)
    return text


def log_context(record: logging.LogRecord) -> dict[str, str]:
    """Monitoring context fields present on *record*."""
    return {
        key: str(getattr(record, key))
        for key in CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line, UTC ISO-8601 timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_sensitive(record.getMessage()),
            **log_context(record),
        }
        if record.exc_info and record.exc_info[1]:
            exc = record.exc_info[1]
            entry["exception"] = {
                "type": type(exc).__name__,
                "message": redact_sensitive(str(exc)),
            }
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with a trailing ``key=value`` context block."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = log_context(record)
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            line = f"{line} [{pairs}]"
        return redact_sensitive(line)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    root = logging.getLogger("threatwatch")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            TextFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    root.addHandler(handler)
