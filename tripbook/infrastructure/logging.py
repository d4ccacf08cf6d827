"""Structured logging: JSON lines with credentials and card data scrubbed."""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional

from tripbook.security.redact import redact_sensitive


class StructuredLogger:
    """Writes one JSON object per event to ``output`` (stderr by default)."""

    def __init__(self, trace_id: Optional[str] = None, output=None):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self._output = output or sys.stderr
        self._timers: dict[str, float] = {}

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        try:
            line = json.dumps(data, ensure_ascii=False, default=str)
            self._output.write(redact_sensitive(line) + "\n")
            self._output.flush()
        except (OSError, ValueError, TypeError) as exc:
            fallback = {
                "event": "logger_internal_error",
                "trace_id": self.trace_id,
                "timestamp": time.time(),
                "error": str(exc),
            }
            sys.stderr.write(json.dumps(fallback, ensure_ascii=False, default=str) + "\n")

    def stage_start(self, stage: str, **extra: Any) -> None:
        self._timers[stage] = time.time()
        self._emit({"event": "stage_start", "stage": stage, **extra})

    def stage_end(self, stage: str, **extra: Any) -> None:
        start = self._timers.pop(stage, time.time())
        duration_ms = round((time.time() - start) * 1000, 1)
        self._emit({"event": "stage_end", "stage": stage, "duration_ms": duration_ms, **extra})

    def transition(self, source: str, target: str, **extra: Any) -> None:
        self._emit({"event": "flow_transition", "from": source, "to": target, **extra})

    def payment(self, transaction_id: str, status: str, **extra: Any) -> None:
        self._emit({"event": "payment", "transaction_id": transaction_id, "status": status, **extra})

    def error(self, stage: str, error: str, **extra: Any) -> None:
        self._emit({"event": "error", "stage": stage, "error": redact_sensitive(error), **extra})

    def summary(self, **extra: Any) -> None:
        self._emit({"event": "summary", **extra})


_logger: Optional[StructuredLogger] = None


def get_logger(trace_id: Optional[str] = None) -> StructuredLogger:
    global _logger
    if _logger is None or (trace_id and _logger.trace_id != trace_id):
        _logger = StructuredLogger(trace_id=trace_id)
    return _logger


__all__ = ["StructuredLogger", "get_logger"]
