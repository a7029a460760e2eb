"""
core/logger.py — JSONL structured logger for DotDecoder.

DDLogger writes one JSON object per line to logs/dotdecoder_{date}.jsonl,
rotating automatically each day. WARN/ERROR/CRITICAL are also mirrored
to Python stdlib logging (stderr). Thread-safe via threading.Lock.

Everything this application touches is seed-phrase material, so payload
keys that could carry a word, a bit pattern or a word number are replaced
with ``"[redacted]"`` before anything reaches disk.

Usage::

    from core.logger import get_logger
    log = get_logger()
    log.info("gesture", "toggle", {"phase": "TOUCH_DRAG"})
    log.perf("codec", "wordlist_loaded", latency_ms=3.2, data={"size": 2048})
"""

from __future__ import annotations

import json
import logging
import os
import platform
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from core.constants import REDACTED

# ── stdlib mirror logger (stderr for WARN+) ──────────────────
_stdlib = logging.getLogger("dotdecoder")
if not _stdlib.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s — %(message)s"))
    _stdlib.addHandler(_handler)
_stdlib.setLevel(logging.DEBUG)
_stdlib.propagate = False

# Keys whose values are never written out
_SENSITIVE_KEYS: frozenset[str] = frozenset({
    "word", "words", "text", "bits", "index", "number",
    "value", "matched_word", "input_text",
})

# ── Singleton storage ─────────────────────────────────────────
_instance: Optional["DDLogger"] = None
_instance_lock = threading.Lock()


def _redact(data: Optional[dict]) -> dict:
    """
    Return a copy of *data* with sensitive values replaced.

    Nested dicts are scrubbed recursively.

    Args:
        data: Payload dict (may be None).

    Returns:
        A new dict safe to serialise.
    """
    if not data:
        return {}
    clean: dict[str, Any] = {}
    for key, value in data.items():
        if key in _SENSITIVE_KEYS:
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = _redact(value)
        else:
            clean[key] = value
    return clean


class DDLogger:
    """
    Singleton JSONL structured logger for DotDecoder.

    Each call to a log method appends a single JSON line to
    ``<log_dir>/dotdecoder_{YYYY-MM-DD}.jsonl``. A new file is opened
    automatically when the calendar date changes. The directory comes from
    ``DOTDECODER_LOG_DIR`` and defaults to ``logs``.

    Fields written per entry:

    .. code-block:: json

        {
          "timestamp_iso": "2026-10-19T01:20:49.123456+00:00",
          "level": "INFO",
          "phase": "gesture",
          "event": "toggle",
          "data": {"index": "[redacted]"},
          "latency_ms": 0.4
        }

    Do not instantiate directly — use :func:`get_logger`.
    """

    def __init__(self, log_dir: Path | str | None = None) -> None:
        """Open the log file for today and write the startup entry."""
        self._log_dir = Path(log_dir or os.environ.get("DOTDECODER_LOG_DIR", "logs"))
        self._lock = threading.Lock()
        self._file: Optional[Any] = None
        self._current_date: str = ""
        self._open_file()
        self._write_startup()

    @property
    def log_dir(self) -> Path:
        """Directory receiving the JSONL files."""
        return self._log_dir

    # ──────────────────────────────────────────
    # Public logging methods
    # ──────────────────────────────────────────

    def debug(self, phase: str, event: str, data: Optional[dict] = None) -> None:
        """Write a DEBUG-level structured log entry."""
        self._write("DEBUG", phase, event, data)

    def info(self, phase: str, event: str, data: Optional[dict] = None) -> None:
        """
        Write an INFO-level structured log entry.

        Args:
            phase: Subsystem (e.g. ``'codec'``, ``'gesture'``, ``'web'``).
            event: Short event identifier (e.g. ``'reset'``).
            data: Optional dict of additional key-value context.
        """
        self._write("INFO", phase, event, data)

    def warn(self, phase: str, event: str, data: Optional[dict] = None) -> None:
        """Write a WARN-level entry and mirror to stderr via stdlib logging."""
        clean = self._write("WARN", phase, event, data)
        _stdlib.warning("[%s] %s | %s", phase, event, clean)

    def error(self, phase: str, event: str, data: Optional[dict] = None) -> None:
        """Write an ERROR-level entry and mirror to stderr via stdlib logging."""
        clean = self._write("ERROR", phase, event, data)
        _stdlib.error("[%s] %s | %s", phase, event, clean)

    def critical(self, phase: str, event: str, data: Optional[dict] = None) -> None:
        """Write a CRITICAL-level entry and mirror to stderr via stdlib logging."""
        clean = self._write("CRITICAL", phase, event, data)
        _stdlib.critical("[%s] %s | %s", phase, event, clean)

    def perf(
        self,
        phase: str,
        event: str,
        latency_ms: float,
        data: Optional[dict] = None,
    ) -> None:
        """
        Write a PERF-level entry for latency tracking.

        Args:
            phase: Subsystem the measurement belongs to.
            event: What was measured (e.g. ``'wordlist_loaded'``).
            latency_ms: Measured latency in milliseconds.
            data: Optional additional context dict.
        """
        self._write("PERF", phase, event, data, latency_ms=latency_ms)

    def flush(self) -> None:
        """Flush the underlying file buffer immediately."""
        with self._lock:
            if self._file and not self._file.closed:
                self._file.flush()

    # ──────────────────────────────────────────
    # Internal helpers
    # ──────────────────────────────────────────

    def _write(
        self,
        level: str,
        phase: str,
        event: str,
        data: Optional[dict],
        latency_ms: Optional[float] = None,
    ) -> dict:
        """
        Scrub, serialise and append one JSON line to the log file.

        Returns:
            The redacted payload, for mirroring.
        """
        now = datetime.now(tz=timezone.utc)
        clean = _redact(data)
        record: dict[str, Any] = {
            "timestamp_iso": now.isoformat(),
            "level": level,
            "phase": phase,
            "event": event,
            "data": clean,
        }
        if latency_ms is not None:
            record["latency_ms"] = round(latency_ms, 3)

        line = json.dumps(record, ensure_ascii=False, separators=(",", ":"), default=str)

        with self._lock:
            self._rotate_if_needed(now)
            if self._file and not self._file.closed:
                self._file.write(line + "\n")
                self._file.flush()
        return clean

    def _rotate_if_needed(self, now: datetime) -> None:
        """
        Open a new log file if the calendar date has changed.

        Called inside ``self._lock`` — do not call from outside.
        """
        today = now.strftime("%Y-%m-%d")
        if today != self._current_date:
            if self._file and not self._file.closed:
                self._file.close()
            self._current_date = today
            self._log_dir.mkdir(parents=True, exist_ok=True)
            log_path = self._log_dir / f"dotdecoder_{today}.jsonl"
            self._file = open(log_path, "a", encoding="utf-8", buffering=1)  # noqa: WPS515

    def _open_file(self) -> None:
        """Open the log file for today's date (called once on init)."""
        now = datetime.now(tz=timezone.utc)
        with self._lock:
            self._rotate_if_needed(now)

    def _write_startup(self) -> None:
        """Write a startup entry with Python version and platform."""
        self.info(
            phase="system",
            event="startup",
            data={
                "python_version": sys.version,
                "platform": platform.platform(),
                "timestamp_local": datetime.now().isoformat(),
            },
        )


# ──────────────────────────────────────────────────────────────
# Singleton accessor
# ──────────────────────────────────────────────────────────────

def get_logger() -> DDLogger:
    """
    Return the singleton :class:`DDLogger` instance.

    Thread-safe: the first call creates the instance; subsequent calls
    return the same object without acquiring the creation lock.
    """
    global _instance
    if _instance is None:
        with _instance_lock:
            if _instance is None:
                _instance = DDLogger()
    return _instance
