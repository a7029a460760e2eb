"""
tests/conftest.py — Shared fixtures for the DotDecoder test suite.

The JSONL logger is a process-wide singleton created on first import, so
its directory is redirected to a scratch folder before any project module
is imported.
"""

from __future__ import annotations

import os
import tempfile

os.environ.setdefault("DOTDECODER_LOG_DIR", tempfile.mkdtemp(prefix="dotdecoder_logs_"))

import pytest  # noqa: E402

from encoder.wordlist import Wordlist  # noqa: E402


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, start_ms: float = 10_000.0) -> None:
        self.now = start_ms

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def tiny_wordlist() -> Wordlist:
    """Three-word dictionary: value 1..3 valid, 4..4095 past the end."""
    return Wordlist(["apple", "apricot", "banana"], expected_size=None)
