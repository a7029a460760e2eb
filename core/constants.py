"""
core/constants.py — All system constants for DotDecoder.

Single frozen dataclass with typed constant groups: bit-vector geometry,
dictionary size, and gesture timing. The enums for drag phases, gesture
event kinds and word-match states live here as well so every layer shares
one definition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


# ──────────────────────────────────────────────────────────────
# Enums
# ──────────────────────────────────────────────────────────────

class DragPhase(Enum):
    """Phases of the pointer drag state machine."""

    IDLE = "IDLE"
    MOUSE_DRAG = "MOUSE_DRAG"
    TOUCH_DRAG = "TOUCH_DRAG"


class GestureKind(Enum):
    """Raw pointer / touch primitives accepted by the gesture controller."""

    POINTER_DOWN = "pointer_down"
    POINTER_ENTER = "pointer_enter"
    POINTER_UP = "pointer_up"
    POINTER_LEAVE = "pointer_leave"
    TOUCH_START = "touch_start"
    TOUCH_MOVE = "touch_move"
    TOUCH_END = "touch_end"
    TOUCH_CANCEL = "touch_cancel"


class MatchState(Enum):
    """Outcome of evaluating typed text against the dictionary."""

    EMPTY = "EMPTY"
    EXACT = "EXACT"
    UNIQUE_PREFIX = "UNIQUE_PREFIX"
    AMBIGUOUS = "AMBIGUOUS"
    NO_MATCH = "NO_MATCH"


# ──────────────────────────────────────────────────────────────
# Frozen constants dataclass
# ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DecoderConstants:
    """
    Frozen dataclass holding all DotDecoder system constants.

    Use the class attributes directly — do not instantiate this class.

    Example::

        from core.constants import DecoderConstants as C

        print(C.BIT_COUNT)          # 12
        print(C.MOUSE_LOCKOUT_MS)   # 600.0
    """

    # ── Bit vector ────────────────────────────────────────────
    BIT_COUNT: ClassVar[int] = 12
    """Number of dots on the board; index 0 is the most significant bit."""

    MAX_VALUE: ClassVar[int] = (1 << 12) - 1
    """Largest value a full bit vector can express (4095)."""

    # ── Dictionary ────────────────────────────────────────────
    DICTIONARY_SIZE: ClassVar[int] = 2048
    """Number of entries in the BIP-39 wordlist."""

    DICTIONARY_LANGUAGE: ClassVar[str] = "english"
    """Language passed to ``mnemonic.Mnemonic`` for the default wordlist."""

    # ── Gesture timing (milliseconds) ─────────────────────────
    MOUSE_LOCKOUT_MS: ClassVar[float] = 600.0
    """
    Window after a touch-start during which mouse-originated events are
    dropped. Fixed timer, not device detection; overridable in config.
    """

    # ── History ───────────────────────────────────────────────
    MAX_PHASE_HISTORY: ClassVar[int] = 50
    """Number of drag-phase transitions retained by the FSM."""


#: Convenience alias — ``from core.constants import C``
C = DecoderConstants

REDACTED: str = "[redacted]"
"""Placeholder written to logs in place of seed-derived values."""
