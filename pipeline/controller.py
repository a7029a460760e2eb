"""
pipeline/controller.py — DecoderController: single owner of the board state.

Wires the gesture controller to the codec and keeps every piece of mutable
UI state (dots, typed text, matched word, validity) in one object::

    gestures ─► GestureController ─► toggle_bit ─► encode ──┐
                                                            ├─► DecoderState ─► EventBus
    typed text ─────────────────────► set_text ─► match ────┘

An internal EventBus lets the web surface subscribe to state changes
without holding references to the internals.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional

from core.config import DecoderConfig
from core.constants import C, GestureKind
from core.logger import get_logger
from encoder.bit_codec import (
    BitVector,
    DecodeResult,
    MatchResult,
    empty_bits,
    encode,
    match_word,
    normalize_text,
)
from encoder.wordlist import Wordlist, get_default_wordlist, load_wordlist
from input.gesture_controller import ControlResolver, GestureController

_log = get_logger()

# ── EventBus event-name constants ─────────────────────────────────────────────

ON_STATE_CHANGED = "ON_STATE_CHANGED"
"""Fired after any mutation with the new :meth:`DecoderState.snapshot`."""

ON_RESET = "ON_RESET"
"""Fired after every board wipe (reset or cleared text) with the reason."""


# ── State ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DecoderState:
    """
    Everything the UI renders.

    Attributes:
        bits: Current dot pattern.
        input_text: Contents of the text field.
        matched_word: Word the current state resolves to, or ``""``.
        numeric_value: Unsigned value of ``bits``.
        is_valid: True when ``matched_word`` is a real dictionary hit.
    """

    bits: BitVector = field(default_factory=empty_bits)
    input_text: str = ""
    matched_word: str = ""
    numeric_value: int = 0
    is_valid: bool = False

    def snapshot(self) -> Dict[str, Any]:
        """
        JSON-safe view for the UI.

        ``word_number`` is present only when valid; ``completion_hint`` is
        the matched word when the typed text is a shorter prefix of it.
        """
        hint = (
            self.matched_word
            if self.is_valid and self.input_text != self.matched_word
            else None
        )
        return {
            "bits": [int(b) for b in self.bits],
            "input_text": self.input_text,
            "matched_word": self.matched_word,
            "numeric_value": self.numeric_value,
            "word_number": self.numeric_value if self.is_valid else None,
            "is_valid": self.is_valid,
            "completion_hint": hint,
        }


# ── DecoderController ─────────────────────────────────────────────────────────

class DecoderController:
    """
    Orchestrates gestures, typed text and the codec around one state object.

    Args:
        wordlist: Dictionary to decode against. Loaded from
            ``config.dictionary`` (or the bundled list) when omitted.
        config: Root configuration; built-in defaults when omitted.
        resolver: Hit-tester for touch-move events.
        clock: Millisecond clock forwarded to the gesture controller.

    Example::

        ctrl = DecoderController()
        ctrl.subscribe(ON_STATE_CHANGED, lambda s: print(s["word_number"]))
        ctrl.handle_gesture(GestureKind.TOUCH_START, index=11)
        ctrl.handle_gesture(GestureKind.TOUCH_END)
        ctrl.state.matched_word   # 'abandon'
    """

    def __init__(
        self,
        wordlist: Optional[Wordlist] = None,
        config: Optional[DecoderConfig] = None,
        resolver: Optional[ControlResolver] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._config = config if config is not None else DecoderConfig()
        if wordlist is None:
            path = self._config.dictionary.resolved_path
            wordlist = load_wordlist(path) if path is not None else get_default_wordlist()
        self._wordlist = wordlist

        self._lock = threading.RLock()
        self._state = DecoderState()
        self._gesture = GestureController(
            on_toggle=self.toggle_bit,
            resolver=resolver,
            mouse_lockout_ms=self._config.gesture.mouse_lockout_ms,
            clock=clock,
        )
        self._subscribers: Dict[str, List[Callable[[Dict[str, Any]], None]]] = (
            defaultdict(list)
        )

        _log.info("pipeline", "controller_ready", {
            "wordlist_size": len(self._wordlist),
            "mouse_lockout_ms": self._gesture.mouse_lockout_ms,
        })

    # ── Accessors ─────────────────────────────────────────────────────────────

    @property
    def state(self) -> DecoderState:
        with self._lock:
            return self._state

    @property
    def wordlist(self) -> Wordlist:
        return self._wordlist

    @property
    def gesture(self) -> GestureController:
        return self._gesture

    def snapshot(self) -> Dict[str, Any]:
        return self.state.snapshot()

    def decode_result(self) -> DecodeResult:
        """Re-derive the codec view of the current dots."""
        return encode(self.state.bits, self._wordlist)

    # ── EventBus ──────────────────────────────────────────────────────────────

    def subscribe(self, event: str, callback: Callable[[Dict[str, Any]], None]) -> None:
        """
        Register *callback* to receive payloads whenever *event* is published.

        Callbacks run synchronously in registration order; exceptions are
        logged and never reach the caller.
        """
        self._subscribers[event].append(callback)

    def publish(self, event: str, data: Dict[str, Any]) -> None:
        """Dispatch *event* to all registered callbacks with payload *data*."""
        for cb in self._subscribers.get(event, []):
            try:
                cb(data)
            except Exception as exc:  # noqa: BLE001
                _log.error("pipeline", "event_callback_error", {
                    "event": event,
                    "error": str(exc),
                })

    # ── Mutations ─────────────────────────────────────────────────────────────

    def handle_gesture(self, kind: GestureKind, index: Any = None, point: Any = None) -> bool:
        """Feed one raw pointer/touch event through the gesture controller."""
        with self._lock:
            return self._gesture.handle(kind, index=index, point=point)

    def toggle_bit(self, index: int) -> DecoderState:
        """
        Flip one dot and re-derive the word.

        A value of zero clears the text; a value inside the dictionary writes
        the word into the text field; a value past the dictionary clears the
        match but leaves whatever was typed. Indices outside ``[0, 11]``
        leave the state untouched.
        """
        if isinstance(index, bool) or not isinstance(index, int) \
                or not 0 <= index < C.BIT_COUNT:
            return self.state

        with self._lock:
            bits = list(self._state.bits)
            bits[index] = not bits[index]
            result = encode(bits, self._wordlist)

            if result.numeric_value == 0:
                new_state = DecoderState(bits=tuple(bits))
            elif result.is_valid and result.word is not None:
                new_state = DecoderState(
                    bits=tuple(bits),
                    input_text=result.word,
                    matched_word=result.word,
                    numeric_value=result.numeric_value,
                    is_valid=True,
                )
            else:
                new_state = replace(
                    self._state,
                    bits=tuple(bits),
                    matched_word="",
                    numeric_value=result.numeric_value,
                    is_valid=False,
                )
            self._state = new_state

        _log.debug("pipeline", "bit_toggled", {"index": index, "is_valid": new_state.is_valid})
        self.publish(ON_STATE_CHANGED, new_state.snapshot())
        return new_state

    def set_text(self, raw: str) -> MatchResult:
        """
        Re-evaluate the text field.

        Empty text wipes the board (dots, text, match) but leaves the
        gesture session alone, so a tap's mouse lockout still holds.
        Otherwise the text is kept as typed (normalised) and the dots follow
        the match, all-false when unresolved.
        """
        text = normalize_text(raw)
        if not text:
            self._wipe(reason="text_cleared", keep_gesture=True)
            return match_word(text, self._wordlist)

        match = match_word(text, self._wordlist)
        with self._lock:
            if match.word is not None and match.word_number is not None:
                self._state = DecoderState(
                    bits=match.bits,
                    input_text=text,
                    matched_word=match.word,
                    numeric_value=match.word_number,
                    is_valid=True,
                )
            else:
                self._state = DecoderState(input_text=text)
            new_state = self._state

        _log.debug("pipeline", "text_matched", {"text": text, "state": match.state.value})
        self.publish(ON_STATE_CHANGED, new_state.snapshot())
        return match

    def reset_all(self, reason: str = "manual") -> DecoderState:
        """
        Wipe dots, text, match and gesture session. Idempotent.

        Args:
            reason: Label for logs and the ``ON_RESET`` payload.
        """
        return self._wipe(reason=reason, keep_gesture=False)

    def _wipe(self, reason: str, keep_gesture: bool) -> DecoderState:
        with self._lock:
            self._state = DecoderState()
            if not keep_gesture:
                self._gesture.reset()
            new_state = self._state

        _log.info("pipeline", "reset", {"reason": reason})
        self.publish(ON_RESET, {"reason": reason})
        self.publish(ON_STATE_CHANGED, new_state.snapshot())
        return new_state
