"""
core/fsm.py — Drag-phase finite state machine for DotDecoder.

Thread-safe FSM with an explicit validated transition map, per-phase
enter/exit hooks, transition history (last 50), and logging. The gesture
controller drives it; nothing else writes to it.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from core.constants import C, DragPhase

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────
# Custom exception
# ──────────────────────────────────────────────────────────────

class InvalidTransitionError(RuntimeError):
    """
    Raised when a requested phase change is not in the valid transition map.

    Args:
        from_phase: Current phase at the time of the illegal attempt.
        to_phase: Requested (invalid) target phase.
        reason: Caller-supplied reason string.
    """

    def __init__(
        self,
        from_phase: DragPhase,
        to_phase: DragPhase,
        reason: str = "",
    ) -> None:
        self.from_phase = from_phase
        self.to_phase = to_phase
        self.reason = reason
        super().__init__(
            f"Invalid transition {from_phase.value} → {to_phase.value}"
            + (f" (reason: {reason})" if reason else "")
        )


# ──────────────────────────────────────────────────────────────
# Valid transition map — single source of truth
# ──────────────────────────────────────────────────────────────
#
# A fresh press may arrive while a drag is still open (release happened
# outside the window, a second finger landed, a hybrid device switched
# backends), so every drag phase may restart into any drag phase.
# IDLE → IDLE is not a transition: ending a drag that never started is
# handled by the caller.

_VALID_TRANSITIONS: dict[DragPhase, list[DragPhase]] = {
    DragPhase.IDLE: [
        DragPhase.MOUSE_DRAG,
        DragPhase.TOUCH_DRAG,
    ],
    DragPhase.MOUSE_DRAG: [
        DragPhase.IDLE,
        DragPhase.MOUSE_DRAG,
        DragPhase.TOUCH_DRAG,
    ],
    DragPhase.TOUCH_DRAG: [
        DragPhase.IDLE,
        DragPhase.TOUCH_DRAG,
        DragPhase.MOUSE_DRAG,
    ],
}


class DragFSM:
    """
    Finite state machine tracking which input backend owns the current drag.

    Enforces :data:`_VALID_TRANSITIONS`; illegal transitions raise
    :class:`InvalidTransitionError` immediately. The last
    :attr:`~core.constants.DecoderConstants.MAX_PHASE_HISTORY` transitions
    are kept in :meth:`get_history`.

    Args:
        on_transition: Optional callback invoked after every successful
            transition with signature ``(from_phase, to_phase, reason)``.
    """

    def __init__(
        self,
        on_transition: Callable[[DragPhase, DragPhase, str], None] | None = None,
    ) -> None:
        self._phase: DragPhase = DragPhase.IDLE
        self._lock = threading.Lock()
        self._history: list[dict] = []
        self._external_callback = on_transition

    # ──────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────

    @property
    def current_phase(self) -> DragPhase:
        """Return the current phase (thread-safe read)."""
        with self._lock:
            return self._phase

    @property
    def dragging(self) -> bool:
        """True while any drag phase is active."""
        return self.current_phase is not DragPhase.IDLE

    def transition(self, new_phase: DragPhase, reason: str = "") -> None:
        """
        Attempt a validated phase transition.

        Fires ``_on_exit_<from>`` then ``_on_enter_<to>`` hooks, records the
        transition in history and notifies the external callback.

        Args:
            new_phase: Target phase.
            reason: Short label for logs/history (e.g. ``'pointer_down'``).

        Raises:
            InvalidTransitionError: If the transition is not in the valid map.
        """
        with self._lock:
            from_phase = self._phase
            if new_phase not in _VALID_TRANSITIONS.get(from_phase, []):
                raise InvalidTransitionError(from_phase, new_phase, reason)
            self._fire("exit", from_phase)
            self._phase = new_phase
            self._record(from_phase, new_phase, reason)

        logger.debug(
            "Drag: %s → %s%s",
            from_phase.value,
            new_phase.value,
            f" [{reason}]" if reason else "",
        )
        self._fire("enter", new_phase)

        if self._external_callback is not None:
            try:
                self._external_callback(from_phase, new_phase, reason)
            except Exception as exc:  # noqa: BLE001
                logger.warning("Drag FSM external callback raised: %s", exc)

    def reset(self) -> None:
        """
        Force the FSM back to IDLE unconditionally.

        Bypasses the transition map, so it is safe from IDLE as well.
        """
        with self._lock:
            from_phase = self._phase
            self._fire("exit", from_phase)
            self._phase = DragPhase.IDLE
            self._record(from_phase, DragPhase.IDLE, "RESET")
        logger.debug("Drag: RESET from %s → IDLE", from_phase.value)
        self._fire("enter", DragPhase.IDLE)

    def can_transition(self, target: DragPhase) -> bool:
        """Return True if ``target`` is reachable from the current phase."""
        return target in _VALID_TRANSITIONS.get(self.current_phase, [])

    def get_history(self) -> list[dict]:
        """
        Return a copy of the retained transition records, oldest first.

        Each record has keys ``from``, ``to``, ``reason`` and ``timestamp``.
        """
        with self._lock:
            return list(self._history)

    # ──────────────────────────────────────────
    # Enter / exit hooks — override in subclass
    # ──────────────────────────────────────────

    def _on_enter_idle(self) -> None:
        logger.debug("Drag enter: IDLE — surface at rest")

    def _on_enter_mouse_drag(self) -> None:
        logger.debug("Drag enter: MOUSE_DRAG")

    def _on_enter_touch_drag(self) -> None:
        logger.debug("Drag enter: TOUCH_DRAG")

    # ──────────────────────────────────────────
    # Internal helpers
    # ──────────────────────────────────────────

    def _record(self, from_phase: DragPhase, to_phase: DragPhase, reason: str) -> None:
        """Append a history record. Caller holds ``self._lock``."""
        self._history.append({
            "from": from_phase.value,
            "to": to_phase.value,
            "reason": reason,
            "timestamp": time.time(),
        })
        if len(self._history) > C.MAX_PHASE_HISTORY:
            self._history.pop(0)

    def _fire(self, hook: str, phase: DragPhase) -> None:
        """
        Dispatch to ``_on_<hook>_<phase>`` if a subclass defines it.

        Hooks run while ``self._lock`` may be held — they must not call
        :meth:`transition` or :attr:`current_phase`.
        """
        method_name = f"_on_{hook}_{phase.value.lower()}"
        method = getattr(self, method_name, None)
        if callable(method):
            try:
                method()
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s hook raised: %s", method_name, exc)

    def __repr__(self) -> str:
        with self._lock:
            last = self._history[-1] if self._history else None
            phase = self._phase.value
        last_str = f"{last['from']}→{last['to']}" if last else "none"
        return f"DragFSM(phase={phase}, last={last_str})"
