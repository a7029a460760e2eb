"""
input/gesture_controller.py — Pointer/touch fusion into single-dot toggles.

Mouse drags, touch drags and plain taps all arrive here as raw primitives
and leave as "toggle dot i" commands. Two rules keep the stream clean:

* A dot toggles once per visit. Sweeping across it toggles it; hovering on
  it does nothing more; leaving and coming back toggles it again.
* After every touch-start, mouse-originated events are dropped for a fixed
  window (600 ms by default). Touch screens synthesise a mouse event once
  the finger lifts, and without the window that event would toggle a
  second time. This is a timer, not device detection.

Touch-move does not fire per element, so the controller asks an injected
:class:`ControlResolver` which dot (if any) lies under the finger.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from core.constants import C, DragPhase, GestureKind
from core.fsm import DragFSM

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────
# Hit-testing protocol
# ──────────────────────────────────────────────────────────────

@runtime_checkable
class ControlResolver(Protocol):
    """Minimal interface for "which dot is under this point"."""

    def resolve(self, point: Any) -> Optional[int]:
        """Return the dot index under *point*, or ``None`` for dead space."""
        ...


class DataIndexResolver:
    """
    Resolver for browser hit-tests.

    The page runs ``elementFromPoint(x, y).closest('button[data-index]')``
    and reports the ``data-index`` attribute (or ``null``). This parses it.
    """

    def resolve(self, point: Any) -> Optional[int]:
        if point is None or isinstance(point, bool):
            return None
        try:
            index = int(str(point).strip())
        except ValueError:
            return None
        return index if 0 <= index < C.BIT_COUNT else None


# ──────────────────────────────────────────────────────────────
# Session state
# ──────────────────────────────────────────────────────────────

@dataclass
class InputSession:
    """
    Per-interaction gesture state.

    Attributes:
        active_index: Last dot toggled in this drag, or ``None``.
        drag_active: True between a press and its release.
        mouse_locked_until_ms: Clock reading before which mouse events
            are dropped. Survives the end of a touch drag on purpose.
    """

    active_index: Optional[int] = None
    drag_active: bool = False
    mouse_locked_until_ms: float = 0.0


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


# ──────────────────────────────────────────────────────────────
# GestureController
# ──────────────────────────────────────────────────────────────

class GestureController:
    """
    Deterministic gesture → toggle state machine.

    Every handler returns ``True`` iff it emitted a toggle. Indices outside
    ``[0, 11]`` and unresolved hit-tests are silently ignored.

    Args:
        on_toggle: Sink receiving each dot index to flip.
        resolver: Hit-tester used by :meth:`touch_move`. Defaults to
            :class:`DataIndexResolver`.
        mouse_lockout_ms: Mouse suppression window after a touch-start.
        clock: Zero-argument callable returning milliseconds.
    """

    def __init__(
        self,
        on_toggle: Callable[[int], None],
        resolver: Optional[ControlResolver] = None,
        mouse_lockout_ms: float = C.MOUSE_LOCKOUT_MS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._on_toggle = on_toggle
        self._resolver: ControlResolver = resolver if resolver is not None else DataIndexResolver()
        self._lockout_ms = float(mouse_lockout_ms)
        self._clock = clock if clock is not None else _monotonic_ms
        self._session = InputSession()
        self._fsm = DragFSM()

        self._dispatch: dict[GestureKind, Callable[..., bool]] = {
            GestureKind.POINTER_DOWN: lambda index, point: self.pointer_down(index),
            GestureKind.POINTER_ENTER: lambda index, point: self.pointer_enter(index),
            GestureKind.TOUCH_START: lambda index, point: self.touch_start(index),
            GestureKind.TOUCH_MOVE: lambda index, point: self.touch_move(point),
            GestureKind.POINTER_UP: lambda index, point: self.pointer_up(),
            GestureKind.POINTER_LEAVE: lambda index, point: self.pointer_leave(),
            GestureKind.TOUCH_END: lambda index, point: self.touch_end(),
            GestureKind.TOUCH_CANCEL: lambda index, point: self.touch_cancel(),
        }

    # ──────────────────────────────────────────
    # Introspection
    # ──────────────────────────────────────────

    @property
    def session(self) -> InputSession:
        """A copy of the current session state."""
        s = self._session
        return InputSession(s.active_index, s.drag_active, s.mouse_locked_until_ms)

    @property
    def phase(self) -> DragPhase:
        return self._fsm.current_phase

    @property
    def fsm(self) -> DragFSM:
        return self._fsm

    @property
    def mouse_lockout_ms(self) -> float:
        return self._lockout_ms

    def mouse_locked(self) -> bool:
        """True while mouse events are being discarded."""
        return self._clock() < self._session.mouse_locked_until_ms

    # ──────────────────────────────────────────
    # Press handlers
    # ──────────────────────────────────────────

    def pointer_down(self, index: Any) -> bool:
        """Mouse button pressed over dot *index*."""
        if self.mouse_locked():
            logger.debug("pointer_down dropped: inside touch lockout")
            return False
        if not self._valid(index):
            return False
        self._begin(DragPhase.MOUSE_DRAG, "pointer_down")
        return self._enter(index)

    def touch_start(self, index: Any) -> bool:
        """Finger landed on dot *index*; arms the mouse lockout."""
        if not self._valid(index):
            return False
        self._session.mouse_locked_until_ms = self._clock() + self._lockout_ms
        self._begin(DragPhase.TOUCH_DRAG, "touch_start")
        return self._enter(index)

    # ──────────────────────────────────────────
    # Move handlers
    # ──────────────────────────────────────────

    def pointer_enter(self, index: Any) -> bool:
        """Mouse cursor entered dot *index*; toggles only during a drag."""
        if self.mouse_locked():
            logger.debug("pointer_enter dropped: inside touch lockout")
            return False
        if not self._session.drag_active or not self._valid(index):
            return False
        return self._enter(index)

    def touch_move(self, point: Any) -> bool:
        """Finger moved; hit-test *point* and treat a dot as a drag-enter."""
        if not self._session.drag_active:
            return False
        index = self._resolver.resolve(point)
        if index is None or not self._valid(index):
            return False
        return self._enter(index)

    # ──────────────────────────────────────────
    # Release handlers
    # ──────────────────────────────────────────

    def pointer_up(self) -> bool:
        return self._end("pointer_up")

    def pointer_leave(self) -> bool:
        return self._end("pointer_leave")

    def touch_end(self) -> bool:
        return self._end("touch_end")

    def touch_cancel(self) -> bool:
        return self._end("touch_cancel")

    # ──────────────────────────────────────────
    # Dispatch / reset
    # ──────────────────────────────────────────

    def handle(self, kind: GestureKind, index: Any = None, point: Any = None) -> bool:
        """
        Route one event by kind.

        Args:
            kind: Which primitive occurred.
            index: Dot index for press / enter events.
            point: Hit-test payload for :attr:`GestureKind.TOUCH_MOVE`.
        """
        return self._dispatch[kind](index, point)

    def reset(self) -> None:
        """Return to the initial rest state, lockout included."""
        self._session = InputSession()
        self._fsm.reset()

    # ──────────────────────────────────────────
    # Internal helpers
    # ──────────────────────────────────────────

    @staticmethod
    def _valid(index: Any) -> bool:
        return (
            isinstance(index, int)
            and not isinstance(index, bool)
            and 0 <= index < C.BIT_COUNT
        )

    def _begin(self, phase: DragPhase, reason: str) -> None:
        self._fsm.transition(phase, reason=reason)
        self._session.drag_active = True
        self._session.active_index = None

    def _enter(self, index: int) -> bool:
        if index == self._session.active_index:
            return False
        self._session.active_index = index
        self._on_toggle(index)
        return True

    def _end(self, reason: str) -> bool:
        if self._fsm.can_transition(DragPhase.IDLE):
            self._fsm.transition(DragPhase.IDLE, reason=reason)
        self._session.drag_active = False
        self._session.active_index = None
        return False
