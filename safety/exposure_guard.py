"""
safety/exposure_guard.py — Wipe and lock the board when the seed could leak.

The host page reports lifecycle and network signals. Hiding the page,
unloading it, or coming online wipes all state through the injected reset
callback. While the host is online (or has not yet said it is offline)
the guard reports itself locked and the web surface refuses input.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Callable, Optional

from core.logger import get_logger

_log = get_logger()


class HostSignal(Enum):
    """Lifecycle / network notifications from the host page."""

    VISIBILITY_HIDDEN = "visibility_hidden"
    VISIBILITY_VISIBLE = "visibility_visible"
    PAGE_HIDE = "pagehide"
    BEFORE_UNLOAD = "beforeunload"
    ONLINE = "online"
    OFFLINE = "offline"


_WIPE_SIGNALS: frozenset[HostSignal] = frozenset({
    HostSignal.VISIBILITY_HIDDEN,
    HostSignal.PAGE_HIDE,
    HostSignal.BEFORE_UNLOAD,
    HostSignal.ONLINE,
})


class ExposureGuard:
    """
    Maps host signals onto the controller's reset operation.

    Args:
        on_reset: Called with the signal value as its reason whenever a
            wipe signal arrives.
        require_offline: When False the guard never locks (development).
    """

    def __init__(
        self,
        on_reset: Callable[[str], object],
        require_offline: bool = True,
    ) -> None:
        self._on_reset = on_reset
        self._require_offline = require_offline
        self._online: Optional[bool] = None
        self._lock = threading.Lock()

    @property
    def online(self) -> Optional[bool]:
        """Last reported network state; ``None`` until the host reports."""
        return self._online

    @property
    def locked(self) -> bool:
        """True while input must be refused."""
        return self._require_offline and self._online is not False

    def notify(self, signal: HostSignal) -> bool:
        """
        Apply one host signal.

        Returns:
            True if the signal wiped the board.
        """
        with self._lock:
            if signal is HostSignal.ONLINE:
                self._online = True
            elif signal is HostSignal.OFFLINE:
                self._online = False
            wipe = signal in _WIPE_SIGNALS

        if wipe:
            if signal is HostSignal.ONLINE:
                _log.warn("guard", "network_detected", {"require_offline": self._require_offline})
            self._on_reset(signal.value)
        _log.info("guard", "host_signal", {
            "signal": signal.value,
            "wiped": wipe,
            "locked": self.locked,
        })
        return wipe
