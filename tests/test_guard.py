"""
tests/test_guard.py — pytest unit tests for safety.exposure_guard.
"""

from __future__ import annotations

import pytest

from core.constants import GestureKind
from encoder.wordlist import Wordlist
from pipeline.controller import DecoderController, DecoderState
from safety.exposure_guard import ExposureGuard, HostSignal


@pytest.fixture()
def reasons() -> list[str]:
    return []


@pytest.fixture()
def guard(reasons: list[str]) -> ExposureGuard:
    return ExposureGuard(on_reset=reasons.append)


class TestWipeSignals:

    @pytest.mark.parametrize("signal", [
        HostSignal.VISIBILITY_HIDDEN,
        HostSignal.PAGE_HIDE,
        HostSignal.BEFORE_UNLOAD,
        HostSignal.ONLINE,
    ])
    def test_wipe(self, guard: ExposureGuard, reasons: list[str], signal: HostSignal) -> None:
        assert guard.notify(signal) is True
        assert reasons == [signal.value]

    @pytest.mark.parametrize("signal", [HostSignal.VISIBILITY_VISIBLE, HostSignal.OFFLINE])
    def test_no_wipe(self, guard: ExposureGuard, reasons: list[str], signal: HostSignal) -> None:
        assert guard.notify(signal) is False
        assert reasons == []


class TestNetworkLock:

    def test_locked_until_host_reports(self, guard: ExposureGuard) -> None:
        assert guard.online is None
        assert guard.locked

    def test_offline_unlocks(self, guard: ExposureGuard) -> None:
        guard.notify(HostSignal.OFFLINE)
        assert guard.online is False
        assert not guard.locked

    def test_online_relocks(self, guard: ExposureGuard) -> None:
        guard.notify(HostSignal.OFFLINE)
        guard.notify(HostSignal.ONLINE)
        assert guard.online is True
        assert guard.locked

    def test_lock_disabled(self, reasons: list[str]) -> None:
        guard = ExposureGuard(on_reset=reasons.append, require_offline=False)
        assert not guard.locked
        guard.notify(HostSignal.ONLINE)
        assert not guard.locked
        # Coming online still wipes
        assert reasons == ["online"]


class TestWithController:

    def test_hidden_page_wipes_board(self, tiny_wordlist: Wordlist) -> None:
        ctrl = DecoderController(wordlist=tiny_wordlist)
        guard = ExposureGuard(on_reset=lambda reason: ctrl.reset_all(reason=reason))
        ctrl.set_text("banana")
        ctrl.handle_gesture(GestureKind.POINTER_DOWN, index=0)
        guard.notify(HostSignal.VISIBILITY_HIDDEN)
        assert ctrl.state == DecoderState()
        assert not ctrl.gesture.session.drag_active
