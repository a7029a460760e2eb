"""
tests/test_controller.py — Integration tests for pipeline.controller.

Gestures, typed text and resets are driven through the DecoderController
the way the web surface drives it. Most tests use a three-word dictionary
so values past the end of the list are easy to reach.
"""

from __future__ import annotations

import unittest

import pytest

from core.config import DecoderConfig, GestureConfig
from core.constants import GestureKind, MatchState
from encoder.bit_codec import empty_bits, number_to_bits
from encoder.wordlist import Wordlist, get_default_wordlist
from pipeline.controller import ON_RESET, ON_STATE_CHANGED, DecoderController, DecoderState


@pytest.fixture()
def ctrl(tiny_wordlist: Wordlist, clock) -> DecoderController:
    return DecoderController(wordlist=tiny_wordlist, clock=clock)


# ──────────────────────────────────────────────────────────────
# Toggling dots
# ──────────────────────────────────────────────────────────────

class TestToggleBit:

    def test_valid_value_fills_text(self, ctrl: DecoderController) -> None:
        state = ctrl.toggle_bit(11)
        assert state.numeric_value == 1
        assert state.matched_word == "apple"
        assert state.input_text == "apple"
        assert state.is_valid

    def test_toggle_back_to_zero_clears(self, ctrl: DecoderController) -> None:
        ctrl.toggle_bit(11)
        state = ctrl.toggle_bit(11)
        assert state == DecoderState()

    def test_value_past_dictionary_keeps_text(self, ctrl: DecoderController) -> None:
        ctrl.toggle_bit(10)
        ctrl.toggle_bit(11)           # value 3 → banana
        state = ctrl.toggle_bit(9)    # value 7 → past the end
        assert state.numeric_value == 7
        assert not state.is_valid
        assert state.matched_word == ""
        assert state.input_text == "banana"
        assert state.bits == number_to_bits(7)

    @pytest.mark.parametrize("index", [-1, 12, 99, True, "3", None])
    def test_out_of_range_index_is_noop(self, ctrl: DecoderController, index) -> None:
        published: list[dict] = []
        ctrl.subscribe(ON_STATE_CHANGED, published.append)
        ctrl.toggle_bit(11)
        before = ctrl.state
        assert ctrl.toggle_bit(index) == before
        assert ctrl.state == before
        assert len(published) == 1

    def test_typed_text_survives_invalid_toggle(self, ctrl: DecoderController) -> None:
        ctrl.set_text("zzz")
        state = ctrl.toggle_bit(0)
        assert state.input_text == "zzz"
        assert state.numeric_value == 2048
        assert not state.is_valid


# ──────────────────────────────────────────────────────────────
# Typing
# ──────────────────────────────────────────────────────────────

class TestSetText:

    def test_unique_prefix_sets_dots(self, ctrl: DecoderController) -> None:
        match = ctrl.set_text("apr")
        assert match.state is MatchState.UNIQUE_PREFIX
        state = ctrl.state
        assert state.input_text == "apr"
        assert state.matched_word == "apricot"
        assert state.bits == number_to_bits(2)
        assert state.is_valid

    def test_ambiguous_prefix_clears_dots(self, ctrl: DecoderController) -> None:
        ctrl.set_text("banana")
        ctrl.set_text("ap")
        state = ctrl.state
        assert state.input_text == "ap"
        assert state.bits == empty_bits()
        assert state.numeric_value == 0
        assert not state.is_valid

    def test_text_is_normalised(self, ctrl: DecoderController) -> None:
        ctrl.set_text("  BANANA ")
        assert ctrl.state.input_text == "banana"

    def test_empty_text_resets(self, ctrl: DecoderController) -> None:
        resets: list[dict] = []
        ctrl.subscribe(ON_RESET, resets.append)
        ctrl.set_text("apple")
        match = ctrl.set_text("   ")
        assert match.state is MatchState.EMPTY
        assert ctrl.state == DecoderState()
        assert resets == [{"reason": "text_cleared"}]

    def test_clearing_text_keeps_tap_lockout(self, ctrl: DecoderController, clock) -> None:
        ctrl.handle_gesture(GestureKind.TOUCH_START, index=11)
        ctrl.handle_gesture(GestureKind.TOUCH_END)
        clock.advance(100)
        ctrl.set_text("")
        assert ctrl.gesture.mouse_locked()
        clock.advance(100)
        ctrl.handle_gesture(GestureKind.POINTER_DOWN, index=11)
        assert ctrl.state == DecoderState()


# ──────────────────────────────────────────────────────────────
# Snapshot
# ──────────────────────────────────────────────────────────────

class TestSnapshot:

    def test_completion_hint_for_prefix(self, ctrl: DecoderController) -> None:
        ctrl.set_text("ban")
        snap = ctrl.snapshot()
        assert snap["completion_hint"] == "banana"
        assert snap["word_number"] == 3
        assert snap["bits"] == [0] * 10 + [1, 1]

    def test_no_hint_for_exact(self, ctrl: DecoderController) -> None:
        ctrl.set_text("banana")
        assert ctrl.snapshot()["completion_hint"] is None

    def test_no_word_number_when_invalid(self, ctrl: DecoderController) -> None:
        ctrl.toggle_bit(0)
        snap = ctrl.snapshot()
        assert snap["numeric_value"] == 2048
        assert snap["word_number"] is None
        assert snap["is_valid"] is False

    def test_decode_result(self, ctrl: DecoderController) -> None:
        ctrl.toggle_bit(10)
        assert ctrl.decode_result().word == "apricot"


# ──────────────────────────────────────────────────────────────
# Gestures through the controller
# ──────────────────────────────────────────────────────────────

class TestGestures:

    def test_touch_tap_with_synthetic_click(self, ctrl: DecoderController, clock) -> None:
        ctrl.handle_gesture(GestureKind.TOUCH_START, index=11)
        ctrl.handle_gesture(GestureKind.TOUCH_END)
        clock.advance(30)
        ctrl.handle_gesture(GestureKind.POINTER_DOWN, index=11)
        ctrl.handle_gesture(GestureKind.POINTER_UP)
        assert ctrl.state.matched_word == "apple"

    def test_touch_drag_sets_multiple_dots(self, ctrl: DecoderController) -> None:
        ctrl.handle_gesture(GestureKind.TOUCH_START, index=10)
        ctrl.handle_gesture(GestureKind.TOUCH_MOVE, point="11")
        ctrl.handle_gesture(GestureKind.TOUCH_END)
        assert ctrl.state.numeric_value == 3
        assert ctrl.state.matched_word == "banana"

    def test_lockout_window_from_config(self, tiny_wordlist: Wordlist, clock) -> None:
        config = DecoderConfig(gesture=GestureConfig(mouse_lockout_ms=100))
        ctrl = DecoderController(wordlist=tiny_wordlist, config=config, clock=clock)
        ctrl.handle_gesture(GestureKind.TOUCH_START, index=11)
        ctrl.handle_gesture(GestureKind.TOUCH_END)
        clock.advance(100)
        ctrl.handle_gesture(GestureKind.POINTER_DOWN, index=11)
        assert ctrl.state.numeric_value == 0


# ──────────────────────────────────────────────────────────────
# Reset
# ──────────────────────────────────────────────────────────────

class TestReset:

    def test_reset_restores_initial_state(self, ctrl: DecoderController) -> None:
        ctrl.handle_gesture(GestureKind.TOUCH_START, index=3)
        ctrl.set_text("apple")
        ctrl.reset_all()
        assert ctrl.state == DecoderState()
        session = ctrl.gesture.session
        assert session.active_index is None
        assert not session.drag_active
        assert not ctrl.gesture.mouse_locked()

    def test_reset_is_idempotent(self, ctrl: DecoderController) -> None:
        ctrl.toggle_bit(11)
        first = ctrl.reset_all()
        second = ctrl.reset_all()
        assert first == second == DecoderState()

    def test_reset_events(self, ctrl: DecoderController) -> None:
        events: list[tuple[str, dict]] = []
        ctrl.subscribe(ON_RESET, lambda d: events.append((ON_RESET, d)))
        ctrl.subscribe(ON_STATE_CHANGED, lambda d: events.append((ON_STATE_CHANGED, d)))
        ctrl.reset_all(reason="visibility_hidden")
        assert events[0] == (ON_RESET, {"reason": "visibility_hidden"})
        assert events[1][0] == ON_STATE_CHANGED
        assert events[1][1]["input_text"] == ""


# ──────────────────────────────────────────────────────────────
# EventBus
# ──────────────────────────────────────────────────────────────

class TestEventBus(unittest.TestCase):
    """Subscriber behaviour on the controller's EventBus."""

    def setUp(self) -> None:
        self.ctrl = DecoderController(
            wordlist=Wordlist(["apple", "apricot", "banana"], expected_size=None),
        )

    def test_state_change_published_on_toggle(self) -> None:
        seen: list[dict] = []
        self.ctrl.subscribe(ON_STATE_CHANGED, seen.append)
        self.ctrl.toggle_bit(11)
        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0]["matched_word"], "apple")

    def test_failing_subscriber_does_not_propagate(self) -> None:
        seen: list[dict] = []

        def _boom(_data: dict) -> None:
            raise RuntimeError("subscriber failure")

        self.ctrl.subscribe(ON_STATE_CHANGED, _boom)
        self.ctrl.subscribe(ON_STATE_CHANGED, seen.append)
        self.ctrl.set_text("banana")
        self.assertEqual(len(seen), 1)
        self.assertTrue(self.ctrl.state.is_valid)


class TestDefaultDictionary(unittest.TestCase):

    def test_defaults_to_bip39(self) -> None:
        ctrl = DecoderController()
        self.assertIs(ctrl.wordlist, get_default_wordlist())
        ctrl.set_text("aban")
        self.assertEqual(ctrl.state.numeric_value, 1)
        self.assertEqual(ctrl.state.matched_word, "abandon")
