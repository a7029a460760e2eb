"""
tests/test_codec.py — pytest unit tests for encoder.bit_codec.

Runs against the real BIP-39 English list from ``mnemonic``; the only
hard-coded words are ones whose positions are fixed by the standard
(``abandon`` = #1, ``ability`` = #2, ``zoo`` = #2048).
"""

from __future__ import annotations

import itertools

import pytest

from core.constants import C, MatchState
from encoder.bit_codec import (
    BitVectorError,
    bits_to_number,
    decode_word,
    empty_bits,
    encode,
    format_bits,
    match_word,
    normalize_text,
    number_to_bits,
    parse_bits,
)
from encoder.wordlist import Wordlist, get_default_wordlist


@pytest.fixture(scope="module")
def words() -> Wordlist:
    return get_default_wordlist()


# ──────────────────────────────────────────────────────────────
# Bit arithmetic
# ──────────────────────────────────────────────────────────────

class TestBitArithmetic:

    def test_last_dot_is_least_significant(self) -> None:
        bits = (False,) * 11 + (True,)
        assert bits_to_number(bits) == 1

    def test_first_dot_is_most_significant(self) -> None:
        bits = (True,) + (False,) * 11
        assert bits_to_number(bits) == 2048

    def test_all_ones_is_max_value(self) -> None:
        assert bits_to_number((True,) * 12) == C.MAX_VALUE == 4095

    def test_number_to_bits_inverts_bits_to_number(self) -> None:
        for value in (0, 1, 2, 1234, 2048, 4095):
            assert bits_to_number(number_to_bits(value)) == value

    @pytest.mark.parametrize("value", [-1, 4096, 10_000])
    def test_number_to_bits_rejects_out_of_range(self, value: int) -> None:
        with pytest.raises(ValueError):
            number_to_bits(value)

    @pytest.mark.parametrize("length", [0, 11, 13])
    def test_wrong_length_raises(self, length: int) -> None:
        with pytest.raises(BitVectorError):
            bits_to_number((False,) * length)

    def test_empty_bits_is_twelve_false(self) -> None:
        assert empty_bits() == (False,) * 12


class TestBitStrings:

    def test_format_bits(self) -> None:
        assert format_bits(number_to_bits(5)) == "000000000101"

    def test_parse_bits_accepts_separators(self) -> None:
        assert parse_bits("0000 0000_0101") == number_to_bits(5)

    @pytest.mark.parametrize("text", ["", "0101", "0000000000012", "00000000000a", "1" * 13])
    def test_parse_bits_rejects_malformed(self, text: str) -> None:
        with pytest.raises(BitVectorError):
            parse_bits(text)


# ──────────────────────────────────────────────────────────────
# encode — total over all 4096 vectors
# ──────────────────────────────────────────────────────────────

class TestEncode:

    def test_every_vector_decodes_without_error(self, words: Wordlist) -> None:
        seen = 0
        for combo in itertools.product((False, True), repeat=C.BIT_COUNT):
            result = encode(combo, words)
            value = result.numeric_value
            if value == 0 or value > C.DICTIONARY_SIZE:
                assert not result.is_valid
                assert result.word is None
                assert result.word_number is None
            else:
                assert result.is_valid
                assert result.word == words[value - 1]
                assert result.word_number == value
            seen += 1
        assert seen == 4096

    def test_single_last_dot_is_abandon(self, words: Wordlist) -> None:
        result = encode(parse_bits("000000000001"), words)
        assert result.word == "abandon"
        assert result.word_number == 1
        assert result.is_valid

    def test_value_two_is_ability(self, words: Wordlist) -> None:
        assert encode(parse_bits("000000000010"), words).word == "ability"

    def test_first_dot_alone_is_last_word(self, words: Wordlist) -> None:
        assert encode(parse_bits("100000000000"), words).word == "zoo"

    def test_all_zero_is_nothing_selected(self, words: Wordlist) -> None:
        result = encode(empty_bits(), words)
        assert result.numeric_value == 0
        assert not result.is_valid
        assert result.word_number is None

    def test_all_ones_is_invalid(self, words: Wordlist) -> None:
        result = encode((True,) * 12, words)
        assert result.numeric_value == 4095
        assert not result.is_valid
        assert result.word is None

    def test_to_dict(self, words: Wordlist) -> None:
        assert encode(number_to_bits(1), words).to_dict() == {
            "numeric_value": 1,
            "word_number": 1,
            "word": "abandon",
            "is_valid": True,
        }

    def test_small_dictionary_boundary(self, tiny_wordlist: Wordlist) -> None:
        assert encode(number_to_bits(3), tiny_wordlist).word == "banana"
        assert not encode(number_to_bits(4), tiny_wordlist).is_valid

    def test_uses_default_dictionary_when_omitted(self) -> None:
        assert encode(number_to_bits(1)).word == "abandon"


# ──────────────────────────────────────────────────────────────
# match_word — per-keystroke resolution
# ──────────────────────────────────────────────────────────────

class TestMatchWord:

    def test_empty_text(self, words: Wordlist) -> None:
        m = match_word("   ", words)
        assert m.state is MatchState.EMPTY
        assert m.bits == empty_bits()
        assert not m.is_resolved

    def test_unique_prefix_resolves(self, words: Wordlist) -> None:
        m = match_word("aban", words)
        assert m.state is MatchState.UNIQUE_PREFIX
        assert m.word == "abandon"
        assert m.word_number == 1
        assert format_bits(m.bits) == "000000000001"

    def test_exact_wins_over_longer_candidates(self, words: Wordlist) -> None:
        # "act" is itself a word and also a prefix of "action", "actor", ...
        m = match_word("act", words)
        assert m.state is MatchState.EXACT
        assert m.word == "act"

    def test_ambiguous_prefix(self, words: Wordlist) -> None:
        m = match_word("ab", words)
        assert m.state is MatchState.AMBIGUOUS
        assert m.word is None
        assert m.word_number is None
        assert m.bits == empty_bits()

    def test_no_match(self, words: Wordlist) -> None:
        m = match_word("xyzzy", words)
        assert m.state is MatchState.NO_MATCH
        assert m.bits == empty_bits()

    def test_input_is_normalised(self, words: Wordlist) -> None:
        m = match_word("  ZOO ", words)
        assert m.text == "zoo"
        assert m.state is MatchState.EXACT
        assert m.word_number == 2048

    def test_normalize_text(self) -> None:
        assert normalize_text("  AbAnDoN\t") == "abandon"

    def test_decode_word_of_unresolved_is_all_false(self, words: Wordlist) -> None:
        assert decode_word("zz", words) == empty_bits()

    def test_round_trip_every_word(self, words: Wordlist) -> None:
        for number, word in enumerate(words, start=1):
            bits = decode_word(word, words)
            result = encode(bits, words)
            assert result.word == word
            assert result.word_number == number

    def test_every_prefix_of_every_word(self, words: Wordlist) -> None:
        by_prefix: dict[str, list[str]] = {}
        for word in words:
            for n in range(1, len(word) + 1):
                by_prefix.setdefault(word[:n], []).append(word)

        unique = ambiguous = 0
        for prefix, candidates in by_prefix.items():
            m = match_word(prefix, words)
            if prefix in words:
                assert m.state is MatchState.EXACT
                assert m.bits == number_to_bits(words.number_of(prefix))
            elif len(candidates) == 1:
                assert m.state is MatchState.UNIQUE_PREFIX
                assert m.word == candidates[0]
                assert m.bits == number_to_bits(words.number_of(candidates[0]))
                unique += 1
            else:
                assert m.state is MatchState.AMBIGUOUS
                assert m.word is None
                assert m.bits == empty_bits()
                ambiguous += 1
        assert unique > 0
        assert ambiguous > 0

    def test_tiny_dictionary_prefixes(self, tiny_wordlist: Wordlist) -> None:
        assert match_word("ap", tiny_wordlist).state is MatchState.AMBIGUOUS
        assert match_word("apr", tiny_wordlist).word == "apricot"
        assert match_word("b", tiny_wordlist).word_number == 3
