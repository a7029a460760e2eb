"""
encoder/bit_codec.py — 12-dot bit vector ⇄ dictionary word codec.

The board reads most-significant-bit first: dot 0 is worth 2**11 and dot 11
is worth 1. The numeric value *is* the 1-based word number, so value 0 means
"nothing selected" and values above the dictionary length are well-formed
patterns with no word.

Typed text is resolved per keystroke by :func:`match_word`: an exact word
wins, otherwise a prefix shared by exactly one word auto-completes to it.
Every function here is pure.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, cast

from core.constants import C, MatchState
from encoder.wordlist import Wordlist, get_default_wordlist

BitVector = tuple[bool, ...]
"""Exactly ``C.BIT_COUNT`` booleans, index 0 = most significant."""


class BitVectorError(ValueError):
    """Raised for a bit vector (or bit string) of the wrong shape."""


# ──────────────────────────────────────────────────────────────
# Result dataclasses
# ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class DecodeResult:
    """
    What a bit vector means.

    Attributes:
        numeric_value: Unsigned value of the 12 bits, in [0, 4095].
        word_number: 1-based dictionary position, or ``None`` when invalid.
        word: Dictionary word, or ``None`` when invalid.
        is_valid: True iff the value is non-zero and inside the dictionary.
    """

    numeric_value: int
    word_number: Optional[int]
    word: Optional[str]
    is_valid: bool

    def to_dict(self) -> dict:
        """Serialise to a JSON-safe dict."""
        return {
            "numeric_value": self.numeric_value,
            "word_number": self.word_number,
            "word": self.word,
            "is_valid": self.is_valid,
        }


@dataclass(frozen=True)
class MatchResult:
    """
    Outcome of resolving typed text against the dictionary.

    Attributes:
        text: The normalised input.
        state: Which branch of the matcher fired.
        word: The resolved word for EXACT / UNIQUE_PREFIX, else ``None``.
        word_number: 1-based number of ``word``, else ``None``.
        bits: Bit vector of ``word``; all-false when unresolved.
    """

    text: str
    state: MatchState
    word: Optional[str]
    word_number: Optional[int]
    bits: BitVector

    @property
    def is_resolved(self) -> bool:
        return self.state in (MatchState.EXACT, MatchState.UNIQUE_PREFIX)


# ──────────────────────────────────────────────────────────────
# Bit arithmetic
# ──────────────────────────────────────────────────────────────

def empty_bits() -> BitVector:
    """Return the all-false vector."""
    return (False,) * C.BIT_COUNT


def _checked(bits: Sequence[bool]) -> BitVector:
    if len(bits) != C.BIT_COUNT:
        raise BitVectorError(
            f"Bit vector must have exactly {C.BIT_COUNT} entries, got {len(bits)}"
        )
    return tuple(bool(b) for b in bits)


def bits_to_number(bits: Sequence[bool]) -> int:
    """
    Compose a bit vector into its unsigned value, MSB first.

    Raises:
        BitVectorError: If ``bits`` does not have exactly 12 entries.
    """
    value = 0
    for i, bit in enumerate(_checked(bits)):
        if bit:
            value |= 1 << (C.BIT_COUNT - 1 - i)
    return value


def number_to_bits(value: int) -> BitVector:
    """
    Decompose *value* into 12 bits, MSB first.

    Raises:
        ValueError: If *value* is outside ``[0, 4095]``.
    """
    if not 0 <= value <= C.MAX_VALUE:
        raise ValueError(f"Value {value} does not fit in {C.BIT_COUNT} bits")
    return tuple(
        ((value >> (C.BIT_COUNT - 1 - i)) & 1) == 1 for i in range(C.BIT_COUNT)
    )


def format_bits(bits: Sequence[bool]) -> str:
    """Render a vector as a 12-character ``0``/``1`` string."""
    return "".join("1" if b else "0" for b in _checked(bits))


def parse_bits(text: str) -> BitVector:
    """
    Parse a ``0``/``1`` string (spaces and underscores allowed as separators).

    Raises:
        BitVectorError: On any other character or the wrong length.
    """
    digits = text.replace(" ", "").replace("_", "")
    if len(digits) != C.BIT_COUNT or set(digits) - {"0", "1"}:
        raise BitVectorError(
            f"Expected {C.BIT_COUNT} characters of 0/1, got {text!r}"
        )
    return tuple(ch == "1" for ch in digits)


# ──────────────────────────────────────────────────────────────
# Codec
# ──────────────────────────────────────────────────────────────

def encode(bits: Sequence[bool], wordlist: Optional[Wordlist] = None) -> DecodeResult:
    """
    Interpret a bit vector as a word number and look the word up.

    Total over every correctly sized vector:

    * value 0 → invalid, no word number ("nothing selected")
    * 1 ≤ value ≤ len(wordlist) → ``wordlist[value - 1]``, valid
    * value above the dictionary → invalid, no word

    Raises:
        BitVectorError: If ``bits`` does not have exactly 12 entries.
    """
    words = wordlist if wordlist is not None else get_default_wordlist()
    value = bits_to_number(bits)
    word = words.word_at(value) if value else None
    if word is None:
        return DecodeResult(numeric_value=value, word_number=None, word=None, is_valid=False)
    return DecodeResult(numeric_value=value, word_number=value, word=word, is_valid=True)


def normalize_text(text: str) -> str:
    """Lowercase and strip surrounding whitespace."""
    return text.strip().lower()


def match_word(text: str, wordlist: Optional[Wordlist] = None) -> MatchResult:
    """
    Resolve typed text to a dictionary word.

    Exact membership wins; otherwise a prefix that exactly one word starts
    with auto-completes to that word. Two or more candidates, or none,
    leave the match unresolved with an all-false vector.

    Args:
        text: Raw text field contents.
        wordlist: Dictionary; defaults to BIP-39 English.

    Returns:
        A :class:`MatchResult`.
    """
    words = wordlist if wordlist is not None else get_default_wordlist()
    norm = normalize_text(text)
    if not norm:
        return MatchResult(norm, MatchState.EMPTY, None, None, empty_bits())

    if norm in words:
        state, word = MatchState.EXACT, norm
    else:
        candidates = words.words_with_prefix(norm)
        if len(candidates) == 1:
            state, word = MatchState.UNIQUE_PREFIX, candidates[0]
        else:
            state = MatchState.AMBIGUOUS if candidates else MatchState.NO_MATCH
            return MatchResult(norm, state, None, None, empty_bits())

    number = cast(int, words.number_of(word))
    return MatchResult(norm, state, word, number, number_to_bits(number))


def decode_word(text: str, wordlist: Optional[Wordlist] = None) -> BitVector:
    """Return the bit vector for typed text; all-false when unresolved."""
    return match_word(text, wordlist).bits
