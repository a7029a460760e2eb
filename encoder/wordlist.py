"""
encoder/wordlist.py — The 2048-word dictionary behind the dot board.

Word numbers are 1-based: the first word ("abandon" in the BIP-39 English
list) is word #1, which is the bit pattern with only the last dot set.
The list is validated once at construction and never mutated afterwards.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence

from mnemonic import Mnemonic

from core.constants import C
from core.logger import get_logger

_log = get_logger()


class WordlistError(ValueError):
    """Raised when a supplied dictionary is structurally unusable."""


# ──────────────────────────────────────────────────────────────
# Wordlist
# ──────────────────────────────────────────────────────────────

class Wordlist(Sequence[str]):
    """
    Immutable ordered dictionary of unique lowercase words.

    Args:
        words: Words in dictionary order.
        expected_size: Required entry count, or ``None`` to accept any size
            that still fits in the bit vector (used for small test lists).

    Raises:
        WordlistError: If the list is empty, too long, has duplicates,
            or contains anything other than lowercase ASCII letters.
    """

    def __init__(
        self,
        words: Iterable[str],
        expected_size: Optional[int] = C.DICTIONARY_SIZE,
    ) -> None:
        self._words: tuple[str, ...] = tuple(words)
        self._validate(expected_size)
        self._numbers: dict[str, int] = {w: i + 1 for i, w in enumerate(self._words)}

    def _validate(self, expected_size: Optional[int]) -> None:
        size = len(self._words)
        if size == 0:
            raise WordlistError("Wordlist is empty")
        if size > C.MAX_VALUE:
            raise WordlistError(
                f"Wordlist has {size} entries; at most {C.MAX_VALUE} fit in "
                f"{C.BIT_COUNT} bits"
            )
        if expected_size is not None and size != expected_size:
            raise WordlistError(f"Wordlist has {size} entries, expected {expected_size}")
        for pos, word in enumerate(self._words, start=1):
            if not isinstance(word, str) or not word.isascii() or not word.isalpha() \
                    or not word.islower():
                raise WordlistError(f"Entry #{pos} is not a lowercase ASCII word: {word!r}")
        if len(set(self._words)) != size:
            raise WordlistError("Wordlist contains duplicate entries")

    # ── Sequence protocol ─────────────────────────────────────

    def __len__(self) -> int:
        return len(self._words)

    def __getitem__(self, item):  # type: ignore[override]
        return self._words[item]

    def __iter__(self) -> Iterator[str]:
        return iter(self._words)

    def __contains__(self, word: object) -> bool:
        return word in self._numbers

    def __repr__(self) -> str:
        return f"Wordlist(size={len(self._words)})"

    # ── Lookups ───────────────────────────────────────────────

    def word_at(self, word_number: int) -> Optional[str]:
        """
        Return the word with the given 1-based number.

        Args:
            word_number: Position in ``[1, len(self)]``.

        Returns:
            The word, or ``None`` if the number is outside the dictionary.
        """
        if 1 <= word_number <= len(self._words):
            return self._words[word_number - 1]
        return None

    def number_of(self, word: str) -> Optional[int]:
        """Return the 1-based word number of *word*, or ``None`` if absent."""
        return self._numbers.get(word)

    def words_with_prefix(self, prefix: str) -> list[str]:
        """
        Return every word that starts with *prefix*, in dictionary order.

        An empty prefix matches nothing.
        """
        if not prefix:
            return []
        return [w for w in self._words if w.startswith(prefix)]


# ──────────────────────────────────────────────────────────────
# Loading
# ──────────────────────────────────────────────────────────────

def load_wordlist(
    path: Path | str | None = None,
    expected_size: Optional[int] = C.DICTIONARY_SIZE,
) -> Wordlist:
    """
    Load a dictionary from *path*, or the official BIP-39 English list.

    The file format is one word per line; blank lines and surrounding
    whitespace are ignored.

    Args:
        path: Optional UTF-8 text file.
        expected_size: Passed through to :class:`Wordlist`.

    Returns:
        A validated :class:`Wordlist`.

    Raises:
        FileNotFoundError: If *path* is given but missing.
        WordlistError: If the contents fail validation.
    """
    _t = time.perf_counter()
    if path is not None:
        source = str(path)
        with Path(path).open("r", encoding="utf-8") as fh:
            words = [line.strip() for line in fh if line.strip()]
    else:
        source = f"mnemonic:{C.DICTIONARY_LANGUAGE}"
        words = list(Mnemonic(C.DICTIONARY_LANGUAGE).wordlist)

    wordlist = Wordlist(words, expected_size=expected_size)
    _log.perf("codec", "wordlist_loaded", (time.perf_counter() - _t) * 1000.0, {
        "source": source,
        "size": len(wordlist),
    })
    return wordlist


_default: Optional[Wordlist] = None
_default_lock = threading.Lock()


def get_default_wordlist() -> Wordlist:
    """Return the process-wide BIP-39 English :class:`Wordlist`, loading it once."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = load_wordlist()
    return _default
