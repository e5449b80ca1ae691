# canonical.py
# A word's canonical key is its characters sorted by code point, so every
# anagram of a word shares one key.

from bisect import bisect_left
from typing import Iterator, Tuple

from errors import MalformedWord
from utils import CHAR_RANGE, MAX_CHAR, MAX_WORD_LEN, MIN_CHAR


def canonicalize(word: str) -> str:
    """Return ``word``'s characters sorted ascending by code point."""
    if len(word) > MAX_WORD_LEN:
        raise MalformedWord(word, f"longer than {MAX_WORD_LEN} characters")
    return "".join(sorted(word))


def validate_word(word: str) -> None:
    """Raise MalformedWord unless ``word`` is 1-255 printable ASCII characters."""
    if not word:
        raise MalformedWord(word, "empty word")
    if len(word) > MAX_WORD_LEN:
        raise MalformedWord(word, f"longer than {MAX_WORD_LEN} characters")
    for ch in word:
        if not MIN_CHAR <= ord(ch) <= MAX_CHAR:
            raise MalformedWord(word, f"character {ch!r} outside printable ASCII {MIN_CHAR}-{MAX_CHAR}")


def insert_char(key: str, ch: str) -> str:
    # Goes in front of the first character >= ch, keeping the key sorted.
    i = bisect_left(key, ch)
    return key[:i] + ch + key[i:]


def candidate_keys(key: str) -> Iterator[Tuple[str, str]]:
    """
    Yield (inserted_char, candidate_key) for every printable character, in
    ascending order. A character already present in ``key`` is still tried.
    """
    for ch in CHAR_RANGE:
        yield ch, insert_char(key, ch)
