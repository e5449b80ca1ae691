# index.py
# Dictionary index keyed by canonical (sorted-letter) form.

from typing import Dict, Iterable, List, Optional

from canonical import canonicalize, validate_word
from errors import ResourceExhausted


class Entry:
    """One dictionary word together with its canonical key."""

    __slots__ = ("original", "canonical_key", "length")

    def __init__(self, original: str, canonical_key: str):
        self.original = original
        self.canonical_key = canonical_key
        self.length = len(original)

    def __repr__(self):
        return f"Entry({self.original!r}, {self.canonical_key!r})"


class DictionaryIndex:
    """
    Canonical key -> entries, with the API the chain search needs:
      - DictionaryIndex.build(words) -> DictionaryIndex
      - lookup(key) -> first-loaded Entry for key, or None
      - variants(key) -> every Entry sharing key, in load order
      - buckets() -> {length: [representative entries]}
    Internals:
      _entries: Dict[key, List[Entry]], list order is load order.
    The index is not modified after build.
    """

    __slots__ = ("_entries", "_size")

    def __init__(self, entries: Dict[str, List[Entry]], size: int):
        self._entries = entries
        self._size = size

    # ---------- Public API ----------
    @classmethod
    def build(cls, words: Iterable[str], max_words: Optional[int] = None) -> "DictionaryIndex":
        """
        Build an index from ``words``. Every word must be valid; the first
        word seen for a canonical key becomes that key's representative.
        """
        entries: Dict[str, List[Entry]] = {}
        size = 0
        try:
            for w in words:
                validate_word(w)
                size += 1
                if max_words is not None and size > max_words:
                    raise ResourceExhausted(
                        f"dictionary exceeds the configured limit of {max_words} words"
                    )
                key = canonicalize(w)
                bucket = entries.get(key)
                if bucket is None:
                    entries[key] = [Entry(w, key)]
                else:
                    bucket.append(Entry(w, key))
        except MemoryError as e:
            raise ResourceExhausted(f"out of memory after indexing {size} words") from e
        return cls(entries, size)

    def lookup(self, key: str) -> Optional[Entry]:
        bucket = self._entries.get(key)
        if bucket is None:
            return None
        return bucket[0]

    def lookup_word(self, word: str) -> Optional[Entry]:
        return self.lookup(canonicalize(word))

    def variants(self, key: str) -> List[Entry]:
        return list(self._entries.get(key, ()))

    def representatives(self) -> Iterable[Entry]:
        for bucket in self._entries.values():
            yield bucket[0]

    def buckets(self) -> Dict[int, List[Entry]]:
        """Representative entries grouped by word length."""
        out: Dict[int, List[Entry]] = {}
        for entry in self.representatives():
            out.setdefault(entry.length, []).append(entry)
        return out

    def num_keys(self) -> int:
        return len(self._entries)

    def __len__(self):
        return self._size

    def __contains__(self, key):
        return key in self._entries
