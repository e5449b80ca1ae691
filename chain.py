import concurrent.futures
import time
from typing import Dict, Iterator, List, Optional, Tuple

from canonical import candidate_keys, canonicalize, validate_word
from chain_cache import ChainMemo
from errors import ResourceExhausted, WordNotFound
from index import DictionaryIndex, Entry
from utils import vlog

# Buckets smaller than this are not worth shipping to worker processes
PARALLEL_MIN_BUCKET = 2048


def _bucket_chain_lengths(keys: List[str], longer: Dict[str, int]) -> List[int]:
    """Chain lengths for same-length keys, given the finalized lengths one letter longer."""
    out = []
    for key in keys:
        best = 1
        for _, cand in candidate_keys(key):
            n = longer.get(cand)
            if n is not None and n + 1 > best:
                best = n + 1
        out.append(best)
    return out


def _chunks(seq, n):
    size = max(1, -(-len(seq) // n))
    for i in range(0, len(seq), size):
        yield seq[i:i + size]


class ChainOracle:
    """Longest derived-anagram chain length for any indexed word, memoized per canonical key."""

    def __init__(self, index: DictionaryIndex, memo: Optional[ChainMemo] = None):
        self.index = index
        self.memo = memo if memo is not None else ChainMemo()

    def successors(self, entry: Entry) -> Iterator[Tuple[str, Entry]]:
        """Yield (inserted_char, entry) for each word one insertion away, ascending by char."""
        lookup = self.index.lookup
        for ch, key in candidate_keys(entry.canonical_key):
            nxt = lookup(key)
            if nxt is not None:
                yield ch, nxt

    def longest_chain(self, entry: Entry) -> int:
        known = self.memo.lookup(entry.canonical_key)
        if known is not None:
            return known
        best = 1  # the word itself
        for _, nxt in self.successors(entry):
            length = 1 + self.longest_chain(nxt)
            if length > best:
                best = length
        self.memo[entry.canonical_key] = best
        return best

    def chain_length(self, entry: Entry) -> int:
        return self.memo[entry.canonical_key]

    def compute_all(self, workers: int = 1, min_parallel: int = PARALLEL_MIN_BUCKET) -> int:
        """
        Fill the memo for every indexed key, longest words first. A bucket of
        length M only reads lengths of bucket M+1, which are already final, so
        a bucket can be split across worker processes. Only this process
        writes to the memo. Returns the number of newly memoized keys.
        """
        t0 = time.time()
        buckets = self.index.buckets()
        computed = 0
        executor = concurrent.futures.ProcessPoolExecutor(max_workers=workers) if workers > 1 else None
        try:
            for length in sorted(buckets, reverse=True):
                t1 = time.time()
                pending = [e.canonical_key for e in buckets[length] if e.canonical_key not in self.memo]
                if not pending:
                    continue
                longer = {
                    e.canonical_key: self.memo[e.canonical_key]
                    for e in buckets.get(length + 1, ())
                }
                if executor is None or len(pending) < min_parallel:
                    for key, n in zip(pending, _bucket_chain_lengths(pending, longer)):
                        self.memo[key] = n
                else:
                    future_to_keys = {
                        executor.submit(_bucket_chain_lengths, chunk, longer): chunk
                        for chunk in _chunks(pending, workers)
                    }
                    for future in concurrent.futures.as_completed(future_to_keys):
                        chunk = future_to_keys[future]
                        for key, n in zip(chunk, future.result()):
                            self.memo[key] = n
                computed += len(pending)
                vlog(f"compute_all: length {length}, {len(pending)} keys", t1)
        except MemoryError as e:
            raise ResourceExhausted(f"out of memory after memoizing {len(self.memo)} chain lengths") from e
        finally:
            if executor is not None:
                executor.shutdown()
        vlog(f"compute_all: memoized {computed} keys with {max(workers, 1)} worker(s)", t0)
        return computed


def enumerate_max_chains(oracle: ChainOracle, start: Entry, max_len: int) -> Iterator[List[str]]:
    """
    Lazily yield every chain of ``max_len`` words beginning at ``start``.
    ``max_len`` must be the memoized longest chain of ``start``.
    """
    known = oracle.memo.get(start.canonical_key)
    if known != max_len:
        raise ValueError(
            f"max_len {max_len} does not match the longest chain ({known}) for {start.original!r}"
        )
    return _walk(oracle, start, max_len, [])


def _walk(oracle, entry, remaining, path):
    path.append(entry.original)
    try:
        if remaining == 1:
            yield list(path)
            return
        for _, nxt in oracle.successors(entry):
            # only edges that stay on a maximal path
            if oracle.chain_length(nxt) == remaining - 1:
                yield from _walk(oracle, nxt, remaining - 1, path)
    finally:
        path.pop()


def find_longest_chain(index: DictionaryIndex, start_word: str, oracle: Optional[ChainOracle] = None):
    """Return (max_len, chains) for ``start_word``; chains is a lazy iterator."""
    validate_word(start_word)
    key = canonicalize(start_word)
    variants = index.variants(key)
    if not variants:
        raise WordNotFound(start_word)
    # Report the word as typed when it is itself in the dictionary
    start = next((e for e in variants if e.original == start_word), variants[0])
    if oracle is None:
        oracle = ChainOracle(index)
    t0 = time.time()
    try:
        max_len = oracle.longest_chain(start)
    except MemoryError as e:
        raise ResourceExhausted(f"out of memory after memoizing {len(oracle.memo)} chain lengths") from e
    vlog(f"longest_chain({start.original!r}) = {max_len}", t0)
    if start.original != start_word:
        vlog(f"'{start_word}' matched dictionary word '{start.original}'")
    return max_len, enumerate_max_chains(oracle, start, max_len)
