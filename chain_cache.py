import utils


_hits = 0
_misses = 0
# Counters cost a global update per lookup; off unless --cache-summary is set
CACHE_STATS = False


class ChainMemo(dict):
    """Canonical key -> longest chain length. Each key is written once."""

    def __setitem__(self, key, value):
        if key in self:
            raise KeyError(f"chain length for {key!r} already memoized")
        if value < 1:
            raise ValueError(f"chain length must be at least 1, got {value}")
        super().__setitem__(key, value)

    def lookup(self, key):
        """Return the memoized length for ``key`` or None, updating counters."""
        global _hits, _misses
        value = self.get(key)
        if CACHE_STATS:
            if value is None:
                _misses += 1
            else:
                _hits += 1
        return value


def reset_cache_stats():
    global _hits, _misses
    _hits = 0
    _misses = 0


def cache_stats():
    return _hits, _misses


def print_cache_summary(memo):
    utils.log_with_time(f"[CACHE SUMMARY] Memoized chain lengths: {len(memo)}")
    utils.log_with_time(f"[CACHE SUMMARY] Memo hits: {_hits}")
    utils.log_with_time(f"[CACHE SUMMARY] Memo misses: {_misses}")
