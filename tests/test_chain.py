import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import itertools
import random
from collections import Counter

import pytest

from canonical import canonicalize
from chain import ChainOracle, enumerate_max_chains, find_longest_chain, _bucket_chain_lengths
import chain_cache
from chain_cache import ChainMemo
from errors import MalformedWord, WordNotFound
from index import DictionaryIndex


def is_derived(a, b):
    return len(b) == len(a) + 1 and not (Counter(a) - Counter(b))


def brute_force_chains(words, start):
    def rec(w):
        paths = [[w]]
        for nxt in words:
            if is_derived(w, nxt):
                paths.extend([w] + p for p in rec(nxt))
        return paths

    paths = rec(start)
    best = max(len(p) for p in paths)
    return best, sorted(tuple(p) for p in paths if len(p) == best)


def random_dictionary(seed, alphabet="abcd", max_len=6, count=60):
    rng = random.Random(seed)
    seen = {}
    for _ in range(count):
        w = "".join(rng.choice(alphabet) for _ in range(rng.randint(1, max_len)))
        seen.setdefault(canonicalize(w), w)
    return list(seen.values())


def test_scenario_a_single_chain():
    index = DictionaryIndex.build(["abc", "abcd", "abcde"])
    max_len, chains = find_longest_chain(index, "abc")
    assert max_len == 3
    assert list(chains) == [["abc", "abcd", "abcde"]]


def test_scenario_b_branching_in_order():
    index = DictionaryIndex.build(["abc", "abcd", "abce"])
    max_len, chains = find_longest_chain(index, "abc")
    assert max_len == 2
    assert list(chains) == [["abc", "abcd"], ["abc", "abce"]]


def test_scenario_c_duplicate_letters():
    index = DictionaryIndex.build(["aab", "aabb"])
    max_len, chains = find_longest_chain(index, "aab")
    assert max_len == 2
    assert list(chains) == [["aab", "aabb"]]


def test_scenario_d_absent_word():
    index = DictionaryIndex.build(["abc", "abcd"])
    with pytest.raises(WordNotFound) as exc:
        find_longest_chain(index, "xyz")
    assert exc.value.word == "xyz"


def test_malformed_start_word():
    index = DictionaryIndex.build(["abc"])
    with pytest.raises(MalformedWord):
        find_longest_chain(index, "")
    with pytest.raises(MalformedWord):
        find_longest_chain(index, "a" * 300)


def test_classic_example():
    index = DictionaryIndex.build(["sail", "nails", "aliens", "snail", "salient", "zebra"])
    max_len, chains = find_longest_chain(index, "sail")
    assert max_len == 4
    # nails and snail share a key; the first-loaded one is reported
    assert list(chains) == [["sail", "nails", "aliens", "salient"]]


def test_start_word_variant_is_reported_as_typed():
    index = DictionaryIndex.build(["tab", "bat", "bath"])
    max_len, chains = find_longest_chain(index, "bat")
    assert max_len == 2
    assert list(chains) == [["bat", "bath"]]


def test_start_word_anagram_not_in_dictionary_uses_representative():
    index = DictionaryIndex.build(["tab", "bath"])
    max_len, chains = find_longest_chain(index, "tba")
    assert list(chains) == [["tab", "bath"]]


def test_base_case_no_successor():
    index = DictionaryIndex.build(["abc", "xyz", "abcde"])
    oracle = ChainOracle(index)
    assert oracle.longest_chain(index.lookup("abc")) == 1
    assert oracle.longest_chain(index.lookup("xyz")) == 1
    max_len, chains = find_longest_chain(index, "abc", oracle)
    assert list(chains) == [["abc"]]


def test_successors_in_ascending_char_order():
    index = DictionaryIndex.build(["ab", "abz", "!ab", "aab", "abb"])
    oracle = ChainOracle(index)
    succ = list(oracle.successors(index.lookup("ab")))
    assert [ch for ch, _ in succ] == ["!", "a", "b", "z"]
    assert [e.original for _, e in succ] == ["!ab", "aab", "abb", "abz"]


def test_recurrence_holds_for_every_entry():
    words = random_dictionary(3)
    index = DictionaryIndex.build(words)
    oracle = ChainOracle(index)
    for entry in index.representatives():
        succ = [oracle.longest_chain(e) for _, e in oracle.successors(entry)]
        expected = 1 + max(succ) if succ else 1
        assert oracle.longest_chain(entry) == expected


@pytest.mark.parametrize("seed", range(8))
def test_matches_brute_force(seed):
    words = random_dictionary(seed)
    index = DictionaryIndex.build(words)
    oracle = ChainOracle(index)
    for start in words[:15]:
        expected_len, expected_chains = brute_force_chains(words, start)
        max_len, chains = find_longest_chain(index, start, oracle)
        chains = list(chains)
        assert max_len == expected_len
        assert sorted(tuple(c) for c in chains) == expected_chains
        for c in chains:
            assert c[0] == start
            assert len(c) == max_len
            for a, b in zip(c, c[1:]):
                assert is_derived(a, b)


def test_enumeration_is_lazy_and_restores_path():
    # 3 branches of 3 -> 9 maximal chains
    words = ["a", "ab", "ac", "ad", "abx", "aby", "abz", "acx", "acy", "acz", "adx", "ady", "adz"]
    index = DictionaryIndex.build(words)
    max_len, chains = find_longest_chain(index, "a")
    assert max_len == 3
    first_two = list(itertools.islice(chains, 2))
    assert first_two == [["a", "ab", "abx"], ["a", "ab", "aby"]]
    chains.close()

    _, chains = find_longest_chain(index, "a")
    all_chains = list(chains)
    assert len(all_chains) == 9
    assert all_chains[-1] == ["a", "ad", "adz"]


def test_enumerate_rejects_wrong_max_len():
    index = DictionaryIndex.build(["abc", "abcd"])
    oracle = ChainOracle(index)
    start = index.lookup("abc")
    with pytest.raises(ValueError):
        enumerate_max_chains(oracle, start, 2)
    oracle.longest_chain(start)
    with pytest.raises(ValueError):
        enumerate_max_chains(oracle, start, 3)
    assert list(enumerate_max_chains(oracle, start, 2)) == [["abc", "abcd"]]


def test_chain_length_requires_memo():
    index = DictionaryIndex.build(["abc"])
    oracle = ChainOracle(index)
    with pytest.raises(KeyError):
        oracle.chain_length(index.lookup("abc"))
    oracle.longest_chain(index.lookup("abc"))
    assert oracle.chain_length(index.lookup("abc")) == 1


def test_long_chain_recursion_depth():
    words = ["a" * n for n in range(1, 256)]
    index = DictionaryIndex.build(words)
    max_len, chains = find_longest_chain(index, "a")
    assert max_len == 255
    (only,) = list(chains)
    assert only[-1] == "a" * 255


def test_bucket_chain_lengths():
    assert _bucket_chain_lengths(["ab", "xy"], {"abc": 2, "abd": 4}) == [5, 1]


def _recursive_memo(index):
    oracle = ChainOracle(index)
    for entry in index.representatives():
        oracle.longest_chain(entry)
    return dict(oracle.memo)


@pytest.mark.parametrize("seed", range(4))
def test_compute_all_matches_recursive(seed):
    index = DictionaryIndex.build(random_dictionary(seed, count=120))
    oracle = ChainOracle(index)
    computed = oracle.compute_all(workers=1)
    assert computed == index.num_keys()
    assert dict(oracle.memo) == _recursive_memo(index)
    # second pass has nothing left to do
    assert oracle.compute_all(workers=1) == 0


def test_compute_all_parallel_matches_recursive():
    index = DictionaryIndex.build(random_dictionary(42, alphabet="abcdef", max_len=7, count=300))
    oracle = ChainOracle(index)
    oracle.compute_all(workers=2, min_parallel=1)
    assert dict(oracle.memo) == _recursive_memo(index)


def test_compute_all_then_enumerate():
    index = DictionaryIndex.build(["abc", "abcd", "abce", "abcde"])
    oracle = ChainOracle(index)
    oracle.compute_all()
    max_len, chains = find_longest_chain(index, "abc", oracle)
    assert max_len == 3
    assert list(chains) == [["abc", "abcd", "abcde"], ["abc", "abce", "abcde"]]


def test_oracle_reuses_shared_memo():
    index = DictionaryIndex.build(["abc", "abcd"])
    memo = ChainMemo()
    ChainOracle(index, memo).longest_chain(index.lookup("abc"))
    assert memo == {"abcd": 1, "abc": 2}
    assert ChainOracle(index, memo).longest_chain(index.lookup("abc")) == 2


def test_enumeration_reads_memo_without_counting(monkeypatch):
    monkeypatch.setattr(chain_cache, "CACHE_STATS", True)
    chain_cache.reset_cache_stats()
    index = DictionaryIndex.build(["abc", "abcd", "abce", "abcde"])
    max_len, chains = find_longest_chain(index, "abc")
    before = chain_cache.cache_stats()
    assert before == (1, 4)
    assert list(chains) == [["abc", "abcd", "abcde"], ["abc", "abce", "abcde"]]
    assert chain_cache.cache_stats() == before
    chain_cache.reset_cache_stats()
