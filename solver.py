import argparse
import itertools
import sys
import time
import requests
from colorama import Fore
import utils
from utils import log_with_time, vlog, format_chain, PRINT_LOCK
import chain_cache
from canonical import validate_word
from chain import ChainOracle, find_longest_chain
from errors import ChainError, MalformedWord
from index import DictionaryIndex


def _is_url(source):
    return source.startswith(("http://", "https://"))


def split_lines(text):
    # Only LF ends a line; other control characters stay in the word and fail validation.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def positive_int(value):
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return n


def load_dictionary(source, skip_malformed=False):
    """Read one word per line from a local file or an http(s) URL."""
    t0 = time.time()
    if _is_url(source):
        log_with_time("⟳ Downloading dictionary…")
        resp = requests.get(source, timeout=30)
        resp.raise_for_status()
        text = resp.text
    else:
        with open(source, "r", encoding="ascii", errors="replace", newline="") as f:
            text = f.read()
    words = split_lines(text)
    if skip_malformed:
        kept = []
        dropped = 0
        for w in words:
            try:
                validate_word(w)
            except MalformedWord:
                dropped += 1
                continue
            kept.append(w)
        vlog(f"Skipped {dropped} malformed dictionary lines")
        words = kept
    vlog(f"Dictionary read ({len(words)} words)", t0)
    return words


def print_chains(max_len, chains):
    with PRINT_LOCK:
        print(f"Longest chain length: {max_len}")
        for chain in chains:
            print(format_chain(chain))


def build_parser():
    parser = argparse.ArgumentParser(
        description="Find the longest derived anagram chains from a starting word"
    )
    parser.add_argument("dictionary", help="Dictionary file or http(s) URL, one word per line")
    parser.add_argument("start_word", help="Word the chains start from")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--workers",
        type=int,
        default=0,
        help="Precompute every chain length longest-words-first with this many processes (default: 0, compute on demand)",
    )
    parser.add_argument("--max-words", type=int, default=utils.DEFAULT_MAX_WORDS, help="Refuse dictionaries larger than this")
    parser.add_argument("--max-chains", type=positive_int, default=None, help="Print at most this many chains")
    parser.add_argument("--skip-malformed", action="store_true", help="Drop invalid dictionary lines instead of failing")
    parser.add_argument("--log-result", action="store_true", help="Save the query and its chains to a dated JSON log file")
    parser.add_argument("--cache-summary", action="store_true", help="Print memo hit/miss counters when done")
    return parser


def run_solver(argv=None):
    args = build_parser().parse_args(argv)

    utils.start_time = time.time()
    utils.VERBOSE = args.verbose
    chain_cache.CACHE_STATS = args.cache_summary
    chain_cache.reset_cache_stats()

    try:
        words = load_dictionary(args.dictionary, skip_malformed=args.skip_malformed)
    except requests.RequestException as e:
        log_with_time(f"Error downloading dictionary: {e}", color=Fore.RED)
        return 1
    except FileNotFoundError:
        log_with_time(f"Could not find dictionary file: {args.dictionary}", color=Fore.RED)
        return 1
    except OSError as e:
        log_with_time(f"Cannot open dictionary file: {e}", color=Fore.RED)
        return 1

    try:
        t0 = time.time()
        index = DictionaryIndex.build(words, max_words=args.max_words)
        vlog(f"Indexed {len(index)} words under {index.num_keys()} keys", t0)

        oracle = ChainOracle(index)
        if args.workers > 0:
            oracle.compute_all(workers=args.workers)

        max_len, chains = find_longest_chain(index, args.start_word, oracle)
        if args.max_chains is not None:
            chains = itertools.islice(chains, args.max_chains)
        chains = list(chains)
    except ChainError as e:
        log_with_time(str(e), color=Fore.RED)
        return 1

    print_chains(max_len, chains)

    if args.log_result:
        utils.log_result_to_file(
            {"start_word": args.start_word, "max_len": max_len, "chains": chains}
        )
    if args.cache_summary:
        chain_cache.print_cache_summary(oracle.memo)

    total_elapsed = time.time() - utils.start_time
    vlog(f"Total time: {int(total_elapsed // 60)}m {total_elapsed % 60:.1f}s")
    return 0


def main():
    sys.exit(run_solver())
