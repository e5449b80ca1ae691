# --- utils.py ---

import time
import threading
import json
from colorama import Fore, Style, init
import os

init()

# Printable ASCII range a dictionary word may use
MIN_CHAR = 33
MAX_CHAR = 126
CHAR_RANGE = tuple(chr(c) for c in range(MIN_CHAR, MAX_CHAR + 1))

MAX_WORD_LEN = 255

# No limit unless --max-words is given
DEFAULT_MAX_WORDS = None

CHAIN_SEPARATOR = "->"

VERBOSE = False
start_time = time.time()

# Lock used for synchronized printing across threads
PRINT_LOCK = threading.Lock()

def log_with_time(msg, color=Fore.LIGHTBLUE_EX):
    """Print ``msg`` with a timestamp."""
    elapsed = time.time() - start_time
    mins = int(elapsed // 60)
    secs = elapsed % 60
    timestamp = Style.DIM + f"[{mins:02}:{secs:06.3f}]" + Style.RESET_ALL
    with PRINT_LOCK:
        print(f"{timestamp} {color}{msg}{Style.RESET_ALL}", flush=True)

def vlog(msg, t0=None):
    if VERBOSE:
        if t0 is not None:
            elapsed = time.time() - t0
            log_with_time(f"{msg} (took {elapsed:.3f}s)")
        else:
            log_with_time(msg)

def format_chain(chain):
    return CHAIN_SEPARATOR.join(chain)

def log_result_to_file(record, logs_dir=None):
    """Record a query and its chains in a dated JSON file under ``logs``.
    If the file exists, the stored result is replaced only by a longer chain."""
    logs_dir = logs_dir or os.path.join(os.getcwd(), 'logs')
    os.makedirs(logs_dir, exist_ok=True)
    log_file = os.path.join(logs_dir, f"chains_{time.strftime('%Y-%m-%d')}.json")

    log_data = {}
    if os.path.exists(log_file):
        try:
            with open(log_file, 'r') as f:
                log_data = json.load(f)
        except (OSError, ValueError):
            log_with_time(f"Could not read {log_file}; starting a fresh log.", color=Fore.YELLOW)
            log_data = {}

    existing_best = log_data.get("best_result")
    if not existing_best or record["max_len"] > existing_best.get("max_len", 0):
        log_data["best_result"] = record
        log_with_time(f"Updated best_result in {log_file}", color=Fore.GREEN)
    else:
        log_with_time(f"Existing best_result in {log_file} is equal or longer; not updated.", color=Fore.YELLOW)

    log_data.setdefault("queries", []).append(
        {"start_word": record["start_word"], "max_len": record["max_len"]}
    )

    with open(log_file, 'w') as f:
        json.dump(log_data, f, indent=2)
    return log_file
