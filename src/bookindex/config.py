from __future__ import annotations
import os

# reading mode:
# - "threads" chapters scanned by a thread pool, workers can share one index
# - "procs"   chapters scanned by a process pool, only the "merge" strategy applies
MODE = "threads"

# accumulation strategy:
# - "shared" workers append into the lock-striped SharedIndex as they scan
# - "merge"  workers build private maps, merged by the coordinator after the barrier
STRATEGY = "shared"

# workers (per mode, never more than the number of chapters)
_cpu = os.cpu_count() or 4
DEFAULT_WORKERS_THREADS = _cpu * 2
DEFAULT_WORKERS_PROCS = _cpu

# tokenization
CASE_SENSITIVE = True
STRIP_PUNCTUATION = False
DEDUPE_LINES = False       # one occurrence per (word, line) instead of per token
SKIP_HEADER_LINES = 0      # leading lines not scanned; still counted for numbering

# chapter files
ENCODING = "utf-8"
INCLUDE_EXTS = {".txt"}

# shared index
LOCK_STRIPES = 64

# failure policy
FAIL_FAST = False

# Progress logging (set BOOKINDEX_VERBOSE=1 to enable)
VERBOSE = os.environ.get("BOOKINDEX_VERBOSE") == "1"
