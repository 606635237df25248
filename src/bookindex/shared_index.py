from __future__ import annotations
import threading
from typing import Dict, Iterable, List, Mapping, Tuple

from . import config as CFG
from .models import IndexedResult, Occurrence


class SharedIndex:
    """
    Concurrent word -> occurrences accumulator.

    Appends to the same word are serialized by one of a fixed pool of stripe
    locks (chosen by word hash); appends to words on different stripes run
    without contention. Creating a new entry additionally takes a short
    structural lock so the mapping itself is never resized by two writers.

    Lifecycle: writers call append()/merge() until the coordinator's barrier,
    then the coordinator calls seal(). snapshot()/result() are only allowed on
    a sealed index, and a sealed index rejects further writes.
    """

    def __init__(self, stripes: int = CFG.LOCK_STRIPES) -> None:
        if stripes < 1:
            raise ValueError("stripes must be >= 1")
        self._entries: Dict[str, List[Occurrence]] = {}
        self._stripes = [threading.Lock() for _ in range(stripes)]
        self._create_lock = threading.Lock()
        self._sealed = False

    def _lock_for(self, word: str) -> threading.Lock:
        return self._stripes[hash(word) % len(self._stripes)]

    def _bucket(self, word: str) -> List[Occurrence]:
        # caller holds the word's stripe lock
        bucket = self._entries.get(word)
        if bucket is None:
            with self._create_lock:
                bucket = self._entries.setdefault(word, [])
        return bucket

    # ---- writes ----

    def append(self, word: str, occurrence: Occurrence) -> None:
        if self._sealed:
            raise RuntimeError("index is sealed; no appends after the join barrier")
        with self._lock_for(word):
            self._bucket(word).append(occurrence)

    def merge(self, local: Mapping[str, Iterable[Occurrence]]) -> int:
        """Append a worker's private map in bulk. Returns the number of occurrences added."""
        if self._sealed:
            raise RuntimeError("index is sealed; no merges after the join barrier")
        added = 0
        for word, occs in local.items():
            occs = list(occs)
            with self._lock_for(word):
                self._bucket(word).extend(occs)
            added += len(occs)
        return added

    # ---- lifecycle ----

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    # ---- reads (after seal) ----

    def snapshot(self) -> Dict[str, Tuple[Occurrence, ...]]:
        if not self._sealed:
            raise RuntimeError("snapshot() before the join barrier; seal() the index first")
        return {word: tuple(occs) for word, occs in self._entries.items()}

    def result(self) -> IndexedResult:
        return IndexedResult.from_mapping(self.snapshot())

    def __len__(self) -> int:
        return len(self._entries)

    def occurrence_count(self) -> int:
        return sum(len(v) for v in self._entries.values())
