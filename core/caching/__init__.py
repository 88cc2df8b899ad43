"""
Tailorbook Core Caching — Revision-Keyed Derivation Memo
==========================================================
Derived views (dashboard, customer directory, worker ledgers) are pure
functions of the live collection snapshots. A memo entry remembers the
snapshot revisions it was computed from and is reused only while those
revisions are unchanged.

Doctrine: the memo is disposable; every entry is rebuildable from the
snapshots. Snapshot delivery invalidates by tag (collection name).
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterable, Set, Tuple


# ══════════════════════════════════════════════════════════════
# MEMO ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass
class MemoEntry:
    key: Hashable
    value: Any
    revision: Tuple[Hashable, ...]


# ══════════════════════════════════════════════════════════════
# STATISTICS
# ══════════════════════════════════════════════════════════════

@dataclass
class CacheStats:
    """Memo performance statistics."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    invalidations: int = 0
    total_entries: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "invalidations": self.invalidations,
            "total_entries": self.total_entries,
            "hit_rate": round(self.hit_rate, 4),
        }


# ══════════════════════════════════════════════════════════════
# DERIVATION MEMO (LRU + revision check + tag invalidation)
# ══════════════════════════════════════════════════════════════

class DerivationMemo:
    """
    LRU memo for derived views.

    ``get_or_compute(key, revision, compute, tags)`` returns the stored
    value when the entry's revision equals ``revision``; otherwise it
    calls ``compute()`` and stores the result.
    """

    def __init__(self, max_size: int = 256) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive.")
        self._max_size = max_size
        self._entries: "OrderedDict[Hashable, MemoEntry]" = OrderedDict()
        self._tags: Dict[str, Set[Hashable]] = {}  # tag → keys
        self._stats = CacheStats()

    def get_or_compute(
        self,
        key: Hashable,
        revision: Tuple[Hashable, ...],
        compute: Callable[[], Any],
        tags: Iterable[str] = (),
    ) -> Any:
        entry = self._entries.get(key)
        if entry is not None and entry.revision == revision:
            self._entries.move_to_end(key)
            self._stats.hits += 1
            return entry.value

        self._stats.misses += 1
        value = compute()
        if key not in self._entries and len(self._entries) >= self._max_size:
            self._evict_lru()
        self._entries[key] = MemoEntry(key=key, value=value, revision=revision)
        self._entries.move_to_end(key)
        for tag in tags:
            self._tags.setdefault(tag, set()).add(key)
        self._stats.total_entries = len(self._entries)
        return value

    def invalidate_by_tag(self, tag: str) -> int:
        """Drop every entry derived from ``tag``. Returns the count dropped."""
        keys = self._tags.pop(tag, set())
        count = 0
        for key in keys:
            if key in self._entries:
                del self._entries[key]
                count += 1
        self._stats.invalidations += count
        self._stats.total_entries = len(self._entries)
        return count

    def clear(self) -> None:
        self._entries.clear()
        self._tags.clear()
        self._stats.total_entries = 0

    @property
    def stats(self) -> CacheStats:
        return self._stats

    @property
    def size(self) -> int:
        return len(self._entries)

    def _evict_lru(self) -> None:
        if not self._entries:
            return
        oldest = next(iter(self._entries))
        del self._entries[oldest]
        for keys in self._tags.values():
            keys.discard(oldest)
        self._stats.evictions += 1
