"""Snapshots of GET responses keyed by request path."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Snapshot:
    payload: Any
    fetched_at: float


class ResponseCache:
    """A snapshot older than ``stale_seconds`` is treated as absent.

    At capacity the least recently fetched path is dropped.
    """

    def __init__(
        self,
        stale_seconds: float = 300.0,
        capacity: int = 200,
        clock: Callable[[], float] = time.time,
    ):
        self._snapshots: OrderedDict[str, Snapshot] = OrderedDict()
        self._stale_seconds = stale_seconds
        self._capacity = max(1, capacity)
        self._clock = clock
        self._lock = threading.Lock()
        self._served = 0
        self._refetched = 0

    def fresh(self, path: str) -> Optional[Snapshot]:
        with self._lock:
            snap = self._snapshots.get(path)
            if snap is None or self._clock() - snap.fetched_at > self._stale_seconds:
                self._refetched += 1
                return None
            self._served += 1
            return snap

    def store(self, path: str, payload: Any) -> Snapshot:
        snap = Snapshot(payload=payload, fetched_at=self._clock())
        with self._lock:
            self._snapshots.pop(path, None)
            while len(self._snapshots) >= self._capacity:
                self._snapshots.popitem(last=False)
            self._snapshots[path] = snap
        return snap

    def invalidate(self, prefix: str) -> int:
        with self._lock:
            doomed = [path for path in self._snapshots if path.startswith(prefix)]
            for path in doomed:
                del self._snapshots[path]
            return len(doomed)

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "paths": len(self._snapshots),
                "served": self._served,
                "refetched": self._refetched,
            }


__all__ = ["ResponseCache", "Snapshot"]
