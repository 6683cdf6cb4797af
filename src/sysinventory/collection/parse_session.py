"""
Per-invocation parse state for the disk collector.

A ParseSession is created at the start of every snapshot and dropped at the
end of it. Nothing here is module-level, so concurrent or failed snapshots
cannot leak data into each other.
"""

import time
from collections import Counter
from typing import Dict, Iterable, Optional, Set

from src.sysinventory.collection.disk_models import DiskStore

# Diagnostic event kinds
LINES = "lines"
SKIPPED = "skipped"
DEFAULTED = "defaulted"
IGNORED = "ignored"
OUT_OF_SCOPE = "out_of_scope"
UNAVAILABLE = "unavailable"
LOOKUP_FAILED = "lookup_failed"


class ParseDiagnostics:
    """Counts of lines that were skipped or degraded, per source."""

    def __init__(self):
        self._counts: Dict[str, Counter] = {}

    def record(self, source: str, kind: str, count: int = 1) -> None:
        self._counts.setdefault(source, Counter())[kind] += count

    def count(self, source: str, kind: str) -> int:
        return self._counts.get(source, Counter())[kind]

    def total(self, kind: str) -> int:
        return sum(counter[kind] for counter in self._counts.values())

    def to_dict(self) -> Dict[str, Dict[str, int]]:
        return {
            source: dict(sorted(counter.items()))
            for source, counter in sorted(self._counts.items())
        }


class ParseSession:  # pylint: disable=too-few-public-methods
    """Owns the maps shared by the parsers during one snapshot."""

    def __init__(
        self,
        valid_devices: Optional[Iterable[str]] = None,
        timestamp: Optional[int] = None,
    ):
        self.valid_devices: Set[str] = set(valid_devices or ())
        # device name -> DiskStore
        self.disks: Dict[str, DiskStore] = {}
        # partition name -> mount point
        self.mount_map: Dict[str, str] = {}
        # canonical device path -> uuid
        self.uuid_map: Dict[str, str] = {}
        self.diagnostics = ParseDiagnostics()
        # Captured once so every disk in the snapshot reports the same instant
        self.timestamp = timestamp if timestamp is not None else int(time.time() * 1000)

    def is_valid_device(self, name: str) -> bool:
        return name in self.valid_devices
