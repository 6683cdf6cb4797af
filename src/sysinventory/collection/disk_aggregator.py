"""
Aggregation of disk fragments into the final snapshot.

The parsers hand their fragments to a DiskAggregator, which owns the
device-keyed map of the current ParseSession, resolves partition minor
numbers and produces the sorted output.
"""

import logging
from typing import Dict, Iterable, List, Optional

from src.sysinventory.collection.disk_models import DiskSnapshot, DiskStore, Partition
from src.sysinventory.collection.parse_session import (
    LOOKUP_FAILED,
    ParseSession,
)
from src.sysinventory.collection.sources import (
    DiskSourceProvider,
    check_partition_name,
    first_line,
)

MINOR_SOURCE = "minor"


class MinorNumberResolver:  # pylint: disable=too-few-public-methods
    """Looks up the minor number of one partition, 0 when unknown."""

    def __init__(self, provider: DiskSourceProvider, session: ParseSession):
        self.logger = logging.getLogger(__name__)
        self.provider = provider
        self.session = session

    def resolve(self, partition_name: str) -> int:
        """Raises ValueError for an empty name or one containing a slash."""
        check_partition_name(partition_name)
        try:
            answer = first_line(self.provider.get_minor_number_lines(partition_name))
        except Exception as error:  # pylint: disable=broad-exception-caught
            self.logger.debug(
                "Minor number lookup for %s failed: %s", partition_name, error
            )
            self.session.diagnostics.record(MINOR_SOURCE, LOOKUP_FAILED)
            return 0

        if answer is None:
            self.session.diagnostics.record(MINOR_SOURCE, LOOKUP_FAILED)
            return 0
        try:
            return int(answer.split()[0])
        except ValueError:
            self.logger.debug(
                "Unexpected minor number for %s: %r", partition_name, answer
            )
            self.session.diagnostics.record(MINOR_SOURCE, LOOKUP_FAILED)
            return 0


class DiskAggregator:
    """Merges disk and partition fragments keyed by device name."""

    def __init__(
        self,
        session: ParseSession,
        resolver: Optional[MinorNumberResolver] = None,
    ):
        self.session = session
        self.resolver = resolver

    def get_disk(self, name: str) -> Optional[DiskStore]:
        return self.session.disks.get(name)

    def get_or_create_disk(self, name: str) -> DiskStore:
        """Return the disk for ``name``, registering an empty one if needed."""
        disk = self.session.disks.get(name)
        if disk is None:
            disk = DiskStore(name=name)
            self.session.disks[name] = disk
        return disk

    def put_disk(self, disk: DiskStore) -> None:
        """Insert or replace a disk built from a complete source line."""
        self.session.disks[disk.name] = disk

    def attach_partitions(
        self, disk: DiskStore, partitions: Iterable[Partition]
    ) -> None:
        """
        Finalize a batch of partitions and attach them to ``disk``.

        Minor numbers are resolved one partition at a time; partitions already
        attached by an earlier block for the same disk are kept unless a new
        one has the same name.
        """
        merged: Dict[str, Partition] = {p.name: p for p in disk.partitions}
        for partition in partitions:
            if self.resolver is not None:
                partition.minor_number = self.resolver.resolve(partition.name)
            merged[partition.name] = partition
        disk.partitions = sorted(merged.values(), key=Partition.sort_key)

    def build_snapshot(self) -> DiskSnapshot:
        """Sorted, deterministic view of everything merged so far."""
        disks: List[DiskStore] = sorted(
            self.session.disks.values(), key=DiskStore.sort_key
        )
        for disk in disks:
            disk.partitions.sort(key=Partition.sort_key)
        return DiskSnapshot(
            disks=disks,
            timestamp=self.session.timestamp,
            diagnostics=self.session.diagnostics.to_dict(),
        )
