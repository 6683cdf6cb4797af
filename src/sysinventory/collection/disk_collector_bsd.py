"""
FreeBSD disk collector for sysinventory.

Runs one snapshot pass: valid devices, mount table, counters, disk geometry
and partition geometry, in that order, each source fully consumed before the
next one is read. A source that fails degrades to "no data" for that source
only.
"""

import logging
from typing import Callable, List, Optional

from src.i18n import _
from src.sysinventory.collection.disk_aggregator import (
    DiskAggregator,
    MinorNumberResolver,
)
from src.sysinventory.collection.disk_models import DiskSnapshot, DiskStore
from src.sysinventory.collection.disk_parsers_bsd import (
    COUNTER_SOURCE,
    GEOM_DISK_SOURCE,
    GEOM_PART_SOURCE,
    MOUNT_SOURCE,
    GeomDiskListParser,
    GeomPartitionListParser,
    PartitionNameRule,
    geom_partition_rule,
    parse_counter_lines,
    parse_mount_table,
)
from src.sysinventory.collection.parse_session import (
    DEFAULTED,
    SKIPPED,
    UNAVAILABLE,
    ParseSession,
)
from src.sysinventory.collection.sources import DiskSourceProvider

DEVICES_SOURCE = "kern_disks"


class DiskCollectorBSD:
    """Builds disk snapshots from a DiskSourceProvider."""

    def __init__(
        self,
        provider: DiskSourceProvider,
        partition_rule: PartitionNameRule = geom_partition_rule,
    ):
        self.logger = logging.getLogger(__name__)
        self.provider = provider
        self.partition_rule = partition_rule

    def _fetch(
        self, session: ParseSession, source: str, fetch: Callable[[], List[str]]
    ) -> List[str]:
        """Read one source; any provider failure becomes an empty source."""
        try:
            lines = fetch()
        except Exception as error:  # pylint: disable=broad-exception-caught
            self.logger.warning(_("Source %s unavailable: %s"), source, error)
            lines = []
        if not lines:
            session.diagnostics.record(source, UNAVAILABLE)
        return list(lines or [])

    def collect(self, timestamp: Optional[int] = None) -> DiskSnapshot:
        """Run a full pass and return the sorted snapshot."""
        session = ParseSession(timestamp=timestamp)
        session.valid_devices = set(
            self._fetch(session, DEVICES_SOURCE, self.provider.get_valid_devices)
        )

        aggregator = DiskAggregator(
            session, resolver=MinorNumberResolver(self.provider, session)
        )

        parse_mount_table(
            self._fetch(session, MOUNT_SOURCE, self.provider.get_mount_lines), session
        )
        parse_counter_lines(
            self._fetch(session, COUNTER_SOURCE, self.provider.get_counter_lines),
            session,
            aggregator,
        )
        GeomDiskListParser(session, aggregator).parse(
            self._fetch(session, GEOM_DISK_SOURCE, self.provider.get_geom_disk_lines)
        )
        GeomPartitionListParser(
            session, aggregator, partition_rule=self.partition_rule
        ).parse(
            self._fetch(
                session, GEOM_PART_SOURCE, self.provider.get_geom_partition_lines
            )
        )

        snapshot = aggregator.build_snapshot()
        self.logger.info(
            _("Collected %d disks (%d lines skipped, %d fields defaulted)"),
            len(snapshot.disks),
            session.diagnostics.total(SKIPPED),
            session.diagnostics.total(DEFAULTED),
        )
        return snapshot

    def get_disks(self) -> List[DiskStore]:
        """Disks of a fresh snapshot, sorted by name."""
        return self.collect().disks
