"""
Line parsers for the FreeBSD disk sources.

- mount:           partition -> mount point
- iostat -Ix:      per-device counters
- geom disk list:  disk size, model and serial
- geom part list:  partitions of each disk

Every parser is tolerant: a line that does not match is skipped and a field
that does not parse falls back to zero. Both are counted in the session
diagnostics instead of being raised.
"""

import logging
import math
import re
from enum import Enum
from typing import Callable, Iterable, List, Optional

from src.sysinventory.collection.disk_aggregator import DiskAggregator
from src.sysinventory.collection.disk_models import DiskStore, Partition
from src.sysinventory.collection.parse_session import (
    DEFAULTED,
    IGNORED,
    LINES,
    OUT_OF_SCOPE,
    SKIPPED,
    ParseDiagnostics,
    ParseSession,
)

logger = logging.getLogger(__name__)

MOUNT_SOURCE = "mount"
COUNTER_SOURCE = "iostat"
GEOM_DISK_SOURCE = "geom_disk"
GEOM_PART_SOURCE = "geom_part"

MOUNT_PATTERN = re.compile(r"^/dev/(\S+) on (\S+)(?: .*)?$")

BOUNDARY_PREFIX = "Geom name:"
SUB_HEADER_MARKER = "Name:"

# Partition test: (line, disk name) -> partition name or None
PartitionNameRule = Callable[[str, str], Optional[str]]


def _last_token(line: str) -> str:
    parts = line.split()
    return parts[-1] if parts else ""


def _parse_float(
    value: str, diagnostics: ParseDiagnostics, source: str, default: float = 0.0
) -> float:
    try:
        number = float(value)
    except ValueError:
        diagnostics.record(source, DEFAULTED)
        return default
    if not math.isfinite(number):
        diagnostics.record(source, DEFAULTED)
        return default
    return number


def _parse_int(
    value: str, diagnostics: ParseDiagnostics, source: str, default: int = 0
) -> int:
    try:
        return int(value)
    except ValueError:
        diagnostics.record(source, DEFAULTED)
        return default


def geom_partition_rule(line: str, disk_name: str) -> Optional[str]:
    """
    Recognize a ``N. Name: <partition>`` line inside a geom part block.

    The name must extend the disk name with a non-digit suffix: ``ada0p1``
    belongs to ``ada0`` while ``ada0`` itself (the Consumers entry) and
    ``ada01`` do not.
    """
    if SUB_HEADER_MARKER not in line:
        return None
    candidate = _last_token(line)
    if not candidate.startswith(disk_name) or "/" in candidate:
        return None
    suffix = candidate[len(disk_name):]
    if not suffix or suffix[0].isdigit():
        return None
    return candidate


def parse_mount_table(lines: Iterable[str], session: ParseSession) -> None:
    """Rebuild ``session.mount_map`` from ``mount`` output."""
    diagnostics = session.diagnostics
    session.mount_map.clear()
    for line in lines:
        diagnostics.record(MOUNT_SOURCE, LINES)
        match = MOUNT_PATTERN.match(line.strip())
        if not match:
            diagnostics.record(MOUNT_SOURCE, SKIPPED)
            continue
        session.mount_map[match.group(1)] = match.group(2)


def parse_counter_lines(
    lines: Iterable[str], session: ParseSession, aggregator: DiskAggregator
) -> None:
    """
    Build a DiskStore per valid device from ``iostat -Ix`` output.

    Columns: device r/i w/i kr/i kw/i qlen tsvc_t/i sb/i. Kilobytes are
    converted to bytes and busy seconds to milliseconds. Values are truncated.
    """
    diagnostics = session.diagnostics
    for line in lines:
        diagnostics.record(COUNTER_SOURCE, LINES)
        split = line.split()
        if len(split) < 7 or not session.is_valid_device(split[0]):
            diagnostics.record(COUNTER_SOURCE, SKIPPED)
            continue

        def field(index: int, scale: int = 1) -> int:
            if index >= len(split):
                diagnostics.record(COUNTER_SOURCE, DEFAULTED)
                return 0
            value = _parse_float(split[index], diagnostics, COUNTER_SOURCE) * scale
            if not math.isfinite(value):
                diagnostics.record(COUNTER_SOURCE, DEFAULTED)
                return 0
            return int(value)

        store = DiskStore(
            name=split[0],
            reads_count=field(1),
            writes_count=field(2),
            read_bytes=field(3, 1024),
            write_bytes=field(4, 1024),
            transfer_time_ms=field(7, 1000),
            timestamp=session.timestamp,
        )
        previous = aggregator.get_disk(store.name)
        if previous is not None:
            # Counters are replaced, geometry learned earlier is kept
            store.model = previous.model
            store.serial = previous.serial
            store.size_bytes = previous.size_bytes
            store.partitions = previous.partitions
        aggregator.put_disk(store)


class ParserState(Enum):
    """Position of a geom parser relative to the entities it is filling."""

    NO_ENTITY = "no_entity"
    IN_DISK = "in_disk"
    IN_PARTITION = "in_partition"


class GeomDiskListParser:
    """
    State machine over ``geom disk list`` output.

    A ``Geom name: <dev>`` line starts a disk block; indented attribute lines
    that follow fill that disk until the next block. Blocks for devices
    outside the valid set are skipped entirely.
    """

    source = GEOM_DISK_SOURCE

    def __init__(self, session: ParseSession, aggregator: DiskAggregator):
        self.session = session
        self.aggregator = aggregator
        self.state = ParserState.NO_ENTITY
        self.current: Optional[DiskStore] = None

    def parse(self, lines: Iterable[str]) -> None:
        for raw in lines:
            self.session.diagnostics.record(self.source, LINES)
            line = raw.strip()
            if line.startswith(BOUNDARY_PREFIX):
                self._enter_disk(_last_token(line))
            elif self.state is ParserState.NO_ENTITY:
                if line:
                    self.session.diagnostics.record(self.source, IGNORED)
            else:
                self._apply_attribute(line)
        self.finish()

    def _enter_disk(self, device: str) -> None:
        self.finish()
        if not self.session.is_valid_device(device):
            logger.debug("Skipping geom block for out-of-scope device %s", device)
            self.session.diagnostics.record(self.source, OUT_OF_SCOPE)
            return
        self.current = self.aggregator.get_or_create_disk(device)
        self.state = ParserState.IN_DISK

    def _apply_attribute(self, line: str) -> None:
        disk = self.current
        if line.startswith("Mediasize:"):
            split = line.split()
            if len(split) > 1:
                disk.size_bytes = _parse_int(
                    split[1], self.session.diagnostics, self.source
                )
            else:
                self.session.diagnostics.record(self.source, SKIPPED)
        elif line.startswith("descr:"):
            disk.model = line[len("descr:"):].strip()
        elif line.startswith("ident:"):
            disk.serial = line[len("ident:"):].replace("(null)", "").strip()

    def finish(self) -> None:
        """Close the current block; disks are registered on entry."""
        self.current = None
        self.state = ParserState.NO_ENTITY


class GeomPartitionListParser:
    """
    State machine over ``geom part list`` output.

    Inside a disk block, a line accepted by ``partition_rule`` opens a pending
    partition; the attribute lines after it fill that partition. Pending
    partitions are collected per disk and handed to the aggregator when the
    block ends, either at the next ``Geom name:`` line or at end of input.
    """

    source = GEOM_PART_SOURCE

    def __init__(
        self,
        session: ParseSession,
        aggregator: DiskAggregator,
        partition_rule: PartitionNameRule = geom_partition_rule,
    ):
        self.session = session
        self.aggregator = aggregator
        self.partition_rule = partition_rule
        self.state = ParserState.NO_ENTITY
        self.disk: Optional[DiskStore] = None
        self.partition: Optional[Partition] = None
        self.finished: List[Partition] = []

    def parse(self, lines: Iterable[str]) -> None:
        diagnostics = self.session.diagnostics
        for raw in lines:
            diagnostics.record(self.source, LINES)
            line = raw.strip()
            if line.startswith(BOUNDARY_PREFIX):
                self._enter_disk(_last_token(line))
                continue
            if self.state is ParserState.NO_ENTITY:
                if line:
                    diagnostics.record(self.source, IGNORED)
                continue
            if SUB_HEADER_MARKER in line:
                self._enter_partition(line)
                continue
            if self.state is ParserState.IN_PARTITION:
                self._apply_attribute(line)
        self.finish()

    def _flush_partition(self) -> None:
        if self.partition is not None:
            self.finished.append(self.partition)
            self.partition = None

    def _enter_disk(self, device: str) -> None:
        self.finish()
        if not self.session.is_valid_device(device):
            logger.debug("Skipping geom block for out-of-scope device %s", device)
            self.session.diagnostics.record(self.source, OUT_OF_SCOPE)
            return
        self.disk = self.aggregator.get_or_create_disk(device)
        self.state = ParserState.IN_DISK

    def _enter_partition(self, line: str) -> None:
        self._flush_partition()
        name = self.partition_rule(line, self.disk.name)
        if name is None:
            self.state = ParserState.IN_DISK
            return
        self.partition = Partition(
            identification=name,
            name=name,
            mount_point=self.session.mount_map.get(name, ""),
        )
        self.state = ParserState.IN_PARTITION

    def _apply_attribute(self, line: str) -> None:
        split = line.split()
        if len(split) < 2:
            if line:
                self.session.diagnostics.record(self.source, SKIPPED)
            return
        partition = self.partition
        if line.startswith("Mediasize:"):
            partition.size_bytes = _parse_int(
                split[1], self.session.diagnostics, self.source
            )
        elif line.startswith("rawuuid:"):
            partition.uuid = split[1]
        elif line.startswith("type:"):
            partition.type = split[1]

    def finish(self) -> None:
        """Flush the pending partition and attach the block's partitions to its disk."""
        self._flush_partition()
        if self.disk is not None:
            self.aggregator.attach_partitions(self.disk, self.finished)
        self.finished = []
        self.disk = None
        self.state = ParserState.NO_ENTITY
