"""
Entity model for storage inventory snapshots.

DiskStore owns its Partition records. Every numeric field defaults to zero
and every string field to "" so a missing source never leaves a hole in the
serialized output.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

_DIGITS = re.compile(r"(\d+)")


def natural_key(name: str) -> Tuple[Tuple[Tuple[int, Any], ...], str]:
    """
    Sort key comparing digit runs numerically ("ada2" < "ada10").

    The raw name is the tie-breaker, which keeps the order total.
    """
    parts = []
    for chunk in _DIGITS.split(name):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk))
    return tuple(parts), name


@dataclass
class Partition:
    """One addressable region of a DiskStore."""

    identification: str
    name: str
    size_bytes: int = 0
    uuid: str = ""
    type: str = ""
    mount_point: str = ""
    minor_number: int = 0

    def sort_key(self):
        return natural_key(self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identification": self.identification,
            "name": self.name,
            "size_bytes": self.size_bytes,
            "uuid": self.uuid,
            "type": self.type,
            "mount_point": self.mount_point,
            "minor_number": self.minor_number,
        }


@dataclass
class DiskStore:  # pylint: disable=too-many-instance-attributes
    """
    One physical or logical storage device.

    timestamp is epoch milliseconds of the counter sample; 0 when the device
    was only seen by a geometry source.
    """

    name: str
    model: str = ""
    serial: str = ""
    size_bytes: int = 0
    reads_count: int = 0
    writes_count: int = 0
    read_bytes: int = 0
    write_bytes: int = 0
    transfer_time_ms: int = 0
    timestamp: int = 0
    partitions: List[Partition] = field(default_factory=list)

    def sort_key(self):
        return natural_key(self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "model": self.model,
            "serial": self.serial,
            "size_bytes": self.size_bytes,
            "reads_count": self.reads_count,
            "writes_count": self.writes_count,
            "read_bytes": self.read_bytes,
            "write_bytes": self.write_bytes,
            "transfer_time_ms": self.transfer_time_ms,
            "timestamp": self.timestamp,
            "partitions": [partition.to_dict() for partition in self.partitions],
        }


@dataclass
class FileStore:  # pylint: disable=too-many-instance-attributes
    """A mounted file system (volume, pool, concrete file system)."""

    name: str
    volume: str
    mount: str
    description: str
    type: str
    uuid: str = ""
    usable_space: int = 0
    total_space: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "volume": self.volume,
            "mount": self.mount,
            "description": self.description,
            "type": self.type,
            "uuid": self.uuid,
            "usable_space": self.usable_space,
            "total_space": self.total_space,
        }


@dataclass
class DiskSnapshot:
    """Result of one collection pass."""

    disks: List[DiskStore]
    timestamp: int
    diagnostics: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def to_dict(self, include_diagnostics: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "disks": [disk.to_dict() for disk in self.disks],
        }
        if include_diagnostics:
            payload["diagnostics"] = self.diagnostics
        return payload
