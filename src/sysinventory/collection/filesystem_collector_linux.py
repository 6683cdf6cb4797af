"""
Linux file system collector for sysinventory.

File stores come from /proc/self/mounts with pseudo and kernel file systems
removed. UUIDs are resolved through the symlinks in /dev/disk/by-uuid.
"""

import logging
import os
import shutil
from typing import Dict, Iterable, List, Optional

from src.i18n import _
from src.sysinventory.collection.disk_models import FileStore
from src.sysinventory.collection.parse_session import ParseSession
from src.sysinventory.collection.sources import read_file_lines

logger = logging.getLogger(__name__)

# Virtual file systems that never hold user data. tmpfs is handled apart
# because it also backs RAM disks.
PSEUDO_FILESYSTEMS = frozenset(
    [
        "rootfs",
        "sysfs",
        "proc",
        "devtmpfs",
        "devpts",
        "securityfs",
        "cgroup",
        "cgroup2",
        "pstore",
        "hugetlbfs",
        "configfs",
        "selinuxfs",
        "systemd-1",
        "binfmt_misc",
        "mqueue",
        "debugfs",
        "tracefs",
        "nfsd",
        "sunrpc",
        "rpc_pipefs",
        "fusectl",
    ]
)

# Mount trees that are system plumbing even when backed by tmpfs
EXCLUDED_PATHS = ("/dev/shm", "/run", "/sys", "/proc")

FILE_NR_FIELDS = 3


def _path_starts_with(prefixes: Iterable[str], path: str) -> bool:
    """True if path equals one of the prefixes or lies below it."""
    for prefix in prefixes:
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def _unescape(value: str) -> str:
    return value.replace("\\040", " ")


def build_uuid_map(
    uuid_dir: str, uuid_map: Optional[Dict[str, str]] = None
) -> Dict[str, str]:
    """
    Map canonical device paths (e.g. /dev/sda1) to lower-cased UUIDs.

    The map is cleared before it is filled.
    """
    if uuid_map is None:
        uuid_map = {}
    uuid_map.clear()
    try:
        entries = list(os.scandir(uuid_dir))
    except OSError as error:
        logger.debug("Cannot list %s: %s", uuid_dir, error)
        return uuid_map

    for entry in entries:
        try:
            uuid_map[os.path.realpath(entry.path)] = entry.name.lower()
        except OSError as error:
            logger.error(
                _("Couldn't get canonical path for %s: %s"), entry.name, error
            )
    return uuid_map


def describe_volume(volume: str, fs_type: str) -> str:
    if volume.startswith("/dev"):
        return "Local Disk"
    if volume == "tmpfs":
        return "Ram Disk"
    if fs_type.startswith("nfs") or fs_type == "cifs":
        return "Network Disk"
    return "Mount Point"


def _space(path: str) -> tuple:
    try:
        usage = shutil.disk_usage(path)
    except OSError:
        return 0, 0
    return usage.free, usage.total


def parse_mounts(lines: Iterable[str], uuid_map: Dict[str, str]) -> List[FileStore]:
    """
    Turn mount table rows into FileStore records.

    Row layout (fstab(5)): volume, path, type, options, dump, pass. Spaces
    inside fields are written as \\040.
    """
    stores: List[FileStore] = []
    for line in lines:
        split = line.split(" ")
        if len(split) < 6:
            continue

        path = _unescape(split[1])
        fs_type = split[2]
        if (
            fs_type in PSEUDO_FILESYSTEMS
            or path == "/dev"
            or _path_starts_with(EXCLUDED_PATHS, path)
        ):
            continue

        volume = _unescape(split[0])
        name = "/" if path == "/" else volume
        usable, total = _space(path)
        stores.append(
            FileStore(
                name=name,
                volume=volume,
                mount=path,
                description=describe_volume(volume, fs_type),
                type=fs_type,
                uuid=uuid_map.get(split[0], ""),
                usable_space=usable,
                total_space=total,
            )
        )
    return stores


class FileSystemCollectorLinux:
    """Collects mounted file stores and file descriptor counts on Linux."""

    def __init__(
        self,
        mounts_file: str = "/proc/self/mounts",
        uuid_dir: str = "/dev/disk/by-uuid",
        file_nr_path: str = "/proc/sys/fs/file-nr",
    ):
        self.logger = logging.getLogger(__name__)
        self.mounts_file = mounts_file
        self.uuid_dir = uuid_dir
        self.file_nr_path = file_nr_path

    def get_file_stores(self) -> List[FileStore]:
        session = ParseSession()
        build_uuid_map(self.uuid_dir, session.uuid_map)
        return parse_mounts(read_file_lines(self.mounts_file), session.uuid_map)

    def get_open_file_descriptors(self) -> int:
        return self._get_file_descriptors(0)

    def get_max_file_descriptors(self) -> int:
        return self._get_file_descriptors(2)

    def _get_file_descriptors(self, index: int) -> int:
        """
        Read one value of file-nr: 0 = allocated, 1 = unused (2.6+),
        2 = maximum.
        """
        if index < 0 or index >= FILE_NR_FIELDS:
            raise ValueError(_("Index must be between 0 and 2."))
        lines = read_file_lines(self.file_nr_path)
        if not lines:
            return 0
        fields = lines[0].split()
        try:
            return int(fields[index])
        except (IndexError, ValueError):
            self.logger.debug("Unexpected file-nr content: %r", lines[0])
            return 0
