"""
Raw source providers for the disk collector.

Providers only fetch text. They return lists of lines and treat every failure
to run a command or read a file as "no data", which the parsers handle as an
empty source.
"""

import logging
import os
import subprocess  # nosec B404
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from src.i18n import _

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


def run_command(args: Sequence[str], timeout: int = DEFAULT_TIMEOUT) -> List[str]:
    """Run a command and return its stdout lines, or [] if it failed."""
    try:
        result = subprocess.run(  # nosec B603
            list(args),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        logger.debug("Command not found: %s", args[0])
        return []
    except subprocess.TimeoutExpired:
        logger.warning(_("Command timed out after %ss: %s"), timeout, " ".join(args))
        return []
    except OSError as error:
        logger.warning(_("Failed to run %s: %s"), " ".join(args), error)
        return []

    if result.returncode != 0:
        logger.debug(
            "Command %s exited with %s: %s",
            " ".join(args),
            result.returncode,
            (result.stderr or "").strip(),
        )
        return []
    return result.stdout.splitlines()


def read_file_lines(path: str) -> List[str]:
    """Read a text file into lines, or [] if it cannot be read."""
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as file:
            return file.read().splitlines()
    except OSError as error:
        logger.debug("Cannot read %s: %s", path, error)
        return []


def check_partition_name(partition_name: str) -> None:
    if not partition_name or "/" in partition_name:
        raise ValueError(_("Invalid partition name: %r") % partition_name)


class DiskSourceProvider(ABC):
    """Supplies the raw text sources the disk parsers consume."""

    @abstractmethod
    def get_valid_devices(self) -> List[str]:
        """Names of the devices that are in scope for this snapshot."""

    @abstractmethod
    def get_mount_lines(self) -> List[str]:
        """Mount table lines ("/dev/ada0p2 on /usr (ufs, local)")."""

    @abstractmethod
    def get_counter_lines(self) -> List[str]:
        """Per-device throughput counter lines."""

    @abstractmethod
    def get_geom_disk_lines(self) -> List[str]:
        """Disk-level geometry listing."""

    @abstractmethod
    def get_geom_partition_lines(self) -> List[str]:
        """Partition-level geometry listing."""

    @abstractmethod
    def get_minor_number_lines(self, partition_name: str) -> List[str]:
        """Output of the per-partition minor number lookup."""


class FreeBSDSourceProvider(DiskSourceProvider):
    """Runs the FreeBSD base system tools."""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def _run(self, *args: str) -> List[str]:
        return run_command(args, timeout=self.timeout)

    def get_valid_devices(self) -> List[str]:
        devices: List[str] = []
        for line in self._run("sysctl", "-n", "kern.disks"):
            devices.extend(line.split())
        return devices

    def get_mount_lines(self) -> List[str]:
        return self._run("mount")

    def get_counter_lines(self) -> List[str]:
        return self._run("iostat", "-Ix")

    def get_geom_disk_lines(self) -> List[str]:
        return self._run("geom", "disk", "list")

    def get_geom_partition_lines(self) -> List[str]:
        return self._run("geom", "part", "list")

    def get_minor_number_lines(self, partition_name: str) -> List[str]:
        check_partition_name(partition_name)
        # FreeBSD has no major number; the inode of the /dev entry is the minor
        return self._run("stat", "-f", "%i", f"/dev/{partition_name}")


class CapturedSourceProvider(DiskSourceProvider):
    """
    Replays command outputs captured on another host.

    Expected files in ``directory``: mount.txt, iostat.txt, geom_disk.txt,
    geom_part.txt, kern_disks.txt and minor/<partition>.txt. Any missing file
    is an empty source.
    """

    def __init__(self, directory: str):
        self.directory = directory

    def _read(self, *parts: str) -> List[str]:
        return read_file_lines(os.path.join(self.directory, *parts))

    def get_valid_devices(self) -> List[str]:
        devices: List[str] = []
        for line in self._read("kern_disks.txt"):
            devices.extend(line.split())
        return devices

    def get_mount_lines(self) -> List[str]:
        return self._read("mount.txt")

    def get_counter_lines(self) -> List[str]:
        return self._read("iostat.txt")

    def get_geom_disk_lines(self) -> List[str]:
        return self._read("geom_disk.txt")

    def get_geom_partition_lines(self) -> List[str]:
        return self._read("geom_part.txt")

    def get_minor_number_lines(self, partition_name: str) -> List[str]:
        check_partition_name(partition_name)
        return self._read("minor", f"{partition_name}.txt")


def first_line(lines: List[str]) -> Optional[str]:
    """First non-blank line, stripped, or None."""
    for line in lines:
        if line.strip():
            return line.strip()
    return None
