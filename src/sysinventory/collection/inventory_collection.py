"""
Inventory collection module for sysinventory.
Selects the platform-specific collectors and assembles one JSON-ready payload.
"""

import logging
import platform
from typing import Any, Dict, Optional

from src.i18n import _
from src.sysinventory.collection.disk_collector_bsd import DiskCollectorBSD
from src.sysinventory.collection.filesystem_collector_linux import (
    FileSystemCollectorLinux,
)
from src.sysinventory.collection.sources import (
    CapturedSourceProvider,
    FreeBSDSourceProvider,
)
from src.sysinventory.core.config import ConfigManager


class InventoryCollector:
    """Collects storage inventory across supported platforms."""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        capture_dir: Optional[str] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.config = config or ConfigManager()
        self.system = platform.system()
        self.disk_collector: Optional[DiskCollectorBSD] = None
        self.filesystem_collector: Optional[FileSystemCollectorLinux] = None

        capture_dir = capture_dir or self.config.get_capture_dir()
        if capture_dir:
            self.disk_collector = DiskCollectorBSD(CapturedSourceProvider(capture_dir))
        elif self.system == "FreeBSD":
            self.disk_collector = DiskCollectorBSD(
                FreeBSDSourceProvider(timeout=self.config.get_command_timeout())
            )

        if self.system == "Linux" and not capture_dir:
            self.filesystem_collector = FileSystemCollectorLinux(
                mounts_file=self.config.get_mounts_file(),
                uuid_dir=self.config.get_uuid_dir(),
                file_nr_path=self.config.get_file_nr_path(),
            )

        if self.disk_collector is None and self.filesystem_collector is None:
            self.logger.warning(_("Unsupported platform: %s"), self.system)

    @property
    def supported(self) -> bool:
        return self.disk_collector is not None or self.filesystem_collector is not None

    def get_inventory(self) -> Dict[str, Any]:
        """
        Collect everything available on this platform.

        Parse diagnostics of the disk pass are always included, empty when no
        disk collector runs here.
        """
        if not self.supported:
            return {
                "platform": self.system,
                "error": _("Unsupported platform: %s") % self.system,
                "disks": [],
                "file_stores": [],
            }

        inventory: Dict[str, Any] = {
            "platform": self.system,
            "disks": [],
            "file_stores": [],
            "diagnostics": {},
        }

        if self.disk_collector is not None:
            snapshot = self.disk_collector.collect()
            inventory["timestamp"] = snapshot.timestamp
            inventory["disks"] = [disk.to_dict() for disk in snapshot.disks]
            inventory["diagnostics"] = snapshot.diagnostics

        if self.filesystem_collector is not None:
            inventory["file_stores"] = [
                store.to_dict()
                for store in self.filesystem_collector.get_file_stores()
            ]
            inventory["open_file_descriptors"] = (
                self.filesystem_collector.get_open_file_descriptors()
            )
            inventory["max_file_descriptors"] = (
                self.filesystem_collector.get_max_file_descriptors()
            )

        return inventory
