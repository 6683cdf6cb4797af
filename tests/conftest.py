"""
Pytest configuration and shared fixtures for sysinventory tests.
"""

from typing import Dict, List

import pytest

from src.sysinventory.collection.sources import DiskSourceProvider

MOUNT_OUTPUT = """\
/dev/ada0p2 on / (ufs, local, journaled soft-updates)
devfs on /dev (devfs)
/dev/ada0p4 on /usr/home (ufs, local, soft-updates)
zroot/tmp on /tmp (zfs, local, noatime, nosuid, nfsv4acls)
"""

IOSTAT_OUTPUT = """\
                        extended device statistics
device       r/i       w/i        kr/i        kw/i qlen   tsvc_t/i      sb/i
ada0     33416.0   25764.0   1143852.5    760188.0    0      162.1      85.5
ada1       120.0      10.0       480.0        40.0    0        0.3       0.1
cd0           16.0       0.0        17.0         0.0    0        0.0       0.0
pass0          0.0       0.0         0.0         0.0    0        0.0       0.0
"""

GEOM_DISK_OUTPUT = """\
Geom name: ada0
Providers:
1. Name: ada0
   Mediasize: 500107862016 (466G)
   Sectorsize: 512
   Mode: r2w2e3
   descr: Samsung SSD 850 EVO 500GB
   lunid: 5002538d4042a3f1
   ident: S21JNXAG123456
   rotationrate: 0
   fwsectors: 63
   fwheads: 16

Geom name: cd0
Providers:
1. Name: cd0
   Mediasize: 0 (0B)
   descr: VBOX CD-ROM
   ident: (null)

Geom name: ada1
Providers:
1. Name: ada1
   Mediasize: 8589934592 (8.0G)
   descr: VBOX HARDDISK
   ident: (null)
"""

GEOM_PART_OUTPUT = """\
Geom name: ada0
modified: false
state: OK
fwheads: 16
fwsectors: 63
last: 976773127
first: 40
entries: 128
scheme: GPT
Providers:
1. Name: ada0p1
   Mediasize: 524288 (512K)
   Sectorsize: 512
   Mode: r0w0e0
   efimedia: HD(1,GPT,5a2c7f0e-1bd1-11ee-8e6f-0800279c3a10,0x28,0x400)
   rawuuid: 5a2c7f0e-1bd1-11ee-8e6f-0800279c3a10
   rawtype: 83bd6b9d-7f41-11dc-be0b-001560b84f0f
   label: gptboot0
   length: 524288
   offset: 20480
   type: freebsd-boot
   index: 1
   end: 1063
   start: 40
2. Name: ada0p2
   Mediasize: 107374182400 (100G)
   Sectorsize: 512
   rawuuid: 5a3f2b11-1bd1-11ee-8e6f-0800279c3a10
   rawtype: 516e7cb6-6ecf-11d6-8ff8-00022d09712b
   type: freebsd-ufs
   index: 2
10. Name: ada0p10
   Mediasize: 1048576 (1.0M)
   rawuuid: 5a4b0c22-1bd1-11ee-8e6f-0800279c3a10
   type: freebsd-ufs
4. Name: ada0p4
   Mediasize: 380000000000 (354G)
   rawuuid: 5a5d1e33-1bd1-11ee-8e6f-0800279c3a10
   type: freebsd-ufs
Consumers:
1. Name: ada0
   Mediasize: 500107862016 (466G)
   Sectorsize: 512
   Mode: r2w2e5
"""

KERN_DISKS_OUTPUT = "ada1 ada0 cd0\n"


class StaticSourceProvider(DiskSourceProvider):
    """Provider returning fixed text, used to drive the collector in tests."""

    def __init__(
        self,
        devices: str = KERN_DISKS_OUTPUT,
        mount: str = MOUNT_OUTPUT,
        counters: str = IOSTAT_OUTPUT,
        geom_disk: str = GEOM_DISK_OUTPUT,
        geom_part: str = GEOM_PART_OUTPUT,
        minors: Dict[str, str] = None,
    ):
        self.devices = devices
        self.mount = mount
        self.counters = counters
        self.geom_disk = geom_disk
        self.geom_part = geom_part
        self.minors = minors or {}
        self.minor_requests: List[str] = []

    def get_valid_devices(self) -> List[str]:
        return self.devices.split()

    def get_mount_lines(self) -> List[str]:
        return self.mount.splitlines()

    def get_counter_lines(self) -> List[str]:
        return self.counters.splitlines()

    def get_geom_disk_lines(self) -> List[str]:
        return self.geom_disk.splitlines()

    def get_geom_partition_lines(self) -> List[str]:
        return self.geom_part.splitlines()

    def get_minor_number_lines(self, partition_name: str) -> List[str]:
        self.minor_requests.append(partition_name)
        value = self.minors.get(partition_name)
        return [value] if value is not None else []


@pytest.fixture
def static_provider():
    """Provider loaded with a realistic FreeBSD host."""
    return StaticSourceProvider(minors={"ada0p1": "98", "ada0p2": "99"})


@pytest.fixture
def provider_factory():
    """Build a StaticSourceProvider with selected sources replaced."""
    return StaticSourceProvider
