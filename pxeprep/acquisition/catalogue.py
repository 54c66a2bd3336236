"""The fixed set of boot assets and the asset directory skeleton."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping

from ..core.models import DownloadTask

TFTP_ROOT = Path("tftpboot")
ISO_ROOT = Path("isos")

IPXE_BASE_URL = "https://boot.ipxe.org"
WIMBOOT_URL = "https://github.com/ipxe/wimboot/releases/latest/download/wimboot"
MEMTEST_URL = "https://www.memtest.org/download/v6.20/mt86plus_6.20.bin.zip"
DEBIAN_NETBOOT_URL = (
    "http://ftp.debian.org/debian/dists/bookworm/main/installer-amd64/"
    "current/images/netboot/debian-installer/amd64"
)

SKELETON: tuple[Path, ...] = (
    TFTP_ROOT,
    ISO_ROOT / "windows11",
    ISO_ROOT / "debian12",
)

WINDOWS11_README = """\
Windows 11 ISO Instructions
===========================

1. Download the Windows 11 ISO from Microsoft
2. Mount or extract the ISO
3. Copy all contents to this directory (isos/windows11/)

Required files:
- bootmgr
- Boot/BCD
- Boot/boot.sdi
- sources/boot.wim
- sources/install.wim (or install.esd)

The directory structure should look like:
isos/windows11/
  bootmgr
  Boot/
    BCD
    boot.sdi
  sources/
    boot.wim
    install.wim
"""

DEBIAN12_README = f"""\
Debian 12 Netboot Instructions
==============================

The kernel and initial ramdisk are downloaded automatically by
`pxeprep download`. To supply them by hand, copy into this directory:

- linux (kernel)
- initrd.gz (initial ramdisk)

Sources:
- Debian netboot: {DEBIAN_NETBOOT_URL}/
- Or extract from a debian-12.x.x-amd64-netinst.iso
"""

PLACEHOLDERS: dict[Path, str] = {
    ISO_ROOT / "windows11" / "README.txt": WINDOWS11_README,
    ISO_ROOT / "debian12" / "README.txt": DEBIAN12_README,
}

# User-supplied media that must be present before Windows installs work.
USER_SUPPLIED: dict[str, Path] = {
    "Windows 11 ISO contents": ISO_ROOT / "windows11" / "sources" / "boot.wim",
}


TASK_NAMES: tuple[str, ...] = (
    "ipxe.efi",
    "undionly.kpxe",
    "wimboot",
    "memtest86+",
    "debian12-linux",
    "debian12-initrd",
)


def build_tasks(
    attempts: int = 3, checksums: Mapping[str, str] | None = None
) -> list[DownloadTask]:
    """Return the download catalogue in execution order.

    Args:
        attempts: Retry budget for every task
        checksums: Optional SHA-256 pins keyed by task name

    Returns:
        Download tasks
    """
    pins = {name: digest.lower() for name, digest in (checksums or {}).items()}
    unknown = set(pins) - set(TASK_NAMES)
    if unknown:
        raise ValueError(f"Unknown asset name(s) for checksum: {sorted(unknown)}")

    tasks = [
        DownloadTask(
            name="ipxe.efi",
            description="iPXE EFI boot file",
            url=f"{IPXE_BASE_URL}/ipxe.efi",
            destination=TFTP_ROOT / "ipxe.efi",
            required=True,
        ),
        DownloadTask(
            name="undionly.kpxe",
            description="iPXE BIOS boot file",
            url=f"{IPXE_BASE_URL}/undionly.kpxe",
            destination=TFTP_ROOT / "undionly.kpxe",
            required=False,
        ),
        DownloadTask(
            name="wimboot",
            description="wimboot for Windows PE",
            url=WIMBOOT_URL,
            destination=TFTP_ROOT / "wimboot",
            required=True,
            executable=True,
        ),
        DownloadTask(
            name="memtest86+",
            description="memtest86+",
            url=MEMTEST_URL,
            destination=TFTP_ROOT / "memtest86+",
            required=False,
            archive_member="*.bin",
        ),
        DownloadTask(
            name="debian12-linux",
            description="Debian 12 kernel",
            url=f"{DEBIAN_NETBOOT_URL}/linux",
            destination=ISO_ROOT / "debian12" / "linux",
            required=True,
        ),
        DownloadTask(
            name="debian12-initrd",
            description="Debian 12 initrd",
            url=f"{DEBIAN_NETBOOT_URL}/initrd.gz",
            destination=ISO_ROOT / "debian12" / "initrd.gz",
            required=True,
        ),
    ]
    return [
        task.model_copy(update={"attempts": attempts, "sha256": pins.get(task.name)})
        for task in tasks
    ]

