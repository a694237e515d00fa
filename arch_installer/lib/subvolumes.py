from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from ..errors import PreconditionError
from . import tools
from .command import CommandRunner

logger = logging.getLogger(__name__)

BTRFS_BASE_OPTIONS = "noatime,compress=zstd:3,discard=async,ssd,space_cache=v2"
TOP_LEVEL_SUBVOLID = 5
BOOT_MOUNTPOINT = "/boot"
# The ESP is FAT; keep its files unreadable for other users.
ESP_MOUNT_OPTIONS = "umask=0077"


@dataclass(frozen=True)
class Subvolume:
    key: str
    name: str
    mountpoint: str
    options: str = BTRFS_BASE_OPTIONS

    @property
    def is_root(self) -> bool:
        return self.mountpoint == "/"

    @property
    def mount_options(self) -> str:
        return f"{self.options},subvol={self.name}"


SUBVOLUME_LAYOUT: Tuple[Subvolume, ...] = (
    Subvolume("root", "@", "/"),
    Subvolume("home", "@home", "/home"),
    Subvolume("pkg_cache", "@cache", "/var/cache/pacman/pkg"),
    Subvolume("var_tmp", "@tmp", "/var/tmp"),
    Subvolume("var_log", "@log", "/var/log"),
    Subvolume("snapshots", "@snapshots", "/.snapshots"),
)


@dataclass(frozen=True)
class MountRecord:
    device: str
    mountpoint: str  # relative to the target root, "/" for the root itself
    fstype: str
    options: str
    label: str


@dataclass(frozen=True)
class MountTable:
    """Mounts made under the target root, in the order they were made."""

    target_root: str
    records: Tuple[MountRecord, ...] = ()

    def with_mount(self, record: MountRecord) -> "MountTable":
        return MountTable(self.target_root, self.records + (record,))

    def is_mounted(self, mountpoint: str) -> bool:
        return any(r.mountpoint == mountpoint for r in self.records)

    @property
    def root_mounted(self) -> bool:
        return self.is_mounted("/")

    def host_path(self, mountpoint: str) -> Path:
        return Path(self.target_root) / mountpoint.lstrip("/")


def create_subvolumes(runner: CommandRunner, device: str, target_root: str, *, dry_run: bool = False) -> None:
    """Create every subvolume as a child of the top-level volume, then unmount."""

    if not dry_run:
        Path(target_root).mkdir(parents=True, exist_ok=True)
    runner.run(tools.mount(device, target_root, f"{BTRFS_BASE_OPTIONS},subvolid={TOP_LEVEL_SUBVOLID}"))
    for sv in SUBVOLUME_LAYOUT:
        runner.run(tools.btrfs_subvolume_create(str(Path(target_root) / sv.name)))
    runner.run(tools.umount_all(target_root))
    logger.info("Created subvolumes: %s", ", ".join(sv.name for sv in SUBVOLUME_LAYOUT))


def _ensure_mountpoint(table: MountTable, mountpoint: str, *, dry_run: bool) -> None:
    # Mountpoints below "/" must be created inside the mounted root subvolume,
    # never in the bare target directory.
    if not table.root_mounted:
        raise PreconditionError(
            f"Cannot create mountpoint {mountpoint}: root subvolume is not mounted at {table.target_root}"
        )
    path = table.host_path(mountpoint)
    if dry_run:
        logger.info("Would create directory: %s", path)
        return
    path.mkdir(parents=True, exist_ok=True)


def mount_subvolume(
    runner: CommandRunner,
    table: MountTable,
    device: str,
    subvolume: Subvolume,
    label: str,
    *,
    dry_run: bool = False,
) -> MountTable:
    if table.is_mounted(subvolume.mountpoint):
        raise PreconditionError(f"{subvolume.mountpoint} is already mounted")

    if subvolume.is_root:
        target = Path(table.target_root)
        if not dry_run:
            target.mkdir(parents=True, exist_ok=True)
    else:
        _ensure_mountpoint(table, subvolume.mountpoint, dry_run=dry_run)
        target = table.host_path(subvolume.mountpoint)

    runner.run(tools.mount(device, str(target), subvolume.mount_options))
    return table.with_mount(
        MountRecord(
            device=device,
            mountpoint=subvolume.mountpoint,
            fstype="btrfs",
            options=f"rw,{subvolume.mount_options}",
            label=label,
        )
    )


def mount_boot(
    runner: CommandRunner,
    table: MountTable,
    device: str,
    label: str,
    *,
    dry_run: bool = False,
) -> MountTable:
    _ensure_mountpoint(table, BOOT_MOUNTPOINT, dry_run=dry_run)
    runner.run(tools.mount(device, str(table.host_path(BOOT_MOUNTPOINT)), ESP_MOUNT_OPTIONS))
    return table.with_mount(
        MountRecord(
            device=device,
            mountpoint=BOOT_MOUNTPOINT,
            fstype="vfat",
            options=f"rw,{ESP_MOUNT_OPTIONS}",
            label=label,
        )
    )


def mount_layout(
    runner: CommandRunner,
    root_device: str,
    root_label: str,
    efi_device: str,
    efi_label: str,
    target_root: str,
    *,
    dry_run: bool = False,
) -> MountTable:
    """Mount root, then the other five subvolumes, then the ESP."""

    table = MountTable(target_root=target_root)
    root, *others = SUBVOLUME_LAYOUT
    table = mount_subvolume(runner, table, root_device, root, root_label, dry_run=dry_run)
    for sv in others:
        table = mount_subvolume(runner, table, root_device, sv, root_label, dry_run=dry_run)
    table = mount_boot(runner, table, efi_device, efi_label, dry_run=dry_run)
    logger.info("Mounted %d filesystems under %s", len(table.records), target_root)
    return table
