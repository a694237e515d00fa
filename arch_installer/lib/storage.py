from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..errors import PlanningError
from ..install_config import DiskTarget, SwapDecision
from . import tools
from .command import CommandRunner
from .sizing import MIB, efi_size_mib

logger = logging.getLogger(__name__)

# The first partition starts 1 MiB in, leaving the protective MBR and the
# primary GPT header intact and keeping every partition MiB-aligned.
PARTITION_START_MIB = 1
# Backup GPT header lives in the last sectors of the disk.
GPT_TAIL_RESERVE_MIB = 1
MIN_ROOT_SIZE_MIB = 2048

EFI_LABEL = "EFI"
SWAP_LABEL = "SWAP"
ROOT_LABEL = "ARCH"


class PartitionRole(enum.Enum):
    EFI = "efi"
    SWAP = "swap"
    ROOT = "root"


TYPE_CODES = {
    PartitionRole.EFI: "ef00",
    PartitionRole.SWAP: "8200",
    PartitionRole.ROOT: "8300",
}


@dataclass(frozen=True)
class PartitionSpec:
    index: int
    role: PartitionRole
    start_mib: int
    size_mib: Optional[int]  # None: remainder of the disk
    type_code: str

    @property
    def is_remainder(self) -> bool:
        return self.size_mib is None


@dataclass(frozen=True)
class PartitionPlan:
    disk: DiskTarget
    specs: Tuple[PartitionSpec, ...]
    usable_end_mib: int

    def end_mib(self, spec: PartitionSpec) -> int:
        if spec.size_mib is None:
            return self.usable_end_mib
        return spec.start_mib + spec.size_mib

    def by_role(self, role: PartitionRole) -> Optional[PartitionSpec]:
        return next((s for s in self.specs if s.role is role), None)

    @property
    def root(self) -> PartitionSpec:
        return self.specs[-1]

    @property
    def root_size_mib(self) -> int:
        return self.usable_end_mib - self.root.start_mib


def partition_device(disk: str, index: int) -> str:
    # nvme/mmcblk/loop devices end in a digit and use a p infix
    if disk.endswith(tuple("0123456789")):
        return f"{disk}p{index}"
    return f"{disk}{index}"


def plan_partitions(disk: DiskTarget, swap: SwapDecision, efi_mib: Optional[int] = None) -> PartitionPlan:
    """EFI first, optional swap second, root last taking the remainder.

    Assumes the disk is wiped before the plan is executed; existing
    partitions are never read.
    """

    efi_mib = efi_size_mib(disk.size_bytes) if efi_mib is None else efi_mib
    disk_mib = disk.size_bytes // MIB
    usable_end = disk_mib - GPT_TAIL_RESERVE_MIB

    specs = [PartitionSpec(1, PartitionRole.EFI, PARTITION_START_MIB, efi_mib, TYPE_CODES[PartitionRole.EFI])]
    cursor = PARTITION_START_MIB + efi_mib

    if swap.enabled:
        if swap.size_mib <= 0:
            raise PlanningError("Swap is enabled but its size is zero")
        specs.append(PartitionSpec(2, PartitionRole.SWAP, cursor, swap.size_mib, TYPE_CODES[PartitionRole.SWAP]))
        cursor += swap.size_mib

    root_size = usable_end - cursor
    if root_size < MIN_ROOT_SIZE_MIB:
        raise PlanningError(
            f"Disk {disk.path} ({disk_mib} MiB) is too small: EFI {efi_mib} MiB"
            f"{f' + swap {swap.size_mib} MiB' if swap.enabled else ''}"
            f" leaves {max(root_size, 0)} MiB for root, need at least {MIN_ROOT_SIZE_MIB} MiB"
        )

    specs.append(PartitionSpec(len(specs) + 1, PartitionRole.ROOT, cursor, None, TYPE_CODES[PartitionRole.ROOT]))

    plan = PartitionPlan(disk=disk, specs=tuple(specs), usable_end_mib=usable_end)
    logger.info(
        "Partition plan for %s: %s",
        disk.path,
        ", ".join(f"{s.index}:{s.role.value}@{s.start_mib}M+{s.size_mib or 'rest'}" for s in plan.specs),
    )
    return plan


def partition_disk(runner: CommandRunner, plan: PartitionPlan) -> Dict[PartitionRole, str]:
    """Wipe the disk and create the planned GPT partitions.

    Returns the realized device path for each role.
    """

    disk = plan.disk.path
    logger.info("Partitioning disk=%s", disk)

    runner.run(tools.zap_partition_table(disk))
    runner.run(tools.wipe_signatures(disk))

    devices: Dict[PartitionRole, str] = {}
    for spec in plan.specs:
        runner.run(
            tools.sgdisk_new(disk, spec.index, spec.start_mib, spec.size_mib, spec.type_code, spec.role.value.upper())
        )
        devices[spec.role] = partition_device(disk, spec.index)

    # Inform kernel
    runner.run(tools.partprobe(disk))
    return devices


def format_partitions(runner: CommandRunner, devices: Dict[PartitionRole, str]) -> None:
    runner.run(tools.mkfs_fat32(devices[PartitionRole.EFI], EFI_LABEL))
    if PartitionRole.SWAP in devices:
        runner.run(tools.mkswap(devices[PartitionRole.SWAP], SWAP_LABEL))
    runner.run(tools.mkfs_btrfs(devices[PartitionRole.ROOT], ROOT_LABEL))
