"""Partition sizing policy.

Pure functions over plain numbers so they can be tested without a disk or
/proc/meminfo.

EFI policy: tiered by disk size. Disks under 64 GiB get 512 MiB, disks
under 256 GiB get 1024 MiB, anything larger gets 2048 MiB.

Swap policy: the size is always a whole number of GiB. The operator either
types the number of GiB directly, or asks for "ram", in which case the
detected RAM is rounded up to the next whole GiB.
"""

from __future__ import annotations

from typing import Tuple

from ..errors import ValidationError

MIB = 1024 * 1024
GIB = 1024 * MIB
GIB_IN_MIB = 1024

# (exclusive upper bound in GiB, EFI size in MiB)
EFI_SIZE_TIERS: Tuple[Tuple[int, int], ...] = (
    (64, 512),
    (256, 1024),
)
EFI_SIZE_MAX_MIB = 2048

SWAP_FROM_RAM = "ram"


def efi_size_mib(disk_size_bytes: int) -> int:
    for bound_gib, size_mib in EFI_SIZE_TIERS:
        if disk_size_bytes < bound_gib * GIB:
            return size_mib
    return EFI_SIZE_MAX_MIB


def swap_size_from_ram_mib(ram_bytes: int) -> int:
    """Round detected RAM up to the next whole GiB, in MiB."""

    if ram_bytes <= 0:
        raise ValueError(f"RAM size must be positive, got {ram_bytes}")
    gib = -(-ram_bytes // GIB)
    return gib * GIB_IN_MIB


def parse_swap_gib(text: str) -> int:
    """Operator-entered swap size: a positive whole number of GiB."""

    raw = str(text).strip()
    if not raw.isdigit():
        raise ValidationError(f"Swap size must be a positive whole number of GiB, got {text!r}")
    value = int(raw)
    if value <= 0:
        raise ValidationError(f"Swap size must be greater than zero, got {text!r}")
    return value
