from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .subvolumes import MountTable


@dataclass(frozen=True)
class FstabEntry:
    spec: str
    mountpoint: str
    fstype: str
    options: str
    dump: int = 0
    passno: int = 0


def render_fstab(entries: Iterable[FstabEntry]) -> str:
    lines = ["# Static information about the filesystems.", "# <file system> <dir> <type> <options> <dump> <pass>", ""]
    for e in entries:
        lines.append(f"{e.spec}\t{e.mountpoint}\t{e.fstype}\t{e.options}\t{e.dump} {e.passno}")
    return "\n".join(lines) + "\n"


def entries_from_mounts(table: MountTable, swap_label: Optional[str] = None) -> List[FstabEntry]:
    """One LABEL= entry per mount, plus the swap partition when present."""

    entries: List[FstabEntry] = []
    for r in table.records:
        if r.fstype == "vfat":
            passno = 2
        else:
            # btrfs is checked by its own tools, never by fsck at boot.
            passno = 0
        entries.append(FstabEntry(f"LABEL={r.label}", r.mountpoint, r.fstype, r.options, 0, passno))
    if swap_label:
        entries.append(FstabEntry(f"LABEL={swap_label}", "none", "swap", "defaults", 0, 0))
    return entries


def has_swap(fstab_text: str) -> bool:
    for line in fstab_text.splitlines():
        fields = line.split()
        if len(fields) >= 3 and not fields[0].startswith("#") and fields[2] == "swap":
            return True
    return False
