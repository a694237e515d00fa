from __future__ import annotations

import logging
from typing import List

from ..lib import tools
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)

SWAP_MOUNT_MARKER = "[SWAP]"


def swapped_on_partitions(lsblk_output: str, disk: str) -> List[str]:
    """Partitions of disk that `lsblk -lnpo NAME,MOUNTPOINT` reports as active swap."""

    parts = []
    for line in lsblk_output.splitlines():
        fields = line.split(None, 1)
        if len(fields) != 2 or fields[0] == disk:
            continue
        if fields[1].strip() == SWAP_MOUNT_MARKER:
            parts.append(fields[0])
    return parts


class CleanStep:
    """Release anything a previous attempt left on the target. Best-effort."""

    phase = InstallPhase.CLEAN

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        runner = ctx.runner
        disk = ctx.config.disk.path

        if runner.run(tools.is_mountpoint(ctx.target_root)).ok:
            runner.run(tools.umount_recursive(ctx.target_root))

        listing = runner.run(tools.list_partitions_with_mounts(disk))
        for part in swapped_on_partitions(listing.stdout if listing.ok else "", disk):
            runner.run(tools.swapoff(part))

        logger.info("Cleaned up %s and %s", ctx.target_root, disk)
        return state
