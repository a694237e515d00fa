from __future__ import annotations

import logging

from ..lib import tools
from ..lib.hwdetect import find_4kn_format
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class Nvme4KnCheckStep:
    """Offer to switch an NVMe namespace to its 4096-byte LBA format.

    The reformat destroys the disk before partitioning starts, so it asks
    for its own confirmation; declining only skips the reformat.
    """

    phase = InstallPhase.NVME_4KN_CHECK

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        cfg = ctx.config
        disk = cfg.disk
        if not disk.is_nvme or not cfg.check_nvme_4kn:
            logger.info("Skipping NVMe 4Kn check for %s", disk.path)
            return state

        formats = ctx.probe.nvme_formats(disk.path)
        if formats is None:
            logger.warning("Could not read LBA formats of %s, skipping 4Kn check", disk.path)
            return state

        lbaf = find_4kn_format(formats)
        if lbaf is None:
            logger.info("%s has no inactive 4096-byte LBA format", disk.path)
            return state

        if not ctx.operator.confirm_nvme_format(disk, lbaf):
            logger.info("Operator declined reformatting %s to LBA format %d", disk.path, lbaf)
            return state

        ctx.runner.run(tools.nvme_format(disk.path, lbaf))
        ctx.runner.run(tools.reread_partition_table(disk.path))
        ctx.runner.run(tools.partprobe(disk.path))
        logger.info("Reformatted %s to LBA format %d (4096 bytes)", disk.path, lbaf)
        return state.update(nvme_reformatted=True)
