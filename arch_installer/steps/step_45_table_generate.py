from __future__ import annotations

import logging

from ..errors import PreconditionError
from ..lib.chroot import write_target_file
from ..lib.fstab import entries_from_mounts, render_fstab
from ..lib.storage import SWAP_LABEL, PartitionRole
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class TableGenerateStep:
    phase = InstallPhase.TABLE_GENERATE

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        if state.mounts is None or not state.mounts.root_mounted:
            raise PreconditionError("Cannot write fstab: nothing is mounted")

        swap_label = SWAP_LABEL if PartitionRole.SWAP in state.devices else None
        entries = entries_from_mounts(state.mounts, swap_label=swap_label)
        path = write_target_file(ctx.target_root, "/etc/fstab", render_fstab(entries), dry_run=ctx.dry_run)
        logger.info("Wrote fstab with %d entries: %s", len(entries), path)
        return state.update(fstab_path=str(path))
