from __future__ import annotations

from ..errors import PreconditionError
from ..lib.storage import PartitionRole
from ..lib.subvolumes import create_subvolumes
from ..pipeline import InstallContext, InstallPhase, InstallState


class SubvolumeCreateStep:
    phase = InstallPhase.SUBVOLUME_CREATE

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        root = state.devices.get(PartitionRole.ROOT)
        if not root:
            raise PreconditionError("Root partition is not known")
        create_subvolumes(ctx.runner, root, ctx.target_root, dry_run=ctx.dry_run)
        return state
