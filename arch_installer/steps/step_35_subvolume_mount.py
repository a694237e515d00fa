from __future__ import annotations

from ..errors import PreconditionError
from ..lib.storage import EFI_LABEL, ROOT_LABEL, PartitionRole
from ..lib.subvolumes import mount_layout
from ..pipeline import InstallContext, InstallPhase, InstallState


class SubvolumeMountStep:
    phase = InstallPhase.SUBVOLUME_MOUNT

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        root = state.devices.get(PartitionRole.ROOT)
        efi = state.devices.get(PartitionRole.EFI)
        if not root or not efi:
            raise PreconditionError("Root and EFI partitions must exist before mounting")
        table = mount_layout(ctx.runner, root, ROOT_LABEL, efi, EFI_LABEL, ctx.target_root, dry_run=ctx.dry_run)
        return state.update(mounts=table)
