from __future__ import annotations

import logging
from pathlib import Path

from ..lib import tools
from ..lib.bootloader import install_limine_binary, register_boot_entry, write_limine_conf, write_zram_conf
from ..lib.fstab import has_swap
from ..lib.storage import ROOT_LABEL, PartitionRole
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


def _fstab_has_swap(state: InstallState) -> bool:
    if state.fstab_path and Path(state.fstab_path).is_file():
        return has_swap(Path(state.fstab_path).read_text(encoding="utf-8"))
    # dry run: the table was never written
    return PartitionRole.SWAP in state.devices


class BootloaderInstallStep:
    phase = InstallPhase.BOOTLOADER_INSTALL

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        runner = ctx.runner
        target = ctx.target_root

        install_limine_binary(runner, target, dry_run=ctx.dry_run)
        write_limine_conf(target, ROOT_LABEL, dry_run=ctx.dry_run)

        if _fstab_has_swap(state):
            runner.run(tools.swapon_all(target))

        write_zram_conf(target, dry_run=ctx.dry_run)
        runner.run(tools.mkinitcpio_all(target))
        register_boot_entry(runner, ctx.config.disk.path)
        return state.update(boot_entry_registered=True)
