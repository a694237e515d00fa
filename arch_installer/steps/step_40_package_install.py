from __future__ import annotations

import logging

from ..lib.mirrors import copy_live_mirrorlist
from ..lib.packages import BASE_PACKAGES, microcode_packages, resolve_packages
from ..lib.pacman import pacstrap
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class PackageInstallStep:
    """Wait for the mirror refresh, then pacstrap the resolved package set.

    A failed or timed-out refresh is not fatal: the live environment's
    mirror list is copied into the target afterwards instead.
    """

    phase = InstallPhase.PACKAGE_INSTALL

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        cfg = ctx.config
        outcome = ctx.mirror_task.join(cfg.mirror_timeout)

        microcode = microcode_packages(ctx.probe.cpu_vendor())
        packages = resolve_packages(BASE_PACKAGES, microcode, cfg.package_tokens)
        logger.info("Resolved packages: %s", " ".join(packages))

        pacstrap(ctx.runner, ctx.target_root, packages)

        fallback = False
        if not outcome.ok:
            fallback = copy_live_mirrorlist(ctx.paths.live_mirrorlist, ctx.target_root, dry_run=ctx.dry_run)

        return state.update(packages=tuple(packages), mirror_refreshed=outcome.ok, mirrorlist_fallback=fallback)
