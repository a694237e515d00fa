from __future__ import annotations

import logging

from ..lib import tools
from ..lib.packages import DESKTOP_PACKAGES, DESKTOP_SERVICES
from ..lib.pacman import ensure_multilib, pacman_install
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class DesktopInstallStep:
    phase = InstallPhase.DESKTOP_INSTALL

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        if not ctx.config.install_desktop:
            logger.info("Desktop environment not selected")
            return state

        multilib = ensure_multilib(ctx.runner, ctx.target_root, enabled=state.multilib_enabled, dry_run=ctx.dry_run)
        pacman_install(ctx.runner, ctx.target_root, DESKTOP_PACKAGES)
        ctx.runner.run(tools.systemctl_enable(ctx.target_root, DESKTOP_SERVICES))
        return state.update(multilib_enabled=multilib, desktop_packages=DESKTOP_PACKAGES)
