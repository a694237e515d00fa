from __future__ import annotations

import logging

from ..lib.packages import gpu_packages
from ..lib.pacman import ensure_multilib, pacman_install
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class GpuInstallStep:
    phase = InstallPhase.GPU_INSTALL

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        cfg = ctx.config
        if not cfg.install_gpu:
            logger.info("GPU drivers not selected")
            return state

        profile = ctx.probe.gpu_profile(cfg.system_type)
        packages = gpu_packages(profile)
        if not packages:
            # Nothing supported detected; not an error.
            logger.info("No AMD, NVIDIA or Intel GPU detected, skipping driver install")
            return state

        logger.info(
            "GPU drivers for %s (amd=%s nvidia=%s intel=%s): %s",
            cfg.system_type.value,
            profile.amd,
            profile.nvidia,
            profile.intel,
            " ".join(packages),
        )
        multilib = ensure_multilib(ctx.runner, ctx.target_root, enabled=state.multilib_enabled, dry_run=ctx.dry_run)
        pacman_install(ctx.runner, ctx.target_root, packages)
        return state.update(multilib_enabled=multilib, gpu_packages=tuple(packages))
