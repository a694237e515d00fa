from __future__ import annotations

from ..lib.chroot import ConfigureScript, run_configure_script
from ..lib.packages import services_for
from ..pipeline import InstallContext, InstallPhase, InstallState


class ChrootConfigureStep:
    phase = InstallPhase.CHROOT_CONFIGURE

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        script = ConfigureScript.from_config(ctx.config, services_for(state.packages))
        run_configure_script(ctx.runner, ctx.target_root, script, dry_run=ctx.dry_run)
        return state
