from __future__ import annotations

import logging

from ..lib import tools
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class FinalizeStep:
    phase = InstallPhase.FINALIZE

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        if ctx.operator.confirm_reboot():
            ctx.runner.run(tools.umount_recursive(ctx.target_root))
            ctx.runner.run(tools.reboot())
            return state.update(rebooted=True)

        ctx.operator.notify(f"Installation complete. System mounted at {ctx.target_root}; reboot when ready.")
        return state.update(rebooted=False)
