from __future__ import annotations

import logging

from ..errors import PreconditionError
from ..lib.storage import format_partitions
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class FormatStep:
    phase = InstallPhase.FORMAT

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        if not state.devices:
            raise PreconditionError("No partitions to format")
        format_partitions(ctx.runner, state.devices)
        return state
