from __future__ import annotations

import logging

from ..lib.storage import partition_disk, plan_partitions
from ..pipeline import InstallContext, InstallPhase, InstallState

logger = logging.getLogger(__name__)


class PartitionStep:
    phase = InstallPhase.PARTITION

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        cfg = ctx.config
        plan = plan_partitions(cfg.disk, cfg.swap)
        devices = partition_disk(ctx.runner, plan)
        logger.info("Partitions: %s", ", ".join(f"{role.value}={dev}" for role, dev in devices.items()))
        return state.update(plan=plan, devices=devices)
