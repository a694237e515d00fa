from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from .errors import OperatorAbort, PreconditionError
from .install_config import InstallConfig, render_summary
from .lib.command import CommandRunner
from .lib.env import PATHS, Paths
from .lib.hwdetect import HardwareProbe
from .lib.mirrors import MirrorRefreshTask
from .lib.storage import PartitionPlan, PartitionRole
from .lib.subvolumes import MountTable
from .operator_interface import OperatorInterface

logger = logging.getLogger(__name__)


class InstallPhase(enum.Enum):
    CLEAN = "clean"
    NVME_4KN_CHECK = "nvme_4kn_check"
    PARTITION = "partition"
    FORMAT = "format"
    SUBVOLUME_CREATE = "subvolume_create"
    SUBVOLUME_MOUNT = "subvolume_mount"
    PACKAGE_INSTALL = "package_install"
    TABLE_GENERATE = "table_generate"
    CHROOT_CONFIGURE = "chroot_configure"
    DESKTOP_INSTALL = "desktop_install"
    GPU_INSTALL = "gpu_install"
    BOOTLOADER_INSTALL = "bootloader_install"
    FINALIZE = "finalize"

    @property
    def position(self) -> int:
        return PHASE_ORDER.index(self)

    @property
    def predecessor(self) -> Optional["InstallPhase"]:
        i = self.position
        return PHASE_ORDER[i - 1] if i > 0 else None

    @property
    def successor(self) -> Optional["InstallPhase"]:
        i = self.position
        return PHASE_ORDER[i + 1] if i + 1 < len(PHASE_ORDER) else None


PHASE_ORDER: Tuple[InstallPhase, ...] = tuple(InstallPhase)


@dataclass(frozen=True)
class InstallState:
    """What the phases have realized so far. Phases return an updated copy."""

    completed: Tuple[InstallPhase, ...] = ()
    current_phase: Optional[InstallPhase] = None
    plan: Optional[PartitionPlan] = None
    devices: Dict[PartitionRole, str] = field(default_factory=dict)
    mounts: Optional[MountTable] = None
    packages: Tuple[str, ...] = ()
    mirror_refreshed: Optional[bool] = None
    mirrorlist_fallback: bool = False
    nvme_reformatted: bool = False
    multilib_enabled: bool = False
    desktop_packages: Tuple[str, ...] = ()
    gpu_packages: Tuple[str, ...] = ()
    fstab_path: Optional[str] = None
    boot_entry_registered: bool = False
    rebooted: Optional[bool] = None
    aborted: bool = False

    def update(self, **changes: Any) -> "InstallState":
        return replace(self, **changes)

    def next_phase(self) -> Optional[InstallPhase]:
        if not self.completed:
            return PHASE_ORDER[0]
        return self.completed[-1].successor

    def require(self, phase: InstallPhase) -> None:
        if phase not in self.completed:
            raise PreconditionError(f"{phase.value} has not completed")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completed_phases": [p.value for p in self.completed],
            "current_phase": self.current_phase.value if self.current_phase else None,
            "partitions": {role.value: dev for role, dev in self.devices.items()},
            "mounts": [
                {"device": r.device, "mountpoint": r.mountpoint, "fstype": r.fstype, "options": r.options}
                for r in (self.mounts.records if self.mounts else ())
            ],
            "packages": list(self.packages),
            "desktop_packages": list(self.desktop_packages),
            "gpu_packages": list(self.gpu_packages),
            "mirror_refreshed": self.mirror_refreshed,
            "mirrorlist_fallback": self.mirrorlist_fallback,
            "nvme_reformatted": self.nvme_reformatted,
            "multilib_enabled": self.multilib_enabled,
            "fstab_path": self.fstab_path,
            "boot_entry_registered": self.boot_entry_registered,
            "rebooted": self.rebooted,
            "aborted": self.aborted,
        }


@dataclass
class InstallContext:
    config: InstallConfig
    runner: CommandRunner
    operator: OperatorInterface
    probe: HardwareProbe
    mirror_task: MirrorRefreshTask
    paths: Paths = PATHS

    @property
    def target_root(self) -> str:
        return self.config.target_root

    @property
    def dry_run(self) -> bool:
        return self.config.dry_run


class Step(Protocol):
    """One pipeline phase."""

    phase: InstallPhase

    def run(self, ctx: InstallContext, state: InstallState) -> InstallState:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: InstallState
    aborted: bool

    @property
    def ran_phases(self) -> List[str]:
        return [p.value for p in self.state.completed]


class ProvisioningPipeline:
    """Runs the phases strictly in order, once each.

    The destructive-operation gate is asked before anything else happens;
    the mirror refresh starts right after it and is joined by the package
    install phase.
    """

    def __init__(self, ctx: InstallContext, steps: Sequence[Step]) -> None:
        phases = [s.phase for s in steps]
        if tuple(phases) != PHASE_ORDER:
            raise PreconditionError(f"Steps must cover every phase in order, got {[p.value for p in phases]}")
        self.ctx = ctx
        self.steps = list(steps)
        self.state = InstallState()

    def _abort(self, reason: str) -> PipelineResult:
        logger.warning("Installation aborted: %s", reason)
        self.state = self.state.update(aborted=True)
        return PipelineResult(state=self.state, aborted=True)

    def run(self) -> PipelineResult:
        if not self.ctx.operator.confirm_install(render_summary(self.ctx.config)):
            return self._abort("operator declined the destructive-operation confirmation")

        self.ctx.mirror_task.start()

        for step in self.steps:
            expected = self.state.next_phase()
            if step.phase is not expected:
                raise PreconditionError(f"Phase {step.phase.value} cannot run now; expected {expected}")

            self.state = self.state.update(current_phase=step.phase)
            logger.info("Running phase %s", step.phase.value)
            try:
                new_state = step.run(self.ctx, self.state)
            except OperatorAbort as e:
                return self._abort(str(e))

            self.state = new_state.update(completed=new_state.completed + (step.phase,), current_phase=None)

        logger.info("Installation finished: %s", ", ".join(p.value for p in self.state.completed))
        return PipelineResult(state=self.state, aborted=False)
