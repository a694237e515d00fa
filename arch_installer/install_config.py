from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from typing import Tuple

from .lib.env import PATHS
from .lib.sizing import GIB


class SystemType(enum.Enum):
    DESKTOP = "desktop"
    LAPTOP = "laptop"


@dataclass(frozen=True)
class DiskTarget:
    path: str
    size_bytes: int
    model: str = ""

    @property
    def is_nvme(self) -> bool:
        return os.path.basename(self.path).startswith("nvme")

    def describe(self) -> str:
        size_gib = self.size_bytes / GIB
        model = f" {self.model}" if self.model else ""
        return f"{self.path} ({size_gib:.1f} GiB){model}"


@dataclass(frozen=True)
class SwapDecision:
    enabled: bool
    size_bytes: int = 0
    # "operator" or "ram"
    source: str = "operator"

    @property
    def size_mib(self) -> int:
        return self.size_bytes // (1024 * 1024)

    @classmethod
    def disabled(cls) -> "SwapDecision":
        return cls(enabled=False)


@dataclass(frozen=True)
class InstallConfig:
    """Every operator decision, collected and validated once.

    Phases read it; nothing writes it after collect_config() returns.
    """

    disk: DiskTarget
    swap: SwapDecision
    locale: str
    timezone: str
    hostname: str
    username: str
    root_password: str = field(repr=False)
    user_password: str = field(repr=False)
    package_tokens: Tuple[str, ...] = ()
    install_desktop: bool = False
    install_gpu: bool = False
    system_type: SystemType = SystemType.DESKTOP
    check_nvme_4kn: bool = False
    keymap: str = "us"
    target_root: str = PATHS.target_root
    dry_run: bool = False
    mirror_timeout: float | None = None


def render_summary(cfg: InstallConfig) -> str:
    swap = f"Enabled ({cfg.swap.size_mib // 1024} GiB, {cfg.swap.source})" if cfg.swap.enabled else "Disabled"
    desktop = "Yes (KDE Plasma)" if cfg.install_desktop else "No"
    gpu = f"Yes ({cfg.system_type.value})" if cfg.install_gpu else "No"
    edits = " ".join(cfg.package_tokens) or "None"
    lines = [
        "INSTALLATION CONFIGURATION",
        "",
        "DISK & PARTITIONS:",
        f"  Target Disk: {cfg.disk.describe()}",
        f"  Swap: {swap}",
        "SYSTEM CONFIGURATION:",
        f"  Locale: {cfg.locale}",
        f"  Timezone: {cfg.timezone}",
        f"  Hostname: {cfg.hostname}",
        "USER ACCOUNTS:",
        "  Root: Password set",
        f"  User: {cfg.username} (Password set)",
        "SOFTWARE:",
        f"  Desktop Environment: {desktop}",
        f"  GPU Drivers: {gpu}",
        f"  Package edits: {edits}",
        "",
        f"WARNING: This will DESTROY all data on {cfg.disk.path}!",
    ]
    return "\n".join(lines)
