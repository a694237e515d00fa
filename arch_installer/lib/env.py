from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    target_root: str = "/mnt/arch"
    state_default: str = "/var/lib/arch-installer/state.json"
    log_default: str = "/var/log/arch-installer.log"
    live_mirrorlist: str = "/etc/pacman.d/mirrorlist"
    zoneinfo_dir: str = "/usr/share/zoneinfo"
    supported_locales: str = "/usr/share/i18n/SUPPORTED"
    cpuinfo: str = "/proc/cpuinfo"
    meminfo: str = "/proc/meminfo"


PATHS = Paths()
