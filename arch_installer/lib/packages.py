from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from ..install_config import SystemType

logger = logging.getLogger(__name__)

BASE_PACKAGES: Tuple[str, ...] = (
    "base",
    "base-devel",
    "linux",
    "linux-firmware",
    "sof-firmware",
    "limine",
    "sudo",
    "nano",
    "git",
    "networkmanager",
    "btrfs-progs",
    "reflector",
    "zram-generator",
)

MICROCODE_BY_VENDOR = {
    "GenuineIntel": "intel-ucode",
    "AuthenticAMD": "amd-ucode",
}

REMOVAL_PREFIX = "!"

DESKTOP_PACKAGES: Tuple[str, ...] = ("plasma-meta", "sddm", "dolphin", "konsole", "firefox")
DESKTOP_SERVICES: Tuple[str, ...] = ("sddm.service",)

AMD_GPU_PACKAGES: Tuple[str, ...] = (
    "mesa",
    "lib32-mesa",
    "vulkan-mesa-layers",
    "lib32-vulkan-mesa-layers",
    "vulkan-radeon",
    "lib32-vulkan-radeon",
    "vulkan-icd-loader",
    "lib32-vulkan-icd-loader",
)
INTEL_GPU_PACKAGES: Tuple[str, ...] = (
    "mesa",
    "lib32-mesa",
    "vulkan-mesa-layers",
    "lib32-vulkan-mesa-layers",
    "vulkan-intel",
    "lib32-vulkan-intel",
    "vulkan-icd-loader",
    "lib32-vulkan-icd-loader",
)
NVIDIA_GPU_PACKAGES: Tuple[str, ...] = ("nvidia-open", "nvidia-utils", "nvidia-settings", "lib32-nvidia-utils")
HYBRID_GRAPHICS_HELPER = "nvidia-prime"

# package -> unit enabled in the target when the package is installed
PACKAGE_SERVICES = {
    "networkmanager": "NetworkManager.service",
    "reflector": "reflector.service",
}
ALWAYS_ENABLED_SERVICES: Tuple[str, ...] = ("fstrim.timer",)


def microcode_packages(cpu_vendor: str | None) -> Tuple[str, ...]:
    """Microcode for the detected CPU vendor.

    An unknown vendor installs every known microcode package instead of
    failing.
    """

    pkg = MICROCODE_BY_VENDOR.get((cpu_vendor or "").strip())
    if pkg:
        return (pkg,)
    logger.warning("Unknown CPU vendor %r, installing all microcode packages", cpu_vendor)
    return tuple(MICROCODE_BY_VENDOR.values())


def split_tokens(text: str | Iterable[str]) -> Tuple[str, ...]:
    if isinstance(text, str):
        return tuple(text.split())
    return tuple(t for chunk in text for t in str(chunk).split())


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def resolve_packages(
    base: Sequence[str],
    microcode: Sequence[str],
    tokens: Sequence[str] = (),
) -> List[str]:
    """base + microcode, then every removal, then every addition.

    "!name" removes an exact entry (unknown names are ignored), a bare
    token adds a package. Removals run first so the same batch can drop a
    base package and add a replacement.
    """

    removals = {t[len(REMOVAL_PREFIX):] for t in tokens if t.startswith(REMOVAL_PREFIX)}
    additions = [t for t in tokens if t and not t.startswith(REMOVAL_PREFIX)]

    packages = [p for p in _dedupe([*base, *microcode]) if p not in removals]
    ignored = removals - set(base) - set(microcode)
    if ignored:
        logger.info("Ignoring removal of packages not in the base set: %s", " ".join(sorted(ignored)))

    return _dedupe([*packages, *additions])


def services_for(packages: Iterable[str]) -> List[str]:
    installed = set(packages)
    units = [unit for pkg, unit in PACKAGE_SERVICES.items() if pkg in installed]
    return [*ALWAYS_ENABLED_SERVICES, *units]


@dataclass(frozen=True)
class GpuProfile:
    amd: bool
    nvidia: bool
    intel: bool
    system_type: SystemType = SystemType.DESKTOP

    @property
    def any_detected(self) -> bool:
        return self.amd or self.nvidia or self.intel

    @property
    def is_hybrid(self) -> bool:
        return self.nvidia and (self.intel or self.amd)


def gpu_packages(profile: GpuProfile) -> List[str]:
    """Driver bundles for every detected vendor.

    Laptops pairing NVIDIA with an integrated Intel or AMD GPU also get the
    hybrid-graphics helper. Nothing detected means nothing to install.
    """

    if not profile.any_detected:
        return []

    bundles: List[str] = []
    if profile.amd:
        bundles += AMD_GPU_PACKAGES
    if profile.intel:
        bundles += INTEL_GPU_PACKAGES
    if profile.nvidia:
        bundles += NVIDIA_GPU_PACKAGES

    if profile.system_type is SystemType.LAPTOP and profile.is_hybrid:
        bundles.append(HYBRID_GRAPHICS_HELPER)

    return _dedupe(bundles)
