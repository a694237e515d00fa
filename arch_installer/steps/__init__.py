from .step_10_clean import CleanStep
from .step_15_nvme_4kn import Nvme4KnCheckStep
from .step_20_partition import PartitionStep
from .step_25_format import FormatStep
from .step_30_subvolume_create import SubvolumeCreateStep
from .step_35_subvolume_mount import SubvolumeMountStep
from .step_40_package_install import PackageInstallStep
from .step_45_table_generate import TableGenerateStep
from .step_50_chroot_configure import ChrootConfigureStep
from .step_60_desktop_install import DesktopInstallStep
from .step_65_gpu_install import GpuInstallStep
from .step_70_bootloader_install import BootloaderInstallStep
from .step_99_finalize import FinalizeStep

__all__ = [
    "CleanStep",
    "Nvme4KnCheckStep",
    "PartitionStep",
    "FormatStep",
    "SubvolumeCreateStep",
    "SubvolumeMountStep",
    "PackageInstallStep",
    "TableGenerateStep",
    "ChrootConfigureStep",
    "DesktopInstallStep",
    "GpuInstallStep",
    "BootloaderInstallStep",
    "FinalizeStep",
]
