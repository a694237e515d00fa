"""The boundary between the installer core and whoever answers its questions.

Front-ends (console prompts, an answers file, a GUI) implement
OperatorInterface and return raw answers; collect_config() validates every
answer before accepting it and asks again when one is rejected.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from .errors import PlanningError, ValidationError
from .install_config import DiskTarget, InstallConfig, SwapDecision, SystemType
from .lib import validation
from .lib.env import PATHS, Paths
from .lib.hwdetect import HardwareProbe
from .lib.packages import BASE_PACKAGES, split_tokens
from .lib.sizing import MIB, SWAP_FROM_RAM, parse_swap_gib, swap_size_from_ram_mib
from .lib.storage import plan_partitions

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperatorInterface(Protocol):
    def choose_disk(self, disks: Sequence[DiskTarget]) -> object: ...

    def swap_enabled(self) -> object: ...

    def swap_size(self) -> object: ...

    def locale(self) -> object: ...

    def timezone(self) -> object: ...

    def hostname(self) -> object: ...

    def root_password(self) -> Tuple[str, str]: ...

    def username(self) -> object: ...

    def user_password(self, username: str) -> Tuple[str, str]: ...

    def package_tokens(self, base: Sequence[str]) -> object: ...

    def install_desktop(self) -> object: ...

    def install_gpu(self) -> object: ...

    def system_type(self) -> object: ...

    def check_nvme_4kn(self, disk: DiskTarget) -> object: ...

    def confirm_install(self, summary: str) -> bool: ...

    def confirm_nvme_format(self, disk: DiskTarget, lbaf: int) -> bool: ...

    def confirm_reboot(self) -> bool: ...

    def reject(self, message: str) -> None:
        """Called with the reason an answer was refused, before asking again."""

    def notify(self, message: str) -> None: ...


def ask(operator: OperatorInterface, question: Callable[[], object], validate: Callable[[object], T]) -> T:
    while True:
        try:
            return validate(question())
        except ValidationError as e:
            logger.info("Rejected answer: %s", e)
            operator.reject(str(e))


def _read_lines(path: str) -> List[str]:
    try:
        return Path(path).read_text(encoding="utf-8", errors="ignore").splitlines()
    except OSError:
        logger.warning("Cannot read %s", path)
        return []


def _swap_decision(operator: OperatorInterface, probe: HardwareProbe, disk: DiskTarget) -> SwapDecision:
    if not ask(operator, operator.swap_enabled, validation.parse_yes_no):
        return SwapDecision.disabled()

    def _decide(answer: object) -> SwapDecision:
        if str(answer).strip().lower() == SWAP_FROM_RAM:
            ram = probe.ram_bytes()
            if not ram:
                raise ValidationError("Cannot detect installed RAM; enter a size in GiB")
            return SwapDecision(enabled=True, size_bytes=swap_size_from_ram_mib(ram) * MIB, source=SWAP_FROM_RAM)
        gib = parse_swap_gib(str(answer))
        return SwapDecision(enabled=True, size_bytes=gib * 1024 * MIB, source="operator")

    def _size(answer: object) -> SwapDecision:
        decision = _decide(answer)
        try:
            plan_partitions(disk, decision)
        except PlanningError as e:
            raise ValidationError(f"Swap of {decision.size_mib} MiB does not fit: {e}") from e
        return decision

    return ask(operator, operator.swap_size, _size)


def collect_config(
    operator: OperatorInterface,
    probe: HardwareProbe,
    *,
    paths: Paths = PATHS,
    target_root: Optional[str] = None,
    dry_run: bool = False,
    mirror_timeout: Optional[float] = None,
) -> InstallConfig:
    """Ask every question once (re-asking rejected answers) and build the config."""

    disks = probe.list_disks()
    if not disks:
        raise PlanningError("No disks found")

    disk = ask(operator, lambda: operator.choose_disk(disks), lambda c: validation.validate_disk(str(c), disks))
    # Fails early, before anything destructive, when the disk cannot hold the layout even without swap.
    plan_partitions(disk, SwapDecision.disabled())
    swap = _swap_decision(operator, probe, disk)

    supported = _read_lines(paths.supported_locales)
    locale = ask(operator, operator.locale, lambda v: validation.validate_locale(str(v), supported))
    timezone = ask(operator, operator.timezone, lambda v: validation.validate_timezone(str(v), paths.zoneinfo_dir))
    hostname = ask(operator, operator.hostname, lambda v: validation.validate_hostname(str(v)))

    root_password = ask(operator, operator.root_password, lambda pw: validation.validate_password(*pw, who="root"))
    username = ask(operator, operator.username, lambda v: validation.validate_username(str(v)))
    user_password = ask(
        operator, lambda: operator.user_password(username), lambda pw: validation.validate_password(*pw, who=username)
    )

    tokens = ask(
        operator,
        lambda: operator.package_tokens(BASE_PACKAGES),
        lambda v: validation.validate_package_tokens(split_tokens(str(v or ""))),
    )

    install_desktop = ask(operator, operator.install_desktop, validation.parse_yes_no)
    install_gpu = ask(operator, operator.install_gpu, validation.parse_yes_no)
    system_type = SystemType.DESKTOP
    if install_gpu:
        system_type = ask(operator, operator.system_type, lambda v: validation.validate_system_type(str(v)))

    check_nvme = False
    if disk.is_nvme:
        check_nvme = ask(operator, lambda: operator.check_nvme_4kn(disk), validation.parse_yes_no)

    return InstallConfig(
        disk=disk,
        swap=swap,
        locale=locale,
        timezone=timezone,
        hostname=hostname,
        username=username,
        root_password=root_password,
        user_password=user_password,
        package_tokens=tokens,
        install_desktop=install_desktop,
        install_gpu=install_gpu,
        system_type=system_type,
        check_nvme_4kn=check_nvme,
        target_root=target_root or paths.target_root,
        dry_run=dry_run,
        mirror_timeout=mirror_timeout,
    )
