"""Interactive operator front-end on a plain terminal."""

from __future__ import annotations

import getpass
import sys
from typing import Callable, Sequence, TextIO, Tuple

from arch_installer.errors import OperatorAbort
from arch_installer.install_config import DiskTarget
from arch_installer.lib.sizing import SWAP_FROM_RAM


class ConsoleOperator:
    """Asks every question with input(); passwords are read without echo."""

    def __init__(
        self,
        *,
        read: Callable[[str], str] = input,
        read_secret: Callable[[str], str] = getpass.getpass,
        out: TextIO = sys.stdout,
    ) -> None:
        self._read = read
        self._read_secret = read_secret
        self.out = out

    def _ask(self, prompt: str, default: str = "") -> str:
        suffix = f" [{default}]" if default else ""
        try:
            answer = self._read(f"{prompt}{suffix}: ").strip()
        except EOFError as e:
            raise OperatorAbort("Input closed") from e
        return answer or default

    def _ask_secret_twice(self, who: str) -> Tuple[str, str]:
        try:
            first = self._read_secret(f"Password for {who}: ")
            second = self._read_secret(f"Repeat password for {who}: ")
        except EOFError as e:
            raise OperatorAbort("Input closed") from e
        return first, second

    def _yes_no(self, prompt: str, default: bool = False) -> str:
        return self._ask(f"{prompt} (y/n)", "y" if default else "n")

    def choose_disk(self, disks: Sequence[DiskTarget]) -> object:
        self.notify("Available disks:")
        for i, d in enumerate(disks, start=1):
            self.notify(f"  {i}) {d.describe()}")
        return self._ask("Install to disk (number or path)")

    def swap_enabled(self) -> object:
        return self._yes_no("Create a swap partition?")

    def swap_size(self) -> object:
        return self._ask(f"Swap size in GiB, or '{SWAP_FROM_RAM}' to match installed memory", SWAP_FROM_RAM)

    def locale(self) -> object:
        return self._ask("Locale", "en_US.UTF-8")

    def timezone(self) -> object:
        return self._ask("Timezone (e.g. Europe/Berlin)", "UTC")

    def hostname(self) -> object:
        return self._ask("Hostname", "archlinux")

    def root_password(self) -> Tuple[str, str]:
        return self._ask_secret_twice("root")

    def username(self) -> object:
        return self._ask("Username")

    def user_password(self, username: str) -> Tuple[str, str]:
        return self._ask_secret_twice(username)

    def package_tokens(self, base: Sequence[str]) -> object:
        self.notify("Base packages: " + " ".join(base))
        return self._ask("Extra packages (prefix with ! to remove)")

    def install_desktop(self) -> object:
        return self._yes_no("Install KDE Plasma?")

    def install_gpu(self) -> object:
        return self._yes_no("Install GPU drivers?")

    def system_type(self) -> object:
        return self._ask("System type (desktop/laptop)", "desktop")

    def check_nvme_4kn(self, disk: DiskTarget) -> object:
        return self._yes_no(f"Check {disk.path} for a 4096-byte sector format?")

    def confirm_install(self, summary: str) -> bool:
        self.notify(summary)
        return self._ask("Type YES to erase the disk and install").strip() == "YES"

    def confirm_nvme_format(self, disk: DiskTarget, lbaf: int) -> bool:
        answer = self._yes_no(f"Reformat {disk.path} to LBA format {lbaf} (4096 bytes)? ALL DATA WILL BE LOST")
        return answer.lower() in ("y", "yes")

    def confirm_reboot(self) -> bool:
        return self._yes_no("Installation complete. Reboot now?").lower() in ("y", "yes")

    def reject(self, message: str) -> None:
        self.notify(f"Invalid answer: {message}")

    def notify(self, message: str) -> None:
        print(message, file=self.out)
