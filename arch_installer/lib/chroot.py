from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence, Tuple

from ..install_config import InstallConfig
from . import tools
from .command import CommandRunner

logger = logging.getLogger(__name__)

SCRIPT_PATH_IN_TARGET = "/root/arch-installer-configure.sh"
SUDOERS_WHEEL_SED = "s/^# %wheel ALL=(ALL:ALL) ALL/%wheel ALL=(ALL:ALL) ALL/"


def write_target_file(root: str, rel: str, contents: str, *, dry_run: bool, mode: int | None = None) -> Path:
    p = Path(root) / rel.lstrip("/")
    if dry_run:
        logger.info("Would write %s", str(p))
        return p
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    if mode is not None:
        p.chmod(mode)
    return p


@dataclass(frozen=True)
class ConfigureScript:
    """Everything done inside the new root, rendered as one bash script.

    All values are substituted at render time. Passwords are not part of
    the script: the script reads "user:password" lines from stdin and
    feeds them to chpasswd.
    """

    locale: str
    timezone: str
    hostname: str
    username: str
    keymap: str = "us"
    services: Tuple[str, ...] = ()
    credentials: str = field(default="", repr=False)

    @classmethod
    def from_config(cls, cfg: InstallConfig, services: Sequence[str]) -> "ConfigureScript":
        return cls(
            locale=cfg.locale,
            timezone=cfg.timezone,
            hostname=cfg.hostname,
            username=cfg.username,
            keymap=cfg.keymap,
            services=tuple(services),
            credentials=f"root:{cfg.root_password}\n{cfg.username}:{cfg.user_password}\n",
        )

    def render(self) -> str:
        q = shlex.quote
        locale_line = f"{self.locale} UTF-8"
        locale_re = self.locale.replace(".", r"\.")
        uncomment_locale = "s|^#[[:space:]]*(" + locale_re + r" UTF-8.*)|\1|"
        user = q(self.username)
        lines = [
            "#!/bin/bash",
            "set -euo pipefail",
            'credentials="$(cat)"',
            "",
            "# locale",
            f"if grep -q {q('^#[[:space:]]*' + locale_re + ' UTF-8')} /etc/locale.gen; then",
            f"    sed -E -i {q(uncomment_locale)} /etc/locale.gen",
            f"elif ! grep -q {q('^' + locale_re + ' UTF-8')} /etc/locale.gen; then",
            f"    printf '%s\\n' {q(locale_line)} >> /etc/locale.gen",
            "fi",
            "locale-gen",
            f"printf 'LANG=%s\\n' {q(self.locale)} > /etc/locale.conf",
            f"printf 'KEYMAP=%s\\n' {q(self.keymap)} > /etc/vconsole.conf",
            "",
            "# hostname",
            f"printf '%s\\n' {q(self.hostname)} > /etc/hostname",
            f"printf '127.0.0.1\\tlocalhost\\n::1\\tlocalhost\\n127.0.1.1\\t%s\\n' {q(self.hostname)} > /etc/hosts",
            "",
            "# timezone",
            f"ln -sf {q('/usr/share/zoneinfo/' + self.timezone)} /etc/localtime",
            "hwclock --systohc",
            "",
            "# users",
            f"id -u {user} >/dev/null 2>&1 || useradd -m -G wheel -s /bin/bash {user}",
            "printf '%s\\n' \"$credentials\" | chpasswd",
            f"sed -i {q(SUDOERS_WHEEL_SED)} /etc/sudoers",
        ]
        if self.services:
            lines += ["", "# services", "systemctl enable " + " ".join(q(s) for s in self.services)]
        return "\n".join(lines) + "\n"


def run_configure_script(runner: CommandRunner, target_root: str, script: ConfigureScript, *, dry_run: bool = False) -> None:
    """Write the script into the target, run it once through arch-chroot, remove it."""

    path = write_target_file(target_root, SCRIPT_PATH_IN_TARGET, script.render(), dry_run=dry_run, mode=0o700)
    try:
        runner.run(tools.chroot(target_root, "/bin/bash", SCRIPT_PATH_IN_TARGET, input_text=script.credentials))
    finally:
        if not dry_run:
            path.unlink(missing_ok=True)
    logger.info("Configured target (locale=%s timezone=%s hostname=%s user=%s)", script.locale, script.timezone, script.hostname, script.username)
