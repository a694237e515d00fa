from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from . import tools
from .command import CommandRunner

logger = logging.getLogger(__name__)

_MULTILIB_HEADER_RE = re.compile(r"^\s*#\s*\[multilib\]\s*$")
_COMMENTED_RE = re.compile(r"^\s*#\s*")


def pacstrap(runner: CommandRunner, target_root: str, packages: Sequence[str]) -> None:
    logger.info("Installing %d packages into %s", len(packages), target_root)
    runner.run(tools.pacstrap(target_root, packages))


def enable_multilib_text(pacman_conf: str) -> str:
    """Uncomment the [multilib] header and the line right after it."""

    lines = pacman_conf.splitlines()
    for i, line in enumerate(lines):
        if _MULTILIB_HEADER_RE.match(line):
            lines[i] = "[multilib]"
            if i + 1 < len(lines):
                lines[i + 1] = _COMMENTED_RE.sub("", lines[i + 1], count=1)
            break
    text = "\n".join(lines)
    return text + "\n" if pacman_conf.endswith("\n") else text


def enable_multilib(target_root: str, *, dry_run: bool = False) -> None:
    conf = Path(target_root) / "etc/pacman.conf"
    if dry_run:
        logger.info("Would enable [multilib] in %s", conf)
        return
    original = conf.read_text(encoding="utf-8")
    updated = enable_multilib_text(original)
    if updated != original:
        conf.write_text(updated, encoding="utf-8")
        logger.info("Enabled [multilib] in %s", conf)
    else:
        logger.info("[multilib] already enabled in %s", conf)


def refresh_databases(runner: CommandRunner, target_root: str) -> None:
    runner.run(tools.pacman_sync_upgrade(target_root))


def pacman_install(runner: CommandRunner, target_root: str, packages: Sequence[str]) -> None:
    if not packages:
        return
    runner.run(tools.pacman_install(target_root, packages))


def ensure_multilib(runner: CommandRunner, target_root: str, *, enabled: bool, dry_run: bool = False) -> bool:
    """Enable [multilib] and refresh the databases, once per install."""

    if enabled:
        return True
    enable_multilib(target_root, dry_run=dry_run)
    refresh_databases(runner, target_root)
    return True
