from __future__ import annotations

import enum
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from ..errors import ToolInvocationError

logger = logging.getLogger(__name__)


class CommandCategory(enum.Enum):
    # FATAL failures abort the pipeline; TOLERATED ones are logged and ignored.
    FATAL = "fatal"
    TOLERATED = "tolerated"


@dataclass(frozen=True)
class Command:
    argv: tuple
    category: CommandCategory = CommandCategory.FATAL
    # Read-only queries still execute in dry-run mode.
    readonly: bool = False
    input_text: Optional[str] = field(default=None, repr=False)

    @property
    def tolerated(self) -> bool:
        return self.category is CommandCategory.TOLERATED


def fatal(*argv: str, input_text: Optional[str] = None) -> Command:
    return Command(argv=tuple(argv), category=CommandCategory.FATAL, input_text=input_text)


def tolerated(*argv: str) -> Command:
    return Command(argv=tuple(argv), category=CommandCategory.TOLERATED)


def query(*argv: str) -> Command:
    return Command(argv=tuple(argv), category=CommandCategory.TOLERATED, readonly=True)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
    """Run typed commands with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr so fatal failures can be reported verbatim.
    - dry_run logs mutating commands but does not execute them.
    """

    def __init__(self, *, dry_run: bool = False, env: Mapping[str, str] | None = None) -> None:
        self.dry_run = dry_run
        self.env = dict(env or {})
        self.history: List[Command] = []

    def run(self, command: Command) -> CmdResult:
        argv_list = list(command.argv)
        self.history.append(command)
        logger.info("CMD %s", _fmt_argv(argv_list))

        if self.dry_run and not command.readonly:
            return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

        result = self._execute(command)

        if result.stdout:
            logger.debug("STDOUT %s", result.stdout.strip())
        if result.stderr:
            logger.debug("STDERR %s", result.stderr.strip())

        if not result.ok:
            if command.tolerated:
                logger.warning("Ignoring failure (%s): %s", result.returncode, _fmt_argv(argv_list))
            else:
                raise ToolInvocationError(argv_list, result.returncode, result.stdout, result.stderr)

        return result

    def _execute(self, command: Command) -> CmdResult:
        argv_list = list(command.argv)
        try:
            p = subprocess.run(
                argv_list,
                input=command.input_text,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=dict(os.environ, **self.env),
            )
        except OSError as e:
            # A missing or non-executable binary behaves like any other failing command.
            rc = 127 if isinstance(e, FileNotFoundError) else 126
            return CmdResult(argv=argv_list, returncode=rc, stdout="", stderr=str(e))
        return CmdResult(argv=argv_list, returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)
