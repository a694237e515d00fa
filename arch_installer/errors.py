from __future__ import annotations

from typing import Sequence


class InstallerError(Exception):
    """Base class for every error the installer raises on purpose."""


class ValidationError(InstallerError):
    """Operator input was rejected. Interactive front-ends re-prompt."""


class PlanningError(InstallerError):
    """No usable disk or a disk too small for the layout.

    Raised before any destructive command runs.
    """


class PreconditionError(InstallerError):
    """A phase or mount was attempted before the state it depends on exists."""


class BackgroundTaskError(InstallerError):
    """The mirror refresh failed or timed out. Always downgraded to a warning."""


class OperatorAbort(InstallerError):
    """The operator declined a confirmation gate."""


class ToolInvocationError(InstallerError):
    """A fatal external command returned non-zero.

    The captured output is kept so it can be shown to the operator without
    re-running anything by hand.
    """

    def __init__(self, argv: Sequence[str], returncode: int, stdout: str = "", stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        super().__init__(self._describe())

    def _describe(self) -> str:
        lines = [f"Command failed ({self.returncode}): {' '.join(self.argv)}"]
        if self.stdout.strip():
            lines += ["--- stdout ---", self.stdout.rstrip()]
        if self.stderr.strip():
            lines += ["--- stderr ---", self.stderr.rstrip()]
        return "\n".join(lines)
