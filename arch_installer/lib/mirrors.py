from __future__ import annotations

import logging
import shutil
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import BackgroundTaskError, PreconditionError
from . import tools
from .command import CommandRunner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MirrorRefreshOutcome:
    ok: bool
    detail: str = ""


class MirrorRefreshTask:
    """Ranks package mirrors in the background while the disk is prepared.

    Started once, joined once. There is no cancellation: a timed-out join
    leaves the refresh running and the caller falls back to the live mirror
    list.
    """

    def __init__(self, runner: CommandRunner, mirrorlist: str) -> None:
        self.runner = runner
        self.mirrorlist = mirrorlist
        self._executor: Optional[ThreadPoolExecutor] = None
        self._future: Optional[Future] = None
        self._joined = False

    @property
    def started(self) -> bool:
        return self._future is not None

    def start(self) -> None:
        if self._future is not None:
            raise PreconditionError("Mirror refresh already started")
        logger.info("Refreshing mirror list in background: %s", self.mirrorlist)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mirror-refresh")
        self._future = self._executor.submit(self.runner.run, tools.reflector_refresh(self.mirrorlist))

    def join(self, timeout: Optional[float] = None) -> MirrorRefreshOutcome:
        if self._future is None or self._executor is None:
            raise PreconditionError("Mirror refresh was never started")
        if self._joined:
            raise PreconditionError("Mirror refresh already joined")
        self._joined = True

        try:
            try:
                self._future.result(timeout=timeout)
            except FutureTimeout as e:
                raise BackgroundTaskError(f"Mirror refresh did not finish within {timeout} seconds") from e
            except Exception as e:
                # Whatever the worker raised, the refresh is only ever advisory.
                raise BackgroundTaskError(str(e) or type(e).__name__) from e
        except BackgroundTaskError as e:
            logger.warning("Mirror refresh failed, falling back to the live mirror list: %s", e)
            return MirrorRefreshOutcome(ok=False, detail=str(e))
        finally:
            self._executor.shutdown(wait=False)

        logger.info("Mirror refresh finished")
        return MirrorRefreshOutcome(ok=True)


def copy_live_mirrorlist(live_mirrorlist: str, target_root: str, *, dry_run: bool = False) -> bool:
    """Give the target the live environment's mirror list. Best-effort."""

    dest = Path(target_root) / "etc/pacman.d/mirrorlist"
    if dry_run:
        logger.info("Would copy %s to %s", live_mirrorlist, dest)
        return True
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        # copyfile follows symlinks, so the target gets the real content.
        shutil.copyfile(live_mirrorlist, dest)
    except OSError as e:
        logger.warning("Could not copy live mirror list into target: %s", e)
        return False
    logger.info("Copied live mirror list to %s", dest)
    return True
