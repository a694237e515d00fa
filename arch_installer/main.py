from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Callable, Dict, Optional

import yaml

from .answers import AnswersFileOperator
from .errors import InstallerError, OperatorAbort, PlanningError, ValidationError
from .install_config import InstallConfig
from .lib.command import CommandRunner
from .lib.env import PATHS, Paths
from .lib.hwdetect import HardwareProbe
from .lib.mirrors import MirrorRefreshTask
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .operator_interface import OperatorInterface, collect_config
from .pipeline import InstallContext, PipelineResult, ProvisioningPipeline
from .state_store import save_state
from .steps import (
    BootloaderInstallStep,
    ChrootConfigureStep,
    CleanStep,
    DesktopInstallStep,
    FinalizeStep,
    FormatStep,
    GpuInstallStep,
    Nvme4KnCheckStep,
    PackageInstallStep,
    PartitionStep,
    SubvolumeCreateStep,
    SubvolumeMountStep,
    TableGenerateStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = PATHS.state_default

EXIT_OK = 0
EXIT_FAILED = 1
# Bad answers or an unusable disk, detected before anything destructive.
EXIT_INVALID = 2


def build_steps():
    return [
        CleanStep(),
        Nvme4KnCheckStep(),
        PartitionStep(),
        FormatStep(),
        SubvolumeCreateStep(),
        SubvolumeMountStep(),
        PackageInstallStep(),
        TableGenerateStep(),
        ChrootConfigureStep(),
        DesktopInstallStep(),
        GpuInstallStep(),
        BootloaderInstallStep(),
        FinalizeStep(),
    ]


def is_root() -> bool:
    return os.geteuid() == 0


def config_report(cfg: InstallConfig) -> Dict[str, Any]:
    """The configuration as saved in the state report. Passwords are left out."""

    return {
        "disk": cfg.disk.path,
        "disk_size_bytes": cfg.disk.size_bytes,
        "swap": {"enabled": cfg.swap.enabled, "size_mib": cfg.swap.size_mib, "source": cfg.swap.source},
        "locale": cfg.locale,
        "timezone": cfg.timezone,
        "hostname": cfg.hostname,
        "username": cfg.username,
        "package_tokens": list(cfg.package_tokens),
        "install_desktop": cfg.install_desktop,
        "install_gpu": cfg.install_gpu,
        "system_type": cfg.system_type.value,
        "check_nvme_4kn": cfg.check_nvme_4kn,
        "target_root": cfg.target_root,
    }


def run(
    operator: OperatorInterface,
    *,
    state_path: str = DEFAULT_STATE_PATH,
    target_root: Optional[str] = None,
    dry_run: bool = False,
    mirror_timeout: Optional[float] = None,
    runner: Optional[CommandRunner] = None,
    paths: Paths = PATHS,
) -> PipelineResult:
    """Collect the configuration, run every phase and save a state report."""

    runner = runner or CommandRunner(dry_run=dry_run)
    probe = HardwareProbe(runner, paths)
    report: Dict[str, Any] = {"dry_run": dry_run, "hardware": probe.summary()}
    pipeline: Optional[ProvisioningPipeline] = None

    try:
        cfg = collect_config(
            operator,
            probe,
            paths=paths,
            target_root=target_root,
            dry_run=dry_run,
            mirror_timeout=mirror_timeout,
        )
        report["config"] = config_report(cfg)

        ctx = InstallContext(
            config=cfg,
            runner=runner,
            operator=operator,
            probe=probe,
            mirror_task=MirrorRefreshTask(runner, paths.live_mirrorlist),
            paths=paths,
        )
        pipeline = ProvisioningPipeline(ctx, build_steps())
        return pipeline.run()
    except Exception as e:
        logger.exception("Installer failed")
        phase = pipeline.state.current_phase if pipeline is not None else None
        report["error"] = {"phase": phase.value if phase else None, "error": str(e)}
        raise
    finally:
        if pipeline is not None:
            report["state"] = pipeline.state.to_dict()
        save_state(state_path, report)


def main(
    argv: Optional[list[str]] = None,
    *,
    console_factory: Optional[Callable[[], OperatorInterface]] = None,
) -> int:
    p = argparse.ArgumentParser(prog="arch-installer")
    p.add_argument("--config", default=None, help="Answers file (json|yaml); prompts interactively when omitted")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Path to the state report (json|yaml)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--target", default=PATHS.target_root, help="Mount point of the new system")
    p.add_argument("--dry-run", action="store_true", help="Log mutating commands without running them")
    p.add_argument("--mirror-timeout", type=float, default=None, help="Seconds to wait for the mirror refresh")
    p.add_argument("--debug", action="store_true", help="Also show command output on the console")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.debug else logging.INFO)

    if not is_root():
        logger.error("arch-installer must be run as root")
        return EXIT_FAILED

    try:
        if args.config:
            operator = AnswersFileOperator.from_file(args.config)
        elif console_factory is not None:
            operator = console_factory()
        else:
            logger.error("No answers file given and no interactive front-end available")
            return EXIT_INVALID
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Cannot read answers file %s: %s", args.config, e)
        return EXIT_INVALID

    try:
        result = run(
            operator,
            state_path=args.state,
            target_root=args.target,
            dry_run=args.dry_run,
            mirror_timeout=args.mirror_timeout,
        )
    except (ValidationError, PlanningError) as e:
        logger.error("%s", e)
        return EXIT_INVALID
    except OperatorAbort as e:
        logger.error("Aborted: %s", e)
        return EXIT_FAILED
    except InstallerError as e:
        logger.error("Installation failed:\n%s", e)
        return EXIT_FAILED

    if result.aborted:
        return EXIT_FAILED
    logger.info("Completed phases: %s", ", ".join(result.ran_phases))
    return EXIT_OK
