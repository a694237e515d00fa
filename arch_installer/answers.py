from __future__ import annotations

import logging
from typing import Any, Dict, Sequence, Tuple

from .errors import ValidationError
from .install_config import DiskTarget
from .state_store import load_state

logger = logging.getLogger(__name__)


class AnswersFileOperator:
    """Non-interactive operator backed by a YAML or JSON answers document.

    A rejected answer cannot be asked again, so reject() raises.
    """

    def __init__(self, answers: Dict[str, Any]) -> None:
        self.answers = answers

    @classmethod
    def from_file(cls, path: str) -> "AnswersFileOperator":
        return cls(load_state(path))

    def _get(self, key: str) -> Any:
        if key not in self.answers or self.answers[key] is None:
            raise ValidationError(f"Answers file is missing {key!r}")
        return self.answers[key]

    def choose_disk(self, disks: Sequence[DiskTarget]) -> object:
        return self._get("disk")

    def swap_enabled(self) -> object:
        return self.answers.get("swap") not in (None, False, 0, "", "no", "false")

    def swap_size(self) -> object:
        return self._get("swap")

    def locale(self) -> object:
        return self._get("locale")

    def timezone(self) -> object:
        return self._get("timezone")

    def hostname(self) -> object:
        return self._get("hostname")

    def root_password(self) -> Tuple[str, str]:
        pw = str(self._get("root_password"))
        return pw, pw

    def username(self) -> object:
        return self._get("username")

    def user_password(self, username: str) -> Tuple[str, str]:
        pw = str(self._get("user_password"))
        return pw, pw

    def package_tokens(self, base: Sequence[str]) -> object:
        tokens = self.answers.get("packages") or ""
        if isinstance(tokens, (list, tuple)):
            return " ".join(str(t) for t in tokens)
        return tokens

    def install_desktop(self) -> object:
        return self.answers.get("desktop", False)

    def install_gpu(self) -> object:
        return self.answers.get("gpu", False)

    def system_type(self) -> object:
        return self.answers.get("system_type", "desktop")

    def check_nvme_4kn(self, disk: DiskTarget) -> object:
        return self.answers.get("nvme_4kn", False)

    def confirm_install(self, summary: str) -> bool:
        logger.info("Configuration summary:\n%s", summary)
        return self.answers.get("confirm") is True

    def confirm_nvme_format(self, disk: DiskTarget, lbaf: int) -> bool:
        return self.answers.get("nvme_4kn_format") is True

    def confirm_reboot(self) -> bool:
        return self.answers.get("reboot") is True

    def reject(self, message: str) -> None:
        raise ValidationError(message)

    def notify(self, message: str) -> None:
        logger.info("%s", message)
