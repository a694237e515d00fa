"""Validation of operator answers.

Every validator either returns the normalized value or raises
ValidationError with a message fit to show the operator.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from ..errors import ValidationError
from ..install_config import DiskTarget, SystemType

MIN_PASSWORD_LENGTH = 4

_LOCALE_RE = re.compile(r"^([a-zA-Z]{2}_[a-zA-Z]{2})(\.UTF-8)?$")
_HOSTNAME_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")
_USERNAME_RE = re.compile(r"^[a-z_][a-z0-9_-]{0,31}$")
_TIMEZONE_RE = re.compile(r"^[A-Za-z0-9_+\-]+(/[A-Za-z0-9_+\-]+)*$")
# pacstrap would read these as options.
_OPTION_TOKEN_RE = re.compile(r"^!?-")

_TRUE = {"y", "yes", "true", "1"}
_FALSE = {"", "n", "no", "false", "0"}


def parse_yes_no(answer: object, default: bool = False) -> bool:
    if isinstance(answer, bool):
        return answer
    if answer is None:
        return default
    v = str(answer).strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False if v else default
    raise ValidationError(f"Expected yes or no, got {answer!r}")


def validate_locale(value: str, supported_lines: Iterable[str]) -> str:
    """"en_US" or "en_US.UTF-8" -> "en_US.UTF-8", if the system supports it."""

    m = _LOCALE_RE.match(str(value).strip())
    if not m:
        raise ValidationError(f"Invalid locale format {value!r}. Example: en_US")
    full = f"{m.group(1)}.UTF-8"
    if f"{full} UTF-8" not in {line.strip() for line in supported_lines}:
        raise ValidationError(f"Locale {full} is not supported")
    return full


def validate_timezone(value: str, zoneinfo_dir: str) -> str:
    tz = str(value).strip()
    if not tz or not _TIMEZONE_RE.match(tz) or ".." in tz.split("/"):
        raise ValidationError(f"Invalid timezone {value!r}. Example: America/New_York")
    if not (Path(zoneinfo_dir) / tz).is_file():
        raise ValidationError(f"Unknown timezone {tz!r}")
    return tz


def validate_hostname(value: str) -> str:
    name = str(value).strip()
    if not name:
        raise ValidationError("Hostname cannot be empty")
    if "_" in name:
        raise ValidationError("Hostname cannot contain underscores")
    if not _HOSTNAME_RE.match(name):
        raise ValidationError(f"Invalid hostname {name!r}: use letters, digits and inner hyphens")
    return name


def validate_username(value: str) -> str:
    name = str(value).strip()
    if not name:
        raise ValidationError("Username cannot be empty")
    if name == "root":
        raise ValidationError("Username cannot be root")
    if not _USERNAME_RE.match(name):
        raise ValidationError(f"Invalid username {name!r}: lowercase letters, digits, '_' and '-' only")
    return name


def validate_password(first: str, second: str, *, who: str = "user") -> str:
    if first != second:
        raise ValidationError(f"Passwords for {who} do not match")
    if len(first) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password for {who} must be at least {MIN_PASSWORD_LENGTH} characters")
    if "\n" in first or "\r" in first:
        raise ValidationError(f"Password for {who} cannot contain line breaks")
    return first


def validate_disk(choice: str, disks: Sequence[DiskTarget]) -> DiskTarget:
    """Accept a device path or a 1-based line number from the listing."""

    c = str(choice).strip()
    if c.isdigit():
        n = int(c)
        if 1 <= n <= len(disks):
            return disks[n - 1]
        raise ValidationError(f"Choose a number between 1 and {len(disks)}")
    disk: Optional[DiskTarget] = next((d for d in disks if d.path == c), None)
    if disk is None:
        raise ValidationError(f"{c!r} is not a whole-disk device")
    return disk


def validate_system_type(value: str) -> SystemType:
    v = str(value).strip().lower()
    if v in {"1", "desktop"}:
        return SystemType.DESKTOP
    if v in {"2", "laptop"}:
        return SystemType.LAPTOP
    raise ValidationError(f"System type must be desktop or laptop, got {value!r}")


def validate_package_tokens(tokens: Sequence[str]) -> Tuple[str, ...]:
    """Extra package names, or `!name` to drop a base package."""

    for token in tokens:
        if _OPTION_TOKEN_RE.match(token):
            raise ValidationError(f"{token!r} looks like an option, not a package name")
        if token == "!":
            raise ValidationError("'!' must be followed by a package name")
    return tuple(tokens)
