from __future__ import annotations

from arch_installer.main import main as core_main

from .console import ConsoleOperator


def main(argv: list[str] | None = None) -> int:
    # Without --config the core falls back to interactive console prompts.
    return core_main(argv, console_factory=ConsoleOperator)


if __name__ == "__main__":
    raise SystemExit(main())
