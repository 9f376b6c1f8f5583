"""Command line entry point."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import config, installer, log
from .logstrategy import TerminalLogStrategy


def show_help() -> None:
    """Print the usage message."""
    print(f"auto-unlocker {config.PROG_VERSION}")
    print()
    print("Run the program with one of these options:")
    print("\t--install (default): install the patch")
    print("\t--uninstall: remove the patch")
    print("\t--download-tools: only download the tools")
    print("\t--help: show this help message")


def _ask(prompt: str) -> str:
    print(prompt, end="", flush=True)
    try:
        words = input().split()
    except EOFError:
        return ""
    return words[0] if words else ""


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is None or geteuid() == 0


def _run(argv: Sequence[str]) -> None:
    if not _is_root():
        print("The program is not running as root, the patch may not work properly.")
        answer = _ask(
            "Running the program with sudo/as root is recommended, in most cases required... "
            "Do you want to continue? (y/n) "
        )
        if answer not in ("y", "Y"):
            print("Aborting...")
            return

    if argv:
        option = argv[0].lower()
        if option == config.UNINSTALL_OPTION:
            installer.uninstall()
        elif option == config.HELP_OPTION:
            show_help()
        elif option == config.INSTALL_OPTION:
            installer.install()
        elif option == config.DOWNLOADONLY_OPTION:
            installer.download_tools(Path(".") / config.TOOLS_DOWNLOAD_FOLDER)
        else:
            print("Unrecognized command.")
            print()
            show_help()
        return

    if Path(config.BACKUP_FOLDER).exists():
        print(
            "A backup folder has been found. Do you wish to uninstall the previous patch? "
            "Type y to uninstall, n to continue with installation."
        )
        answer = _ask("(y/n) ")
        if answer in ("n", "N"):
            installer.install()
        else:
            installer.uninstall()
    else:
        installer.install()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tool with ``argv`` (defaults to the process arguments)."""
    if argv is None:
        argv = sys.argv[1:]

    log.init(TerminalLogStrategy())
    print(f"auto-unlocker {config.PROG_VERSION}")
    print()
    try:
        _run(list(argv))
    except Exception as exc:
        log.error(str(exc))
    finally:
        log.free()
    return 0


if __name__ == "__main__":
    sys.exit(main())