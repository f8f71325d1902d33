"""Command line host firing the install/update lifecycle events."""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from security_checker_installer import __version__
from security_checker_installer.config import resolve_provider
from security_checker_installer.errors import ConfigurationError, InstallerError, log_error
from security_checker_installer.hooks import SUBSCRIBED_EVENTS, dispatch
from security_checker_installer.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_INSTALL_FAILURE = 1

# Subcommand -> host event name
COMMAND_EVENTS = {handler: event for event, handler in SUBSCRIBED_EVENTS.items()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="security-checker-installer",
        description="Install or update the local PHP security checker binary.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for stderr output.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    for command, help_text in (
        ("install", "Install the checker unless a binary is already present."),
        ("update", "Verify the checker against the latest release."),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "--bin-dir",
            default=None,
            help="Target directory (overrides environment and pyproject.toml).",
        )
        sub.add_argument(
            "--project-root",
            default=None,
            help="Project whose pyproject.toml holds the bin-dir setting.",
        )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = resolve_provider(args.project_root, args.bin_dir)
        result = dispatch(COMMAND_EVENTS[args.command], config)
    except ConfigurationError as e:
        log_error(e, {"project_root": args.project_root}, logger)
        return EXIT_INSTALL_FAILURE
    except InstallerError:
        # Already logged by the hook
        return EXIT_INSTALL_FAILURE

    print(json.dumps(result.to_dict()))
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
