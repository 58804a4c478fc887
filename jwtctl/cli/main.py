"""jwtctl entry point: global flags and command dispatch."""

import argparse
import logging
import sys
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError, version

from pydantic import ValidationError

from jwtctl.cli import create, read
from jwtctl.cli.inputs import UsageError
from jwtctl.core.logging import configure_logging, get_logger
from jwtctl.core.settings import CliSettings
from jwtctl.crypto.errors import JwtctlError

PROG = "jwtctl"
EXIT_FAILURE = 1
PASSWORD_OPTIONS = ("-p", "--password")

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="tool used to read or create JWT tokens. See more info at https://jwt.io/",
        epilog=f"'{PROG} COMMAND --help' to read about a specific command",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable verbose mode"
    )
    parser.add_argument("--debug", action="store_true", help="enable debug mode")
    parser.add_argument(
        "--version", action="store_true", help="show program version and exit"
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    create.register(subparsers)
    read.register(subparsers)
    return parser


def _version() -> str:
    try:
        return version(PROG)
    except PackageNotFoundError:
        return "unknown"


def _redacted(argv: Sequence[str]) -> list[str]:
    redacted = list(argv)
    for index, arg in enumerate(redacted[:-1]):
        if arg in PASSWORD_OPTIONS:
            redacted[index + 1] = "****"
    return redacted


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            str(error["msg"]).removeprefix("Value error, ") for error in exc.errors()
        )
    return str(exc).rstrip(".")


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = CliSettings()

    level_name = settings.effective_log_level(verbose=args.verbose, debug=args.debug)
    configure_logging(level_name)
    if args.debug:
        log.debug("Debug mode enabled")
    elif args.verbose:
        log.info("Verbose mode enabled")
    raw_args = list(argv) if argv is not None else sys.argv[1:]
    log.debug(f"Input args = {_redacted(raw_args)}")

    if args.version:
        print(f"{PROG} version {_version()}")
        return 0
    if args.command is None:
        parser.error("missing COMMAND operand")

    prefix = f"{PROG} {args.command}"
    try:
        return args.handler(args, settings, getattr(logging, level_name.upper()))
    except (JwtctlError, UsageError, ValidationError) as exc:
        log.debug("Command failed", exc_info=exc)
        print(f"{prefix}: {_describe(exc)}. See {prefix} --help", file=sys.stderr)
        return EXIT_FAILURE


def run() -> None:
    sys.exit(main())
