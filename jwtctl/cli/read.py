"""``jwtctl read``: decode, verify and print the body of a token."""

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from jwtctl.core.logging import get_logger
from jwtctl.core.settings import CliSettings
from jwtctl.crypto.token_codec import read_token
from jwtctl.crypto.types import PublicKeyFile, SecretKey, VerificationMaterial

log = get_logger(__name__)

SIGNATURE_IGNORED_WARNING = "!!! Token signature has been ignored !!!"


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "read",
        help="read a JWT token",
        description="Read a JWT token and print its body on stdout.",
    )
    parser.add_argument("token", metavar="TOKEN", help="the JWT token to read")

    material = parser.add_mutually_exclusive_group()
    material.add_argument(
        "-s", "--secret", help="signature base64 encoded secret key"
    )
    material.add_argument(
        "-f", "--public-key-file", type=Path, help="Public Key (PEM) file path"
    )

    output = parser.add_mutually_exclusive_group()
    output.add_argument(
        "--standard",
        dest="format",
        action="store_const",
        const="standard",
        help="print the body as NAME=VALUE pairs (default)",
    )
    output.add_argument(
        "--json",
        dest="format",
        action="store_const",
        const="json",
        help="print the body as JSON",
    )
    parser.add_argument(
        "--ignore-expiration",
        action="store_true",
        help="read the jwt claims/header even if the token is expired",
    )
    parser.add_argument(
        "--ignore-signature",
        action="store_true",
        help="read the jwt claims/header even if the signature is invalid "
        "(displayed data cannot be trusted!!!)",
    )
    parser.set_defaults(handler=run)


def _material(args: argparse.Namespace) -> VerificationMaterial | None:
    if args.secret is not None:
        return SecretKey(secret=args.secret)
    if args.public_key_file is not None:
        return PublicKeyFile(path=args.public_key_file)
    return None


def _standard_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, dict):
        return format_standard(value)
    if isinstance(value, list):
        return "[" + ", ".join(_standard_value(item) for item in value) + "]"
    return str(value)


def format_standard(body: dict[str, Any] | str) -> str:
    """Render a body as ``{name=value, ...}``."""
    if isinstance(body, str):
        return body
    pairs = ", ".join(f"{name}={_standard_value(value)}" for name, value in body.items())
    return "{" + pairs + "}"


def run(args: argparse.Namespace, settings: CliSettings, log_level: int) -> int:
    parsed = read_token(
        args.token,
        _material(args),
        ignore_expiration=args.ignore_expiration,
        ignore_signature=args.ignore_signature,
    )
    if log_level <= logging.INFO:
        log.info(f"Header  : {parsed.header}")
        log.info(f"Body    : {parsed.body}")
        log.info(f"Expired : {parsed.expired}")
    if parsed.signature_ignored:
        log.warning(SIGNATURE_IGNORED_WARNING)

    output_format = args.format or settings.output_format
    if output_format == "json":
        print(json.dumps(parsed.body))
    else:
        print(format_standard(parsed.body))
    return 0
