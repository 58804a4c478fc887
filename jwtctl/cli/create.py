"""``jwtctl create``: mint a token from claims, headers and signing options."""

import argparse
import logging
from pathlib import Path

from jwtctl.cli.inputs import load_json_object, pairs_to_dict, parse_duration
from jwtctl.core.logging import get_logger
from jwtctl.core.settings import CliSettings
from jwtctl.crypto.algorithms import (
    AlgorithmFamily,
    algorithm_names,
    asymmetric_algorithm_names,
    get_algorithm,
)
from jwtctl.crypto.password import PasswordSupplier, prompt_password, static_password
from jwtctl.crypto.token_codec import create_token, read_token
from jwtctl.crypto.types import (
    AsymmetricSigning,
    HmacSigning,
    SigningSpec,
    TokenParams,
    Unsigned,
    expiration_datetime,
)

log = get_logger(__name__)


def _describe_algorithms(names: list[str]) -> str:
    return ", ".join(f"{name} ({get_algorithm(name).description})" for name in names)


def register(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "create",
        help="create a JWT token",
        description="Create a JWT token and print it on stdout.",
    )
    parser.add_argument(
        "-f", "--claims-file", type=Path, help="JSON claims file path"
    )
    parser.add_argument(
        "-c",
        "--claim",
        nargs=2,
        action="append",
        metavar=("NAME", "VALUE"),
        help="claim to add to jwt body (override claims from file)",
    )
    parser.add_argument("--headers-file", type=Path, help="JSON headers file path")
    parser.add_argument(
        "--header",
        nargs=2,
        action="append",
        metavar=("NAME", "VALUE"),
        help="header to add to jwt header (override headers from file)",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=parse_duration,
        help="set the duration of the token (expiration date = now + duration). "
        "Format : PTnHnMn.nS (ex: PT10H = 10 hours)",
    )

    compression = parser.add_mutually_exclusive_group()
    compression.add_argument(
        "--deflate",
        dest="compression",
        action="store_const",
        const="deflate",
        help="compress the payload with deflate",
    )
    compression.add_argument(
        "--gzip",
        dest="compression",
        action="store_const",
        const="gzip",
        help="compress the payload with gzip",
    )

    signature = parser.add_mutually_exclusive_group()
    signature.add_argument(
        "--hmac-sign",
        nargs=2,
        metavar=("HMAC_ALG", "SECRET"),
        help="HMAC signature algorithm and base64 encoded secret key. "
        "Available algorithms : "
        f"{_describe_algorithms(algorithm_names(AlgorithmFamily.HMAC))}",
    )
    signature.add_argument(
        "--key-sign",
        "--rsa-sign",
        nargs=2,
        metavar=("ALG", "FILE_PATH"),
        help="asymmetric signature algorithm and Private Key (PEM) file path. "
        "Available algorithms : "
        f"{_describe_algorithms(asymmetric_algorithm_names())}",
    )
    parser.add_argument(
        "-p",
        "--password",
        help="the password of the encrypted PEM file. "
        "Will be asked interactively if not provided via this parameter "
        "or JWTCTL_PEM_PASSWORD.",
    )
    parser.set_defaults(handler=run)


def _password_supplier(
    args: argparse.Namespace, settings: CliSettings, key_file: Path
) -> PasswordSupplier:
    if args.password is not None:
        return static_password(args.password)
    if settings.pem_password is not None:
        return static_password(settings.pem_password.get_secret_value())
    return prompt_password(key_file)


def to_token_params(args: argparse.Namespace, settings: CliSettings) -> TokenParams:
    """Merge files and options into the parameters of one token."""
    claims = {}
    if args.claims_file is not None:
        claims.update(load_json_object(args.claims_file, "claims"))
    claims.update(pairs_to_dict(args.claim))

    headers = {}
    if args.headers_file is not None:
        headers.update(load_json_object(args.headers_file, "headers"))
    headers.update(pairs_to_dict(args.header))

    signing: SigningSpec = Unsigned()
    password_supplier = None
    if args.hmac_sign:
        alg, secret = args.hmac_sign
        signing = HmacSigning(alg=alg, secret=secret)
    elif args.key_sign:
        alg, key_file = args.key_sign
        signing = AsymmetricSigning(alg=alg, key_file=Path(key_file))
        password_supplier = _password_supplier(args, settings, signing.key_file)

    return TokenParams(
        claims=claims,
        headers=headers,
        signing=signing,
        compression=args.compression,
        duration=args.duration,
        password_supplier=password_supplier,
    )


def run(args: argparse.Namespace, settings: CliSettings, log_level: int) -> int:
    params = to_token_params(args, settings)
    token = create_token(params)

    if log_level <= logging.INFO:
        parsed = read_token(token, ignore_expiration=True, ignore_signature=True)
        log.info(f"Header  : {parsed.header}")
        log.info(f"Body    : {parsed.body}")
        exp = parsed.body.get("exp") if isinstance(parsed.body, dict) else None
        until = (
            expiration_datetime(exp).isoformat()
            if exp is not None
            else "no expiration date"
        )
        log.info(f"Generated token until : {until}")

    print(token)
    return 0
