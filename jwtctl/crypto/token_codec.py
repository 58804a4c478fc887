"""Compact JWT/JWS creation and reading."""

import binascii
import json
from datetime import UTC, datetime
from typing import Any

from jwt.utils import base64url_decode, base64url_encode

from jwtctl.crypto import algorithms
from jwtctl.crypto.algorithms import AlgorithmFamily, SignatureAlgorithm
from jwtctl.crypto.compression import codec_for_header, codec_for_name
from jwtctl.crypto.errors import (
    EmptyPayloadError,
    ExpiredTokenError,
    InvalidKeyMaterialError,
    MalformedTokenError,
    MissingKeyMaterialError,
    SignatureVerificationError,
)
from jwtctl.crypto.keys import resolve_private_key, resolve_public_key
from jwtctl.crypto.types import (
    AsymmetricSigning,
    ExpirationStatus,
    HmacSigning,
    ParsedToken,
    PublicKeyFile,
    SecretKey,
    TokenParams,
    Unsigned,
    VerificationMaterial,
    expiration_datetime,
)

SEGMENT_COUNT = 3
MISSING_KEY_MESSAGE = (
    "A signing key must be specified if the specified JWT is digitally signed."
)


def _to_json_bytes(value: dict[str, Any]) -> bytes:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode()


def _iso(instant: datetime) -> str:
    return instant.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_claims(params: TokenParams, now: datetime) -> dict[str, Any]:
    """Copy the caller claims and stamp ``iat`` (and ``exp`` when a duration is set)."""
    claims = dict(params.claims)
    claims["iat"] = int(now.timestamp())
    if params.duration is not None:
        claims["exp"] = int((now + params.duration).timestamp())
    return claims


def _signing_key(params: TokenParams) -> object:
    signing = params.signing
    if isinstance(signing, HmacSigning):
        return algorithms.decode_secret(signing.secret)
    assert isinstance(signing, AsymmetricSigning)
    return resolve_private_key(signing.key_file, params.password_supplier)


def create_token(params: TokenParams, now: datetime | None = None) -> str:
    """Serialize ``params`` into a compact token string.

    Raises:
        EmptyPayloadError: no claims, headers, payload or signature at all.
        InvalidKeyMaterialError: the signing key cannot be resolved or used.
    """
    signing = params.signing
    if (
        not params.claims
        and not params.headers
        and params.payload is None
        and isinstance(signing, Unsigned)
    ):
        raise EmptyPayloadError("Either 'payload' or 'claims' must be specified")

    now = now or datetime.now(UTC)
    if params.payload is None:
        payload = _to_json_bytes(build_claims(params, now))
    else:
        payload = params.payload.encode()

    algorithm = signing.algorithm
    header = dict(params.headers)
    header["alg"] = algorithm.name
    if params.compression is not None:
        codec = codec_for_name(params.compression)
        header["zip"] = codec.header_id
        payload = codec.compress(payload)
    else:
        header.pop("zip", None)

    signing_input = (
        base64url_encode(_to_json_bytes(header)) + b"." + base64url_encode(payload)
    )
    signature = b""
    if algorithm.family is not AlgorithmFamily.NONE:
        key = _signing_key(params)
        try:
            signature = algorithms.sign(algorithm, signing_input, key)
        finally:
            del key
    return (signing_input + b"." + base64url_encode(signature)).decode()


def _decode_segment(segment: str, label: str) -> bytes:
    try:
        return base64url_decode(segment)
    except (binascii.Error, ValueError) as exc:
        raise MalformedTokenError(f"Unable to decode JWT {label}: {exc}") from exc


def _decode_header(segment: str) -> dict[str, Any]:
    try:
        header = json.loads(_decode_segment(segment, "header"))
    except ValueError as exc:
        raise MalformedTokenError(f"Unable to read JWT header: {exc}") from exc
    if not isinstance(header, dict):
        raise MalformedTokenError("JWT header must be a JSON object")
    return header


def _header_algorithm(header: dict[str, Any]) -> SignatureAlgorithm:
    try:
        return algorithms.get_algorithm(str(header.get("alg", "none")))
    except ValueError as exc:
        raise MalformedTokenError(str(exc)) from exc


def _decode_body(segment: str, header: dict[str, Any]) -> dict[str, Any] | str:
    payload = _decode_segment(segment, "payload")
    zip_id = header.get("zip")
    if zip_id is not None:
        payload = codec_for_header(zip_id).decompress(payload)
    try:
        text = payload.decode()
    except UnicodeDecodeError as exc:
        raise MalformedTokenError(f"JWT payload is not UTF-8 text: {exc}") from exc
    stripped = text.strip()
    if not (stripped.startswith("{") and stripped.endswith("}")):
        return text
    try:
        claims = json.loads(stripped)
    except ValueError as exc:
        raise MalformedTokenError(f"Unable to read JWT claims: {exc}") from exc
    if not isinstance(claims, dict):
        raise MalformedTokenError("JWT claims must be a JSON object")
    return claims


def _verification_key(
    algorithm: SignatureAlgorithm, material: VerificationMaterial
) -> object:
    if isinstance(material, SecretKey):
        if algorithm.family is not AlgorithmFamily.HMAC:
            raise SignatureVerificationError(algorithms.SIGNATURE_MISMATCH_MESSAGE)
        try:
            return algorithms.decode_secret(material.secret)
        except InvalidKeyMaterialError:
            raise SignatureVerificationError(
                algorithms.SIGNATURE_MISMATCH_MESSAGE
            ) from None
    assert isinstance(material, PublicKeyFile)
    if not algorithm.family.is_asymmetric:
        raise SignatureVerificationError(algorithms.SIGNATURE_MISMATCH_MESSAGE)
    return resolve_public_key(material.path)


def _verify_signature(
    segments: list[str],
    algorithm: SignatureAlgorithm,
    material: VerificationMaterial | None,
) -> None:
    if algorithm.family is AlgorithmFamily.NONE:
        raise MalformedTokenError(
            "JWT header declares no algorithm but the token carries a signature"
        )
    if material is None:
        raise MissingKeyMaterialError(MISSING_KEY_MESSAGE)
    signature = _decode_segment(segments[2], "signature")
    signing_input = f"{segments[0]}.{segments[1]}".encode()
    algorithms.verify(
        algorithm, signing_input, _verification_key(algorithm, material), signature
    )


def check_expiration(
    claims: dict[str, Any] | str, now: datetime, ignore_expiration: bool
) -> ExpirationStatus:
    """Decide whether decoded claims may be returned given their ``exp``."""
    if not isinstance(claims, dict) or claims.get("exp") is None:
        return ExpirationStatus.VALID
    if expiration_datetime(claims["exp"]) >= now:
        return ExpirationStatus.VALID
    if ignore_expiration:
        return ExpirationStatus.EXPIRED_RETURNED
    return ExpirationStatus.REJECTED


def read_token(
    token: str,
    material: VerificationMaterial | None = None,
    ignore_expiration: bool = False,
    ignore_signature: bool = False,
    now: datetime | None = None,
) -> ParsedToken:
    """Split, verify, decompress and expiration-check a compact token.

    With ``ignore_signature`` a signed token is read as if it carried no
    signature; its content is then untrusted.

    Raises:
        MalformedTokenError: bad structure, encoding or compression,
            or an ``exp`` claim that is not a representable timestamp.
        MissingKeyMaterialError: signed token and no ``material``.
        SignatureVerificationError: ``material`` does not verify the token,
            including a secret that decodes to no key bytes.
        InvalidKeyFileError: the public key file cannot be loaded.
        ExpiredTokenError: token expired and ``ignore_expiration`` is false.
    """
    segments = token.strip().split(".")
    if len(segments) != SEGMENT_COUNT:
        raise MalformedTokenError(
            "JWT strings must contain exactly 2 period characters. "
            f"Found: {len(segments) - 1}"
        )

    header = _decode_header(segments[0])
    algorithm = _header_algorithm(header)
    signed = bool(segments[2])
    signature_ignored = signed and ignore_signature

    if signature_ignored:
        segments = [segments[0], segments[1], ""]
    elif signed:
        _verify_signature(segments, algorithm, material)
    elif algorithm.family is not AlgorithmFamily.NONE:
        raise MalformedTokenError(
            f"JWT header declares the {algorithm.name} algorithm "
            "but the token carries no signature"
        )

    body = _decode_body(segments[1], header)

    now = now or datetime.now(UTC)
    status = check_expiration(body, now, ignore_expiration)
    if status is ExpirationStatus.REJECTED:
        assert isinstance(body, dict)
        expired_at = expiration_datetime(body["exp"])
        difference = int((now - expired_at).total_seconds() * 1000)
        raise ExpiredTokenError(
            f"JWT expired at {_iso(expired_at)}. Current time: {_iso(now)}, "
            f"a difference of {difference} milliseconds.",
            expired_at=expired_at,
        )

    return ParsedToken(
        header=header,
        body=body,
        expired=status is ExpirationStatus.EXPIRED_RETURNED,
        signature_ignored=signature_ignored,
    )
