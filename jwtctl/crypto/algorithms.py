"""Signature algorithm catalog and sign/verify using PyJWT primitives."""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from jwt.algorithms import get_default_algorithms
from jwt.exceptions import InvalidKeyError
from pydantic import BaseModel, ConfigDict

from jwtctl.crypto.errors import InvalidKeyMaterialError, SignatureVerificationError

SIGNATURE_MISMATCH_MESSAGE = (
    "JWT signature does not match locally computed signature. "
    "JWT validity cannot be asserted and should not be trusted."
)

_BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_PADDING = 127
_BASE64_INDEX = {char: index for index, char in enumerate(_BASE64_ALPHABET)}
_BASE64_INDEX["="] = _BASE64_PADDING


class AlgorithmFamily(StrEnum):
    """Key family a signature algorithm operates with."""

    NONE = "none"
    HMAC = "hmac"
    RSA = "rsa"
    EC = "ec"

    @property
    def is_asymmetric(self) -> bool:
        return self in (AlgorithmFamily.RSA, AlgorithmFamily.EC)


class SignatureAlgorithm(BaseModel):
    """A JWS algorithm identifier bound to its digest and key family."""

    model_config = ConfigDict(frozen=True)

    name: str
    family: AlgorithmFamily
    digest: str | None = None
    description: str

    def accepts(self, key: object) -> bool:
        """Whether ``key`` belongs to this algorithm's key family."""
        if self.family is AlgorithmFamily.HMAC:
            return isinstance(key, bytes)
        if self.family is AlgorithmFamily.RSA:
            return isinstance(key, RSAPrivateKey | RSAPublicKey)
        if self.family is AlgorithmFamily.EC:
            return isinstance(key, EllipticCurvePrivateKey | EllipticCurvePublicKey)
        return False


def _entry(
    name: str, family: AlgorithmFamily, digest: str | None, description: str
) -> tuple[str, SignatureAlgorithm]:
    return name, SignatureAlgorithm(
        name=name, family=family, digest=digest, description=description
    )


ALGORITHMS: Mapping[str, SignatureAlgorithm] = MappingProxyType(
    dict(
        [
            _entry("none", AlgorithmFamily.NONE, None, "No digital signature"),
            _entry("HS256", AlgorithmFamily.HMAC, "SHA-256", "HMAC using SHA-256"),
            _entry("HS384", AlgorithmFamily.HMAC, "SHA-384", "HMAC using SHA-384"),
            _entry("HS512", AlgorithmFamily.HMAC, "SHA-512", "HMAC using SHA-512"),
            _entry("RS256", AlgorithmFamily.RSA, "SHA-256", "RSASSA-PKCS-v1_5 using SHA-256"),
            _entry("RS384", AlgorithmFamily.RSA, "SHA-384", "RSASSA-PKCS-v1_5 using SHA-384"),
            _entry("RS512", AlgorithmFamily.RSA, "SHA-512", "RSASSA-PKCS-v1_5 using SHA-512"),
            _entry("PS256", AlgorithmFamily.RSA, "SHA-256", "RSASSA-PSS using SHA-256 and MGF1"),
            _entry("PS384", AlgorithmFamily.RSA, "SHA-384", "RSASSA-PSS using SHA-384 and MGF1"),
            _entry("PS512", AlgorithmFamily.RSA, "SHA-512", "RSASSA-PSS using SHA-512 and MGF1"),
            _entry("ES256", AlgorithmFamily.EC, "SHA-256", "ECDSA using P-256 and SHA-256"),
            _entry("ES384", AlgorithmFamily.EC, "SHA-384", "ECDSA using P-384 and SHA-384"),
            _entry("ES512", AlgorithmFamily.EC, "SHA-512", "ECDSA using P-521 and SHA-512"),
        ]
    )
)

NONE = ALGORITHMS["none"]


def get_algorithm(name: str) -> SignatureAlgorithm:
    """Look up a catalog entry by its JWS ``alg`` identifier."""
    try:
        return ALGORITHMS[name]
    except KeyError:
        raise ValueError(f"Unsupported signature algorithm '{name}'") from None


def algorithm_names(family: AlgorithmFamily) -> list[str]:
    """Names of every catalog algorithm in ``family``, in catalog order."""
    return [alg.name for alg in ALGORITHMS.values() if alg.family is family]


def asymmetric_algorithm_names() -> list[str]:
    return [alg.name for alg in ALGORITHMS.values() if alg.family.is_asymmetric]


def decode_secret(secret: str) -> bytes:
    """Decode a base64 HMAC secret the way jjwt does.

    Characters outside the base64 alphabet are skipped and a trailing
    incomplete quadruplet is dropped, so secrets such as ``some_secret``
    produce the same key bytes as tokens minted by jjwt-based tools.
    """
    decoded = bytearray()
    quadruplet: list[int] = []
    for char in secret:
        value = _BASE64_INDEX.get(char)
        if value is None:
            continue
        quadruplet.append(value)
        if len(quadruplet) < 4:
            continue
        first, second, third, fourth = quadruplet
        decoded.append(((first << 2) | (second >> 4)) & 0xFF)
        if third != _BASE64_PADDING:
            decoded.append(((second << 4) | (third >> 2)) & 0xFF)
        if fourth != _BASE64_PADDING:
            decoded.append(((third << 6) | fourth) & 0xFF)
        quadruplet = []
    if not decoded:
        raise InvalidKeyMaterialError("HMAC secret decodes to an empty key")
    return bytes(decoded)


def sign(algorithm: SignatureAlgorithm, signing_input: bytes, key: object) -> bytes:
    """Compute the JWS signature of ``signing_input``."""
    if algorithm.family is AlgorithmFamily.NONE:
        return b""
    if not algorithm.accepts(key):
        raise InvalidKeyMaterialError(
            f"Key material cannot be used with the {algorithm.name} algorithm"
        )
    impl = get_default_algorithms()[algorithm.name]
    try:
        prepared = impl.prepare_key(key)
    except InvalidKeyError as exc:
        raise InvalidKeyMaterialError(str(exc)) from exc
    return impl.sign(signing_input, prepared)


def verify(
    algorithm: SignatureAlgorithm,
    signing_input: bytes,
    key: object,
    signature: bytes,
) -> None:
    """Check ``signature`` over ``signing_input``.

    Raises:
        SignatureVerificationError: the key does not fit the algorithm or
            the signature does not match.
    """
    if algorithm.family is AlgorithmFamily.NONE or not algorithm.accepts(key):
        raise SignatureVerificationError(SIGNATURE_MISMATCH_MESSAGE)
    impl = get_default_algorithms()[algorithm.name]
    try:
        prepared = impl.prepare_key(key)
    except InvalidKeyError as exc:
        raise SignatureVerificationError(SIGNATURE_MISMATCH_MESSAGE) from exc
    if not impl.verify(signing_input, prepared, signature):
        raise SignatureVerificationError(SIGNATURE_MISMATCH_MESSAGE)
