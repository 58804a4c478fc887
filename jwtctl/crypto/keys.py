"""PEM private/public key resolution, including encrypted private keys."""

from pathlib import Path

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ec import (
    EllipticCurvePrivateKey,
    EllipticCurvePublicKey,
)
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from jwtctl.crypto.errors import InvalidKeyFileError, MissingPasswordError
from jwtctl.crypto.password import MemoizedPassword, PasswordSupplier

PrivateKey = RSAPrivateKey | EllipticCurvePrivateKey
PublicKey = RSAPublicKey | EllipticCurvePublicKey

INVALID_PEM_MESSAGE = "Invalid PEM file"


def _read_pem(pem_file: Path) -> bytes:
    try:
        return Path(pem_file).read_bytes()
    except OSError as exc:
        raise InvalidKeyFileError(
            f"Unable to read PEM file at path {pem_file}"
        ) from exc


def _decrypt_private_key(data: bytes, password: str) -> object:
    return serialization.load_pem_private_key(data, password=password.encode())


def _rebuild_private_key(key: object) -> PrivateKey:
    """Re-create the key from its numbers so no loader state is carried along."""
    if isinstance(key, RSAPrivateKey):
        return key.private_numbers().private_key()
    if isinstance(key, EllipticCurvePrivateKey):
        return key.private_numbers().private_key()
    raise InvalidKeyFileError(INVALID_PEM_MESSAGE)


def _rebuild_public_key(key: object) -> PublicKey:
    if isinstance(key, RSAPublicKey):
        return key.public_numbers().public_key()
    if isinstance(key, EllipticCurvePublicKey):
        return key.public_numbers().public_key()
    raise InvalidKeyFileError(INVALID_PEM_MESSAGE)


def resolve_private_key(
    pem_file: Path, password_supplier: PasswordSupplier | None = None
) -> PrivateKey:
    """Load an RSA or EC private key from a PEM file.

    The password supplier is only consulted, once, when the PEM content is
    encrypted. A wrong password surfaces as ``InvalidKeyFileError``.

    Raises:
        MissingPasswordError: the key is encrypted and no supplier was given.
        InvalidKeyFileError: unreadable, undecryptable or non-private PEM.
    """
    data = _read_pem(pem_file)
    try:
        loaded = serialization.load_pem_private_key(data, password=None)
    except TypeError:
        if password_supplier is None:
            raise MissingPasswordError(
                f"PEM file {pem_file} is encrypted but no password was provided"
            ) from None
        supplier = MemoizedPassword(password_supplier)
        try:
            loaded = _decrypt_private_key(data, supplier())
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise InvalidKeyFileError(INVALID_PEM_MESSAGE) from exc
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyFileError(INVALID_PEM_MESSAGE) from exc
    return _rebuild_private_key(loaded)


def resolve_public_key(pem_file: Path) -> PublicKey:
    """Load an RSA or EC public key from a PEM file.

    Raises:
        InvalidKeyFileError: unreadable PEM or not a public key block.
    """
    data = _read_pem(pem_file)
    try:
        loaded = serialization.load_pem_public_key(data)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise InvalidKeyFileError(INVALID_PEM_MESSAGE) from exc
    return _rebuild_public_key(loaded)
