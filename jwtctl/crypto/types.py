"""Type definitions for token creation, reading, and key material."""

import math
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from jwtctl.crypto.algorithms import (
    AlgorithmFamily,
    SignatureAlgorithm,
    get_algorithm,
)
from jwtctl.crypto.compression import codec_for_header, codec_for_name
from jwtctl.crypto.errors import MalformedTokenError


def expiration_datetime(exp: Any) -> datetime:
    """Convert an ``exp`` claim (seconds since the epoch) to an aware UTC datetime.

    Numeric strings are accepted, as claims given on the command line are text.

    Raises:
        MalformedTokenError: non-numeric, non-finite or out of datetime range.
    """
    if isinstance(exp, str):
        try:
            exp = float(exp)
        except ValueError:
            raise MalformedTokenError(
                f"JWT 'exp' claim must be numeric, got {exp!r}"
            ) from None
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        raise MalformedTokenError(f"JWT 'exp' claim must be numeric, got {exp!r}")
    if not math.isfinite(exp):
        raise MalformedTokenError(f"JWT 'exp' claim must be finite, got {exp!r}")
    try:
        return datetime.fromtimestamp(exp, UTC)
    except (ValueError, OverflowError, OSError) as exc:
        raise MalformedTokenError(
            f"JWT 'exp' claim is out of range, got {exp!r}"
        ) from exc


def _algorithm_of(name: str, accepted: tuple[AlgorithmFamily, ...], label: str) -> str:
    algorithm = get_algorithm(name)
    if algorithm.family not in accepted:
        raise ValueError(f"Invalid {label} algorithm '{name}'")
    return algorithm.name


class Unsigned(BaseModel):
    """No signature; the token is emitted with ``alg: none``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return get_algorithm("none")


class HmacSigning(BaseModel):
    """HMAC algorithm with a base64 encoded shared secret."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["hmac"] = "hmac"
    alg: str
    secret: str = Field(repr=False, min_length=1)

    @field_validator("alg")
    @classmethod
    def _hmac_only(cls, value: str) -> str:
        return _algorithm_of(value, (AlgorithmFamily.HMAC,), "HMAC")

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return get_algorithm(self.alg)


class AsymmetricSigning(BaseModel):
    """RSA, RSASSA-PSS or EC algorithm with a PEM private key file."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["asymmetric"] = "asymmetric"
    alg: str
    key_file: Path

    @field_validator("alg")
    @classmethod
    def _asymmetric_only(cls, value: str) -> str:
        return _algorithm_of(
            value, (AlgorithmFamily.RSA, AlgorithmFamily.EC), "asymmetric"
        )

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return get_algorithm(self.alg)


SigningSpec = Annotated[
    Unsigned | HmacSigning | AsymmetricSigning, Field(discriminator="kind")
]


class SecretKey(BaseModel):
    """Base64 encoded shared secret used to verify HMAC tokens."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["secret"] = "secret"
    secret: str = Field(repr=False, min_length=1)


class PublicKeyFile(BaseModel):
    """PEM public key file used to verify asymmetric tokens."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["public_key"] = "public_key"
    path: Path


VerificationMaterial = Annotated[
    SecretKey | PublicKeyFile, Field(discriminator="kind")
]


class TokenParams(BaseModel):
    """Everything needed to mint one token."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    claims: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, Any] = Field(default_factory=dict)
    payload: str | None = None
    signing: SigningSpec = Field(default_factory=Unsigned)
    compression: str | None = None
    duration: timedelta | None = None
    password_supplier: Callable[[], str] | None = Field(default=None, repr=False)

    @field_validator("compression")
    @classmethod
    def _known_codec(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return codec_for_name(value).name

    @field_validator("duration")
    @classmethod
    def _positive_duration(cls, value: timedelta | None) -> timedelta | None:
        if value is not None and value <= timedelta(0):
            raise ValueError("Duration must be positive")
        return value

    @model_validator(mode="after")
    def _payload_or_claims(self) -> "TokenParams":
        if self.payload is not None and self.claims:
            raise ValueError("A token carries either 'payload' or 'claims', not both")
        if self.payload is not None and self.duration is not None:
            raise ValueError("An expiration can only be set on a claims token")
        if self.duration is None and self.claims.get("exp") is not None:
            try:
                expiration_datetime(self.claims["exp"])
            except MalformedTokenError as exc:
                raise ValueError(str(exc)) from None
        return self


class ExpirationStatus(Enum):
    """Outcome of the post-verification expiration gate."""

    VALID = "valid"
    EXPIRED_RETURNED = "expired_returned"
    REJECTED = "rejected"


class ParsedToken(BaseModel):
    """Decoded header and body of a token that was read."""

    header: dict[str, Any]
    body: dict[str, Any] | str
    expired: bool = False
    signature_ignored: bool = False

    @property
    def algorithm(self) -> str:
        return str(self.header.get("alg", "none"))

    @property
    def compression(self) -> str | None:
        """Name of the codec the payload was compressed with, if any."""
        zip_id = self.header.get("zip")
        if zip_id is None:
            return None
        return codec_for_header(zip_id).name
