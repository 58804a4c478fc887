"""Error taxonomy for token and key material operations."""

from datetime import datetime


class JwtctlError(Exception):
    """Base class for every error raised by the token core."""


class TokenError(JwtctlError):
    """Raised when a token cannot be produced or read."""


class MalformedTokenError(TokenError):
    """Raised when a token is not a well-formed compact JWT."""


class MissingKeyMaterialError(TokenError):
    """Raised when a signed token is read without verification material."""


class SignatureVerificationError(TokenError):
    """Raised when a token signature does not match the supplied key."""


class ExpiredTokenError(TokenError):
    """Raised when a token is past its expiration instant."""

    def __init__(self, message: str, expired_at: datetime) -> None:
        super().__init__(message)
        self.expired_at = expired_at


class EmptyPayloadError(TokenError):
    """Raised when a token would carry no content at all."""


class InvalidKeyMaterialError(JwtctlError):
    """Raised when signing or verification key material is unusable."""


class InvalidKeyFileError(InvalidKeyMaterialError):
    """Raised when a PEM file is unreadable, undecryptable or of the wrong kind."""


class MissingPasswordError(InvalidKeyMaterialError):
    """Raised when an encrypted PEM file is given without a password source."""
