"""Reversible payload compression codecs keyed by name and header id."""

import gzip
import zlib
from collections.abc import Callable, Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from jwtctl.crypto.errors import MalformedTokenError


def _inflate(data: bytes) -> bytes:
    # jjwt emits sync-flushed streams without the adler32 trailer
    inflater = zlib.decompressobj()
    inflated = inflater.decompress(data) + inflater.flush()
    if not inflated and data:
        raise zlib.error("no data could be inflated")
    return inflated


class CompressionCodec(BaseModel):
    """A named byte transform recorded in the token header ``zip`` field."""

    model_config = ConfigDict(frozen=True)

    name: str
    header_id: str
    compressor: Callable[[bytes], bytes]
    decompressor: Callable[[bytes], bytes]

    def compress(self, data: bytes) -> bytes:
        return self.compressor(data)

    def decompress(self, data: bytes) -> bytes:
        """Inverse of :meth:`compress`.

        Raises:
            MalformedTokenError: ``data`` is not a valid stream for this codec.
        """
        try:
            return self.decompressor(data)
        except (zlib.error, OSError, EOFError) as exc:
            raise MalformedTokenError(
                f"Unable to decompress {self.name} payload: {exc}"
            ) from exc


DEFLATE = CompressionCodec(
    name="deflate",
    header_id="DEF",
    compressor=zlib.compress,
    decompressor=_inflate,
)

GZIP = CompressionCodec(
    name="gzip",
    header_id="GZIP",
    compressor=gzip.compress,
    decompressor=gzip.decompress,
)

CODECS: Mapping[str, CompressionCodec] = MappingProxyType(
    {codec.name: codec for codec in (DEFLATE, GZIP)}
)


def codec_for_name(name: str) -> CompressionCodec:
    """Find a codec by its name, case-insensitively."""
    try:
        return CODECS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unsupported compression codec '{name}'. Must be one of {list(CODECS)}"
        ) from None


def codec_for_header(header_id: str) -> CompressionCodec:
    """Find the codec a token header's ``zip`` value refers to."""
    for codec in CODECS.values():
        if codec.header_id.upper() == str(header_id).upper():
            return codec
    raise MalformedTokenError(f"Unsupported compression algorithm '{header_id}'")
