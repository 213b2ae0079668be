"""Segment encoding: base64url with trailing padding stripped.

Decoding is strict. Only the URL-safe alphabet is accepted and the re-padded
text must form canonical base64 groups, so whitespace, ``+``/``/``, stray
padding or non-zero trailing bits are rejected rather than silently skipped.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Final

from jwt.utils import base64url_encode

from .errors import SegmentDecodeError

# The last character of a short final group must leave its unused low bits
# zero, so every byte string has exactly one accepted encoding.
_PADDED_SEGMENT: Final[re.Pattern[str]] = re.compile(
    r"(?:[A-Za-z0-9_-]{4})*"
    r"(?:[A-Za-z0-9_-][AQgw]==|[A-Za-z0-9_-]{2}[AEIMQUYcgkosw048]=)?"
)


def encode_segment(data: bytes) -> str:
    """Encode bytes as base64url text without ``=`` padding."""
    return base64url_encode(data).decode("ascii")


def decode_segment(segment: str) -> bytes:
    """Decode unpadded base64url text.

    The input is re-padded to a multiple of four characters before decoding.

    Raises:
        SegmentDecodeError: If the re-padded text is not valid base64url.
    """
    if rem := len(segment) % 4:
        segment += "=" * (4 - rem)

    if not _PADDED_SEGMENT.fullmatch(segment):
        raise SegmentDecodeError("illegal base64url data in segment")

    try:
        return base64.urlsafe_b64decode(segment)
    except (binascii.Error, ValueError) as e:
        raise SegmentDecodeError("illegal base64url data in segment", inner=e) from e
