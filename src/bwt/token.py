"""Token construction and module-level parsing helpers.

Wire format::

    base64url(alg) "." base64url(payload) "." base64url(signature)

All three segments are unpadded base64url. The header segment decodes to the
bare algorithm name, not a JSON document.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from .parser import Parser, ParserOptions
from .segments import encode_segment

if TYPE_CHECKING:
    from .parser import ParsedToken
    from .protocols import KeyResolver, SigningMethod


def sign(payload: bytes, key: Any, method: SigningMethod) -> str:
    """Build a signed token for ``payload``.

    Args:
        payload: Raw payload bytes; encoding them (JSON or otherwise) is the
            caller's concern.
        key: Signing key in whatever form ``method`` accepts.
        method: Signing method whose ``alg`` becomes the header.

    Returns:
        The complete ``header.payload.signature`` token text.

    Raises:
        Exception: Whatever ``method.sign`` raises, unchanged.
    """
    signing_input = f"{encode_segment(method.alg.encode('utf-8'))}.{encode_segment(payload)}"
    signature = method.sign(signing_input, key)
    return f"{signing_input}.{signature}"


def parse(
    token: str,
    key_resolver: KeyResolver | None,
    *,
    valid_methods: Iterable[str] | None = None,
) -> bytes:
    """Verify ``token`` using the default registry and return its payload.

    See ``Parser.parse``.
    """
    options = ParserOptions(valid_methods=valid_methods)  # type: ignore[arg-type]
    return Parser(options).parse(token, key_resolver)


def parse_unverified(token: str) -> ParsedToken:
    """Split and decode ``token`` without checking its signature.

    See ``Parser.parse_unverified``.
    """
    return Parser().parse_unverified(token)
