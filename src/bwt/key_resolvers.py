"""
Key resolver implementations.

A key resolver is called with the token's three raw text segments and
returns the key the signature must be checked against. It runs only after
the algorithm has passed the parser's allow-list.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .errors import SegmentDecodeError, ValidationError, ValidationErrorKind
from .segments import decode_segment

if TYPE_CHECKING:
    from .protocols import TokenParts


class StaticKeyResolver:
    """Returns the same key for every token.

    Suitable when a service trusts exactly one signer.
    """

    def __init__(self, key: Any) -> None:
        if key is None:
            raise ValueError("key cannot be None")
        self._key = key

    def __call__(self, parts: TokenParts) -> Any:
        return self._key


class AlgorithmKeyResolver:
    """
    Picks the verification key by the token's algorithm name.

    The header segment is decoded here, since the parser hands resolvers the
    raw parts only. Pair this with an allow-list on the parser: the
    resolver only chooses a key, it does not decide which algorithms are
    acceptable.

    Example
    -------
    resolver = AlgorithmKeyResolver({
        "HS256": b"shared-secret",
        "EdDSA": ed25519_public_key,
    })
    payload = Parser(ParserOptions(valid_methods=("HS256", "EdDSA"))).parse(token, resolver)
    """

    def __init__(self, keys: Mapping[str, Any]) -> None:
        if not keys:
            raise ValueError("keys cannot be empty")
        self._keys = dict(keys)

    def __call__(self, parts: TokenParts) -> Any:
        try:
            alg = decode_segment(parts[0]).decode("utf-8")
        except (SegmentDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(errors=ValidationErrorKind.MALFORMED, inner=e) from e

        key = self._keys.get(alg)
        if key is None:
            raise ValidationError(
                f"no key configured for algorithm {alg}", ValidationErrorKind.UNVERIFIABLE
            )
        return key
