"""Protocol definitions for the token verification library.

This module defines structural interfaces using Protocol (PEP 544) for:
- Signing methods (one implementation per algorithm family)
- Token parsing
- Token extraction

Using protocols allows for duck-typing and easier testing/mocking without
requiring explicit inheritance. Any class that implements the required methods
satisfies the protocol.

Type aliases provide semantic clarity and adapt easily to future changes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, TypeAlias

# ============================================================================
# Type Aliases
# ============================================================================

TokenParts: TypeAlias = tuple[str, str, str]
"""The three raw text segments of a token: header, payload, signature."""

KeyResolver: TypeAlias = Callable[[TokenParts], Any]
"""Caller-supplied callback that picks the verification key for a token.

The resolver receives the raw, undecoded segments. The header is NOT parsed
for it; a resolver that needs the algorithm name must decode ``parts[0]``
itself (see ``bwt.key_resolvers.AlgorithmKeyResolver``).

Raising ``ValidationError`` propagates that error unchanged. Any other
exception is wrapped and classified as UNVERIFIABLE.
"""

ViewFunc: TypeAlias = Callable[..., Any]
"""Type alias for Flask view functions (callable that takes any args and returns any)."""


# ============================================================================
# Core Protocols
# ============================================================================


class SigningMethod(Protocol):
    """Protocol for signature algorithm implementations.

    The parser is polymorphic over this interface and never special-cases a
    concrete algorithm.
    """

    @property
    def alg(self) -> str:
        """Algorithm name as it appears in the token header (e.g. "HS256")."""
        ...

    def sign(self, signing_input: str, key: Any) -> str:
        """Sign ``signing_input`` and return the encoded signature segment.

        Raises:
            Exception: Any failure (bad key type, backend error) propagates
                to the caller unchanged.
        """
        ...

    def verify(self, signing_input: str, signature: str, key: Any) -> None:
        """Verify the encoded ``signature`` segment over ``signing_input``.

        Returns normally only when the signature is valid.

        Raises:
            InvalidSignatureError: Signature does not match.
            Exception: Any other failure (undecodable signature, wrong key
                type). The parser treats every exception as a failed check.
        """
        ...


class TokenParser(Protocol):
    """Protocol for the parse/verify pipeline consumed by the Flask layer."""

    def parse(self, token: str, key_resolver: KeyResolver | None) -> bytes:
        """Verify ``token`` and return its payload bytes.

        Raises:
            ValidationError: On any parse or verification failure.
        """
        ...


class Extractor(Protocol):
    """Protocol for extracting tokens from HTTP requests.

    Common implementations:
    - Authorization: Bearer <token> header
    - Cookie-based storage
    """

    def extract(self) -> str:
        """Extract the raw token string from the Flask request.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
