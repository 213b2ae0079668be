"""Token parsing and signature verification.

This module implements the parse/verify pipeline:

    split -> decode header -> decode payload -> resolve signing method
          -> allow-list check -> key resolution -> signature verification

Every step either advances or raises a ValidationError; nothing is retried.
A token counts as verified only when its algorithm is registered, passes the
allow-list (when one is configured), and the signing method's ``verify``
returns without raising. There is no path that skips the signature check.

Unverified payload on failure:
    ``parse`` returns payload bytes only on success. When verification fails,
    the decoded-but-unverified payload is attached to the raised error as
    ``ValidationError.unverified_payload`` for diagnostics. Never treat those
    bytes as trusted claims.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import SegmentDecodeError, ValidationError, ValidationErrorKind
from .registry import default_registry
from .segments import decode_segment

if TYPE_CHECKING:
    from .protocols import KeyResolver, SigningMethod, TokenParts
    from .registry import SigningMethodRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParserOptions:
    """Configuration for token parsing.

    Attributes:
        valid_methods: Allow-list of accepted algorithm names. ``None`` or an
            empty tuple accepts any algorithm present in the registry. When
            set, tokens signed with any other algorithm are rejected before
            the key resolver is called.

        use_json_number: Accepted for compatibility with claims-decoding
            layers. The byte-level parser does not decode payloads, so this
            has no effect here.

        skip_claims_validation: Accepted for compatibility with a claims
            layer. No claims are validated here, so this has no effect.

    Example:
        ```python
        parser = Parser(ParserOptions(valid_methods=("HS256", "EdDSA")))
        ```
    """

    valid_methods: tuple[str, ...] | None = None
    use_json_number: bool = False
    skip_claims_validation: bool = False

    def __post_init__(self) -> None:
        # A bare string would turn membership into a substring test
        if isinstance(self.valid_methods, str):
            raise TypeError("valid_methods must be a collection of algorithm names, not a str")
        if self.valid_methods is not None:
            object.__setattr__(self, "valid_methods", tuple(self.valid_methods))


@dataclass(frozen=True, slots=True)
class ParsedToken:
    """A split and decoded, but NOT verified, token.

    Attributes:
        parts: The three raw text segments.
        header: Decoded header bytes (the algorithm name).
        payload: Decoded payload bytes.
        method: Signing method resolved from the header.
    """

    parts: TokenParts
    header: bytes
    payload: bytes
    method: SigningMethod

    @property
    def alg(self) -> str:
        return self.header.decode("utf-8", errors="replace")

    @property
    def signing_input(self) -> str:
        """The original ``header.payload`` text the signature covers."""
        return f"{self.parts[0]}.{self.parts[1]}"


class Parser:
    """Parses and verifies tokens against a signing method registry.

    Thread Safety:
        A Parser holds only immutable options and a reference to a
        thread-safe registry; it is safe to share across threads.

    Attributes:
        _opt: Immutable parser options.
        _registry: Registry used to resolve algorithm names.
    """

    def __init__(
        self,
        options: ParserOptions | None = None,
        registry: SigningMethodRegistry | None = None,
    ) -> None:
        self._opt = options or ParserOptions()
        self._registry = registry if registry is not None else default_registry

    @property
    def options(self) -> ParserOptions:
        return self._opt

    def parse(self, token: str, key_resolver: KeyResolver | None) -> bytes:
        """Verify ``token`` and return its payload bytes.

        Args:
            token: Raw token text (``header.payload.signature``), without any
                ``Bearer`` scheme prefix.
            key_resolver: Callback returning the verification key for the
                token's raw parts. Required; ``None`` always fails.

        Returns:
            Decoded payload bytes of a token whose signature was verified.

        Raises:
            ValidationError: MALFORMED, UNVERIFIABLE or SIGNATURE_INVALID, with
                the underlying cause chained. A ValidationError raised by the
                key resolver propagates unchanged.
        """
        parsed = self.parse_unverified(token)
        payload = parsed.payload

        if key_resolver is None:
            raise self._reject(
                ValidationError("no key resolver was provided", ValidationErrorKind.UNVERIFIABLE),
                payload,
            )

        # Allow-list runs before any key material is fetched
        alg = parsed.method.alg
        if self._opt.valid_methods and alg not in self._opt.valid_methods:
            raise self._reject(
                ValidationError(
                    f"signing method {alg} is invalid", ValidationErrorKind.SIGNATURE_INVALID
                ),
                payload,
            )

        try:
            key = key_resolver(parsed.parts)
        except ValidationError:
            raise
        except Exception as e:
            raise self._reject(
                ValidationError(errors=ValidationErrorKind.UNVERIFIABLE, inner=e), payload
            ) from e

        v_err = ValidationError()
        try:
            parsed.method.verify(parsed.signing_input, parsed.parts[2], key)
        except Exception as e:
            v_err.add(ValidationErrorKind.SIGNATURE_INVALID, inner=e)

        if v_err.valid:
            return payload
        raise self._reject(v_err, payload) from v_err.inner

    def parse_unverified(self, token: str) -> ParsedToken:
        """Split and decode ``token`` and resolve its signing method.

        The signature is NOT checked. Use this only to inspect a token, never
        to trust its payload.

        Raises:
            ValidationError: MALFORMED for structural or encoding problems,
                UNVERIFIABLE when the algorithm is not registered.
        """
        parts = token.split(".")
        if len(parts) != 3:
            raise self._reject(
                ValidationError(
                    "token contains an invalid number of segments", ValidationErrorKind.MALFORMED
                )
            )

        try:
            header = decode_segment(parts[0])
        except SegmentDecodeError as e:
            if token.lower().startswith("bearer "):
                raise self._reject(
                    ValidationError(
                        "tokenstring should not contain 'bearer '", ValidationErrorKind.MALFORMED
                    )
                ) from e
            raise self._reject(
                ValidationError(errors=ValidationErrorKind.MALFORMED, inner=e)
            ) from e

        try:
            payload = decode_segment(parts[1])
        except SegmentDecodeError as e:
            raise self._reject(
                ValidationError(errors=ValidationErrorKind.MALFORMED, inner=e)
            ) from e

        # The header is the bare algorithm name, not a JSON document
        alg = header.decode("utf-8", errors="replace")
        method = self._registry.get(alg)
        if method is None:
            raise self._reject(
                ValidationError(
                    "signing method (alg) is unavailable.", ValidationErrorKind.UNVERIFIABLE
                ),
                payload,
            )

        return ParsedToken(
            parts=(parts[0], parts[1], parts[2]),
            header=header,
            payload=payload,
            method=method,
        )

    @staticmethod
    def _reject(err: ValidationError, payload: bytes | None = None) -> ValidationError:
        err.unverified_payload = payload
        logger.debug("Token rejected [%s]: %s", err.errors.name, err)
        return err
