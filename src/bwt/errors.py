"""Token parsing and verification errors.

This module defines the exception hierarchy for token verification failures.
All errors inherit from AuthError to allow catch-all error handling.

ValidationError is the pipeline's aggregate error: a bitmask of independent
failure kinds plus an optional wrapped cause. Several kinds may be set at once;
an error with no kinds set is the only valid state.

Security Note:
    Error messages are intentionally generic at the HTTP boundary (see
    ``description``). Detailed reasons stay on the exception for server-side
    logging and must not be returned to clients.
"""

from __future__ import annotations

from enum import IntFlag
from typing import Final


class AuthError(Exception):
    """Base exception for all authentication failures.

    Application code can catch this single exception type to handle any
    failure generically.

    Attributes:
        error_code: HTTP status used by the Flask integration when aborting.
    """

    error_code: int = 401

    @property
    def description(self) -> str:
        """Client-facing text for the HTTP response body."""
        return str(self) or "Authentication failed"


class MissingToken(AuthError):  # noqa: N818
    """Raised when no token is found in the request.

    This occurs when:
    - The Authorization header is missing
    - The Authorization header has an invalid format (e.g., not "Bearer <token>")
    - The specified cookie is missing (when using cookie-based extraction)

    This should typically result in an HTTP 401 Unauthorized response.
    """

    @property
    def description(self) -> str:
        return "Missing token"


class InvalidSignatureError(AuthError):
    """Raised by a signing method when a signature does not match its input."""


class ValidationErrorKind(IntFlag):
    """Independent failure kinds, OR-combined as evidence accumulates."""

    MALFORMED = 1 << 0
    """Wrong segment count, invalid base64url, or a scheme-prefixed token."""

    UNVERIFIABLE = 1 << 1
    """No key resolver, unregistered algorithm, or the key resolver failed."""

    SIGNATURE_INVALID = 1 << 2
    """Algorithm outside the allow-list, or signature verification failed."""

    CLAIMS_INVALID = 1 << 7
    """Reserved for a claims-validation layer; never set by the parser."""


_NO_ERRORS: Final[ValidationErrorKind] = ValidationErrorKind(0)

_DEFAULT_PHRASES: Final[tuple[tuple[ValidationErrorKind, str], ...]] = (
    (ValidationErrorKind.MALFORMED, "token is malformed"),
    (ValidationErrorKind.UNVERIFIABLE, "token could not be verified"),
    (ValidationErrorKind.SIGNATURE_INVALID, "signature is invalid"),
    (ValidationErrorKind.CLAIMS_INVALID, "token claims are invalid"),
)


class ValidationError(AuthError):
    """Aggregated outcome of a failed parse or verification.

    Attributes:
        errors: Bitmask of ValidationErrorKind flags.
        inner: Underlying cause, if any. Its text takes precedence when the
            error is rendered.
        message: Explicit message used when there is no inner cause.
        unverified_payload: Decoded payload bytes of the rejected token, if
            decoding got that far. These bytes are NOT verified. They are
            kept for diagnostics only and must never be trusted as claims.

    Example:
        ```python
        try:
            payload = parser.parse(token, resolver)
        except ValidationError as e:
            if e.has(ValidationErrorKind.SIGNATURE_INVALID):
                log.warning("bad signature: %s", e)
        ```
    """

    def __init__(
        self,
        message: str = "",
        errors: ValidationErrorKind = _NO_ERRORS,
        *,
        inner: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = ValidationErrorKind(errors)
        self.inner = inner
        self.unverified_payload: bytes | None = None

    def add(self, kind: ValidationErrorKind, inner: BaseException | None = None) -> None:
        """Set ``kind`` in the bitmask, recording ``inner`` as the cause if given."""
        self.errors |= kind
        if inner is not None:
            self.inner = inner

    def has(self, kind: ValidationErrorKind) -> bool:
        return bool(self.errors & kind)

    @property
    def valid(self) -> bool:
        """True iff no failure kind is set."""
        return self.errors == _NO_ERRORS

    @property
    def description(self) -> str:
        return "Invalid token"

    def __str__(self) -> str:
        if self.inner is not None:
            return str(self.inner)
        if self.message:
            return self.message
        phrases = [phrase for kind, phrase in _DEFAULT_PHRASES if self.errors & kind]
        if phrases:
            return "; ".join(phrases)
        return "token is invalid"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(errors={self.errors!r}, message={str(self)!r})"


class SegmentDecodeError(ValidationError):
    """Raised when a token segment is not valid unpadded base64url."""

    def __init__(self, message: str, *, inner: BaseException | None = None) -> None:
        super().__init__(message, ValidationErrorKind.MALFORMED, inner=inner)
