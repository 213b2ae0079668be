"""Token extraction strategies from HTTP requests.

This module provides implementations of the Extractor protocol for retrieving
raw tokens from different parts of an HTTP request.

Implementations:
- BearerExtractor: Extracts from an ``Authorization: <scheme> <token>`` header
- CookieExtractor: Extracts from an HTTP cookie (for browser-based apps)

The parser rejects token text that still carries a ``Bearer `` prefix, so
extractors strip the scheme before handing the token on. Token text never
contains whitespace; a value that does is reported as missing rather than
passed to the parser.
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


def _single_token(value: str, where: str) -> str:
    fields = value.split()
    if not fields:
        raise MissingToken(f"{where} is empty")
    if len(fields) > 1:
        raise MissingToken(f"{where} contains whitespace")
    return fields[0]


class BearerExtractor:
    """Extracts the token from the Authorization header.

    Expects requests with header format:
        Authorization: Bearer <token>

    The scheme name is matched case-insensitively and can be changed for
    deployments that label these tokens differently.

    Example:
        ```python
        auth = AuthExtension(
            parser=Parser(),
            key_resolver=StaticKeyResolver(secret),
            extractor=BearerExtractor(),
        )
        ```

    Attributes:
        _scheme: Expected authorization scheme name.
    """

    def __init__(self, scheme: str = "Bearer") -> None:
        if not scheme or any(c.isspace() for c in scheme):
            raise ValueError("scheme must be a single non-empty word")
        self._scheme = scheme

    @property
    def scheme(self) -> str:
        return self._scheme

    def extract(self) -> str:
        """Extract the token from the Authorization header.

        Returns:
            Raw token string (without the scheme prefix).

        Raises:
            MissingToken: If the header is missing, uses another scheme, or
                does not carry exactly one token after the scheme.
        """
        auth_header = request.headers.get("Authorization", "").strip()

        if not auth_header:
            raise MissingToken("Missing Authorization header")

        scheme, _, rest = auth_header.partition(" ")
        if scheme.lower() != self._scheme.lower():
            raise MissingToken(f"Invalid authorization scheme (expected '{self._scheme}')")

        return _single_token(rest, f"{self._scheme} token")


class CookieExtractor:
    """Extracts the token from an HTTP cookie.

    Security Notes:
        - Cookies MUST use HttpOnly and Secure flags
        - Cookie-based auth is vulnerable to CSRF; implement CSRF protection

    Attributes:
        _name: Name of the cookie containing the token.
    """

    def __init__(self, cookie_name: str = "access_token") -> None:
        """Initialize cookie extractor.

        Args:
            cookie_name: Name of the cookie to read. Defaults to "access_token".

        Raises:
            ValueError: If cookie_name is empty.
        """
        if not cookie_name or not cookie_name.strip():
            raise ValueError("cookie_name cannot be empty")
        self._name = cookie_name

    def extract(self) -> str:
        token = request.cookies.get(self._name)

        if token is None:
            raise MissingToken(f"Missing cookie '{self._name}'")

        return _single_token(token, f"Cookie '{self._name}'")
