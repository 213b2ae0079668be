"""Flask extension for token authentication.

This module connects the parse/verify pipeline to Flask routes with a
decorator.

Security Model:
1. Extract token from request (header or cookie)
2. Verify the token signature with the configured parser and key resolver
3. Store the verified payload bytes in ``flask.g.bwt_payload``
4. Convert auth errors to HTTP 401 responses

Only verified payloads ever reach ``flask.g``. The unverified payload a
ValidationError carries is never exposed to the view.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import TYPE_CHECKING, Any, Final

from flask import Flask, abort, g, request

from .errors import AuthError
from .extractors import BearerExtractor

if TYPE_CHECKING:
    from .protocols import Extractor, KeyResolver, TokenParser, ViewFunc

logger = logging.getLogger(__name__)

_EXT_KEY: Final[str] = "bwt_auth"
"""Flask extensions registry key for AuthExtension."""


class AuthExtension:
    """
    Flask decorator glue for token authentication.

    Responsibilities:
    - Extract token from request
    - Verify token (TokenParser + KeyResolver)
    - Store verified payload bytes in `flask.g.bwt_payload`
    - Convert domain errors to HTTP responses (abort)

    Pattern:
        auth = AuthExtension(parser, key_resolver)
        auth.init_app(app)

    Usage:
        @app.get("/me")
        @auth.require()
        def me():
            return json.loads(g.bwt_payload)
    """

    def __init__(
        self,
        parser: TokenParser,
        key_resolver: KeyResolver,
        extractor: Extractor | None = None,
    ) -> None:
        self._parser: TokenParser = parser
        self._key_resolver: KeyResolver = key_resolver
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        parser: TokenParser | None = None,
        key_resolver: KeyResolver | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        """Register the extension on ``app``, optionally replacing collaborators.

        Args:
            app (Flask): The Flask application instance.
            parser (TokenParser | None, optional): Parser instance. Defaults to None.
            key_resolver (KeyResolver | None, optional): Key resolver. Defaults to None.
            extractor (Extractor | None, optional): Token extractor instance. Defaults to None.
        """
        if parser is not None:
            self._parser = parser
        if key_resolver is not None:
            self._key_resolver = key_resolver
        if extractor is not None:
            self._extractor = extractor

        app.extensions[_EXT_KEY] = self

    def require(self):
        """Decorator to protect Flask routes with token verification.

        Error mapping:
        - ``MissingToken``     -> HTTP 401 ("Missing token")
        - ``ValidationError``  -> HTTP 401 ("Invalid token")
        - Any other Error      -> HTTP 401 ("Authentication failed")

        Side Effects:
            - Writes verified payload bytes to ``flask.g.bwt_payload`` before
              calling the view.
            - May terminate request handling early via ``flask.abort``.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    token = self._extractor.extract()
                    g.bwt_payload = self._parser.parse(token, self._key_resolver)
                except AuthError as e:
                    logger.info("Rejected request to %s: %s", request.path, e)
                    abort(e.error_code, description=e.description)
                except Exception:
                    logger.exception("Token verification failed unexpectedly")
                    abort(401, description="Authentication failed")

                return view(*args, **kwargs)

            return wrapper

        return decorator


def get_verified_payload(
    parser: TokenParser,
    key_resolver: KeyResolver,
    *,
    cookie_name: str = "id_token",
) -> bytes:
    """
    Return the verified payload of a token stored in a cookie.

    - Extracts the token from cookie (default "id_token")
    - Verifies its signature
    - Returns the payload bytes

    Aborts with 401 when the cookie is missing or the token fails verification.
    """
    token = request.cookies.get(cookie_name)
    if not token:
        abort(401, description="Missing token")
    try:
        payload = parser.parse(token, key_resolver)
    except AuthError as e:
        abort(e.error_code, description=e.description)
    except Exception:
        logger.exception("Token verification failed unexpectedly")
        abort(401, description="Authentication failed")
    return payload
