"""
Compact signed tokens: parsing, verification and signing.

Wire format
-----------
Three unpadded base64url segments joined by ``.``::

    base64url(alg) "." base64url(payload) "." base64url(signature)

The header segment decodes to the bare algorithm name (e.g. ``HS256``), not
to a JSON document. The signature covers the original ``header.payload``
text.

Verification flow
-----------------
1. Split the token into exactly three segments.
2. Decode the header (algorithm name) and the payload.
3. Resolve the algorithm in the signing method registry.
4. Reject algorithms outside the parser's allow-list, if one is configured.
5. Ask the caller's key resolver for the key, given the raw segments.
6. Verify the signature; any failure raises ``ValidationError``.

Security notes
--------------
- Never trust payload bytes until ``parse`` returns them.
- Configure an allow-list of algorithms (avoid algorithm confusion).
- ``ValidationError.unverified_payload`` is for diagnostics only.

Example usage
-------------

.. code-block:: python

    import bwt

    token = bwt.sign(b'{"sub":"abc"}', secret, bwt.SigningMethodHS256)

    parser = bwt.Parser(bwt.ParserOptions(valid_methods=("HS256",)))
    try:
        payload = parser.parse(token, bwt.StaticKeyResolver(secret))
    except bwt.ValidationError as e:
        ...
"""

# Errors
from .errors import (
    AuthError,
    InvalidSignatureError,
    MissingToken,
    SegmentDecodeError,
    ValidationError,
    ValidationErrorKind,
)

# Extractors
from .extractors import BearerExtractor, CookieExtractor

# Flask extension
from .flask_extension import AuthExtension, get_verified_payload

# Key resolvers
from .key_resolvers import AlgorithmKeyResolver, StaticKeyResolver

# Parser
from .parser import ParsedToken, Parser, ParserOptions

# Protocols
from .protocols import (
    Extractor,
    KeyResolver,
    SigningMethod,
    TokenParser,
    TokenParts,
    ViewFunc,
)

# Registry
from .registry import (
    SigningMethodRegistry,
    default_registry,
    get_signing_method,
    register_signing_method,
)

# Segments
from .segments import decode_segment, encode_segment

# Signing methods (importing registers the built-ins in default_registry)
from .signing_methods import (
    BUILTIN_SIGNING_METHODS,
    ECDSASigningMethod,
    EdDSASigningMethod,
    HMACSigningMethod,
    RSAPSSSigningMethod,
    RSASigningMethod,
    SigningMethodEdDSA,
    SigningMethodES256,
    SigningMethodES384,
    SigningMethodES512,
    SigningMethodHS256,
    SigningMethodHS384,
    SigningMethodHS512,
    SigningMethodPS256,
    SigningMethodPS384,
    SigningMethodPS512,
    SigningMethodRS256,
    SigningMethodRS384,
    SigningMethodRS512,
    register_default_signing_methods,
)

# Token helpers
from .token import parse, parse_unverified, sign

__all__ = [
    # Errors
    "AuthError",
    "InvalidSignatureError",
    "MissingToken",
    "SegmentDecodeError",
    "ValidationError",
    "ValidationErrorKind",
    # Protocols
    "Extractor",
    "KeyResolver",
    "SigningMethod",
    "TokenParser",
    "TokenParts",
    "ViewFunc",
    # Segments
    "decode_segment",
    "encode_segment",
    # Registry
    "SigningMethodRegistry",
    "default_registry",
    "get_signing_method",
    "register_signing_method",
    # Signing methods
    "BUILTIN_SIGNING_METHODS",
    "ECDSASigningMethod",
    "EdDSASigningMethod",
    "HMACSigningMethod",
    "RSAPSSSigningMethod",
    "RSASigningMethod",
    "SigningMethodEdDSA",
    "SigningMethodES256",
    "SigningMethodES384",
    "SigningMethodES512",
    "SigningMethodHS256",
    "SigningMethodHS384",
    "SigningMethodHS512",
    "SigningMethodPS256",
    "SigningMethodPS384",
    "SigningMethodPS512",
    "SigningMethodRS256",
    "SigningMethodRS384",
    "SigningMethodRS512",
    "register_default_signing_methods",
    # Parser
    "ParsedToken",
    "Parser",
    "ParserOptions",
    # Token helpers
    "parse",
    "parse_unverified",
    "sign",
    # Key resolvers
    "AlgorithmKeyResolver",
    "StaticKeyResolver",
    # Extractors
    "BearerExtractor",
    "CookieExtractor",
    # Flask extension
    "AuthExtension",
    "get_verified_payload",
]
