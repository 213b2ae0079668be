"""Built-in signing methods backed by PyJWT's algorithm implementations.

Each algorithm family is its own SigningMethod type:

- HMACSigningMethod:   HS256, HS384, HS512 (shared secret, ``bytes`` or ``str``)
- RSASigningMethod:    RS256, RS384, RS512 (RSASSA-PKCS1-v1_5)
- RSAPSSSigningMethod: PS256, PS384, PS512 (RSASSA-PSS)
- ECDSASigningMethod:  ES256, ES384, ES512 (raw ``r || s`` signatures)
- EdDSASigningMethod:  EdDSA (Ed25519 / Ed448)

Asymmetric keys may be ``cryptography`` key objects or PEM text/bytes. Signing
needs the private key; verification needs the public key.

There is deliberately no ``none`` method. A token is never accepted without an
explicit, successful signature check.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jwt.algorithms import (
    ECAlgorithm,
    HMACAlgorithm,
    OKPAlgorithm,
    RSAAlgorithm,
    RSAPSSAlgorithm,
)

from .errors import InvalidSignatureError
from .registry import SigningMethodRegistry, default_registry
from .segments import decode_segment, encode_segment

if TYPE_CHECKING:
    from jwt.algorithms import Algorithm


class _AlgorithmSigningMethod:
    """Adapts a PyJWT ``Algorithm`` to the SigningMethod protocol."""

    def __init__(self, alg: str, algorithm: Algorithm) -> None:
        self._alg = alg
        self._algorithm = algorithm

    @property
    def alg(self) -> str:
        return self._alg

    def sign(self, signing_input: str, key: Any) -> str:
        prepared = self._algorithm.prepare_key(key)
        signature = self._algorithm.sign(signing_input.encode("utf-8"), prepared)
        return encode_segment(signature)

    def verify(self, signing_input: str, signature: str, key: Any) -> None:
        raw_signature = decode_segment(signature)
        prepared = self._algorithm.prepare_key(key)
        if not self._algorithm.verify(signing_input.encode("utf-8"), prepared, raw_signature):
            raise InvalidSignatureError("signature is invalid")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._alg!r})"


class HMACSigningMethod(_AlgorithmSigningMethod):
    """HMAC with SHA-2. The key is the shared secret."""

    def __init__(self, alg: str, hash_alg: Any) -> None:
        super().__init__(alg, HMACAlgorithm(hash_alg))


class RSASigningMethod(_AlgorithmSigningMethod):
    """RSASSA-PKCS1-v1_5 with SHA-2."""

    def __init__(self, alg: str, hash_alg: Any) -> None:
        super().__init__(alg, RSAAlgorithm(hash_alg))


class RSAPSSSigningMethod(_AlgorithmSigningMethod):
    """RSASSA-PSS with SHA-2 and MGF1."""

    def __init__(self, alg: str, hash_alg: Any) -> None:
        super().__init__(alg, RSAPSSAlgorithm(hash_alg))


class ECDSASigningMethod(_AlgorithmSigningMethod):
    """ECDSA over the NIST curves, fixed-width ``r || s`` signature encoding."""

    def __init__(self, alg: str, hash_alg: Any) -> None:
        super().__init__(alg, ECAlgorithm(hash_alg))


class EdDSASigningMethod(_AlgorithmSigningMethod):
    """Edwards-curve signatures. The curve follows the key (Ed25519 or Ed448)."""

    def __init__(self, alg: str = "EdDSA") -> None:
        super().__init__(alg, OKPAlgorithm())


SigningMethodHS256 = HMACSigningMethod("HS256", HMACAlgorithm.SHA256)
SigningMethodHS384 = HMACSigningMethod("HS384", HMACAlgorithm.SHA384)
SigningMethodHS512 = HMACSigningMethod("HS512", HMACAlgorithm.SHA512)

SigningMethodRS256 = RSASigningMethod("RS256", RSAAlgorithm.SHA256)
SigningMethodRS384 = RSASigningMethod("RS384", RSAAlgorithm.SHA384)
SigningMethodRS512 = RSASigningMethod("RS512", RSAAlgorithm.SHA512)

SigningMethodPS256 = RSAPSSSigningMethod("PS256", RSAPSSAlgorithm.SHA256)
SigningMethodPS384 = RSAPSSSigningMethod("PS384", RSAPSSAlgorithm.SHA384)
SigningMethodPS512 = RSAPSSSigningMethod("PS512", RSAPSSAlgorithm.SHA512)

SigningMethodES256 = ECDSASigningMethod("ES256", ECAlgorithm.SHA256)
SigningMethodES384 = ECDSASigningMethod("ES384", ECAlgorithm.SHA384)
SigningMethodES512 = ECDSASigningMethod("ES512", ECAlgorithm.SHA512)

SigningMethodEdDSA = EdDSASigningMethod()

BUILTIN_SIGNING_METHODS: tuple[_AlgorithmSigningMethod, ...] = (
    SigningMethodHS256,
    SigningMethodHS384,
    SigningMethodHS512,
    SigningMethodRS256,
    SigningMethodRS384,
    SigningMethodRS512,
    SigningMethodPS256,
    SigningMethodPS384,
    SigningMethodPS512,
    SigningMethodES256,
    SigningMethodES384,
    SigningMethodES512,
    SigningMethodEdDSA,
)


def register_default_signing_methods(registry: SigningMethodRegistry) -> None:
    """Register every built-in signing method into ``registry``."""
    for method in BUILTIN_SIGNING_METHODS:
        registry.register(method)


register_default_signing_methods(default_registry)
