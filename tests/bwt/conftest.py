import hashlib
import hmac
from typing import Any

import pytest
from flask import Flask

import bwt as m


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


class DeterministicMethod:
    """
    Test signing method: the signature is sha256(key | signing_input).

    Deterministic in (signing_input, key), so tokens are reproducible.
    """

    def __init__(self, alg: str = "TEST"):
        self._alg = alg
        self.verify_calls = 0

    @property
    def alg(self) -> str:
        return self._alg

    def _digest(self, signing_input: str, key: Any) -> bytes:
        if not isinstance(key, bytes):
            raise TypeError("TEST method requires a bytes key")
        return hashlib.sha256(key + b"|" + signing_input.encode("utf-8")).digest()

    def sign(self, signing_input: str, key: Any) -> str:
        return m.encode_segment(self._digest(signing_input, key))

    def verify(self, signing_input: str, signature: str, key: Any) -> None:
        self.verify_calls += 1
        expected = self._digest(signing_input, key)
        if not hmac.compare_digest(expected, m.decode_segment(signature)):
            raise m.InvalidSignatureError("signature is invalid")


class RecordingResolver:
    """Key resolver that records every call it receives."""

    def __init__(self, key: Any = None, error: BaseException | None = None):
        self._key = key
        self._error = error
        self.calls: list[tuple[str, str, str]] = []

    @property
    def called(self) -> bool:
        return bool(self.calls)

    def __call__(self, parts: tuple[str, str, str]) -> Any:
        self.calls.append(parts)
        if self._error is not None:
            raise self._error
        return self._key


@pytest.fixture
def key() -> bytes:
    return b"test-key-K"


@pytest.fixture
def payload() -> bytes:
    return b'{"sub":"abc"}'


@pytest.fixture
def test_method() -> DeterministicMethod:
    return DeterministicMethod()


@pytest.fixture
def make_method():
    """Factory fixture for deterministic methods under arbitrary names."""

    def _make(alg: str = "TEST") -> DeterministicMethod:
        return DeterministicMethod(alg)

    return _make


@pytest.fixture
def registry(test_method: DeterministicMethod) -> m.SigningMethodRegistry:
    """Isolated registry holding only the TEST method."""
    reg = m.SigningMethodRegistry()
    reg.register(test_method)
    return reg


@pytest.fixture
def parser(registry: m.SigningMethodRegistry) -> m.Parser:
    return m.Parser(registry=registry)


@pytest.fixture
def signed_token(payload: bytes, key: bytes, test_method: DeterministicMethod) -> str:
    return m.sign(payload, key, test_method)


@pytest.fixture
def make_resolver():
    """
    Factory fixture that returns a function.

    Usage in tests:
        resolver = make_resolver(key=b"k")
        resolver = make_resolver(error=ValueError("boom"))
    """

    def _make(*, key: Any = None, error: BaseException | None = None) -> RecordingResolver:
        return RecordingResolver(key=key, error=error)

    return _make
