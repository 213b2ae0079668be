"""
Tests for the parse/verify pipeline.

Uses an isolated registry with the deterministic TEST method from conftest.
"""

from collections.abc import Callable
from typing import Any

import pytest

import bwt as m

K = m.ValidationErrorKind


def _flip_first_char(segment: str) -> str:
    return ("A" if segment[0] != "A" else "B") + segment[1:]


class TestRoundTrip:
    """Sign then verify."""

    def test_sign_then_parse_returns_payload(
        self,
        parser: m.Parser,
        signed_token: str,
        payload: bytes,
        key: bytes,
        make_resolver: Callable[..., Any],
    ):
        assert len(payload) == 13

        result = parser.parse(signed_token, make_resolver(key=key))
        assert result == payload

    def test_wire_format(self, signed_token: str):
        header, body, signature = signed_token.split(".")
        assert header == "VEVTVA"  # "TEST"
        assert body == "eyJzdWIiOiJhYmMifQ"
        assert signature

    def test_verification_is_repeatable(
        self,
        parser: m.Parser,
        signed_token: str,
        payload: bytes,
        key: bytes,
        make_resolver: Callable[..., Any],
    ):
        resolver = make_resolver(key=key)

        first = parser.parse(signed_token, resolver)
        second = parser.parse(signed_token, resolver)

        assert first == second == payload
        assert len(resolver.calls) == 2

    def test_resolver_receives_raw_parts(
        self,
        parser: m.Parser,
        signed_token: str,
        key: bytes,
        make_resolver: Callable[..., Any],
    ):
        resolver = make_resolver(key=key)
        parser.parse(signed_token, resolver)

        assert resolver.calls == [tuple(signed_token.split("."))]

    def test_empty_payload(self, parser: m.Parser, key: bytes, test_method: Any):
        token = m.sign(b"", key, test_method)
        assert token.split(".")[1] == ""
        assert parser.parse(token, m.StaticKeyResolver(key)) == b""


class TestMalformed:
    @pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "...."])
    def test_wrong_segment_count(self, parser: m.Parser, token: str):
        with pytest.raises(m.ValidationError) as exc:
            parser.parse_unverified(token)

        assert exc.value.errors == K.MALFORMED
        assert str(exc.value) == "token contains an invalid number of segments"

    def test_wrong_segment_count_through_parse(
        self, parser: m.Parser, make_resolver: Callable[..., Any]
    ):
        resolver = make_resolver(key=b"k")
        with pytest.raises(m.ValidationError) as exc:
            parser.parse("only.two", resolver)

        assert exc.value.has(K.MALFORMED)
        assert not resolver.called

    @pytest.mark.parametrize("prefix", ["Bearer ", "bearer ", "BEARER "])
    def test_bearer_prefix_is_diagnosed(
        self, parser: m.Parser, signed_token: str, prefix: str
    ):
        with pytest.raises(m.ValidationError) as exc:
            parser.parse_unverified(prefix + signed_token)

        assert exc.value.errors == K.MALFORMED
        assert "bearer" in str(exc.value)
        assert isinstance(exc.value.__cause__, m.SegmentDecodeError)

    def test_bad_header_without_prefix_wraps_decode_error(self, parser: m.Parser):
        with pytest.raises(m.ValidationError) as exc:
            parser.parse_unverified("!!!.eyJ9.sig")

        assert exc.value.errors == K.MALFORMED
        assert isinstance(exc.value.inner, m.SegmentDecodeError)
        assert "bearer" not in str(exc.value)

    def test_bad_payload_is_malformed(self, parser: m.Parser):
        with pytest.raises(m.ValidationError) as exc:
            parser.parse_unverified("VEVTVA.a.sig")

        assert exc.value.errors == K.MALFORMED
        assert isinstance(exc.value.inner, m.SegmentDecodeError)
        assert exc.value.unverified_payload is None


class TestUnverifiable:
    def test_unknown_algorithm(
        self,
        parser: m.Parser,
        payload: bytes,
        key: bytes,
        make_method: Callable[..., Any],
        make_resolver: Callable[..., Any],
    ):
        token = m.sign(payload, key, make_method("NOPE"))
        resolver = make_resolver(key=key)

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(token, resolver)

        assert exc.value.errors == K.UNVERIFIABLE
        assert str(exc.value) == "signing method (alg) is unavailable."
        assert exc.value.unverified_payload == payload
        assert not resolver.called

    def test_none_algorithm_is_never_registered(self, payload: bytes):
        token = f"{m.encode_segment(b'none')}.{m.encode_segment(payload)}."

        with pytest.raises(m.ValidationError) as exc:
            m.parse(token, m.StaticKeyResolver(b"k"))

        assert exc.value.errors == K.UNVERIFIABLE

    def test_missing_resolver_fails_even_for_valid_token(
        self, parser: m.Parser, signed_token: str, test_method: Any
    ):
        with pytest.raises(m.ValidationError) as exc:
            parser.parse(signed_token, None)

        assert exc.value.errors == K.UNVERIFIABLE
        assert str(exc.value) == "no key resolver was provided"
        assert test_method.verify_calls == 0

    def test_resolver_failure_is_wrapped(
        self, parser: m.Parser, signed_token: str, make_resolver: Callable[..., Any]
    ):
        boom = ConnectionError("key server unreachable")

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(signed_token, make_resolver(error=boom))

        assert exc.value.errors == K.UNVERIFIABLE
        assert exc.value.inner is boom
        assert exc.value.__cause__ is boom
        assert str(exc.value) == "key server unreachable"

    def test_resolver_validation_error_propagates_unchanged(
        self, parser: m.Parser, signed_token: str, make_resolver: Callable[..., Any]
    ):
        own = m.ValidationError("revoked key", K.SIGNATURE_INVALID)

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(signed_token, make_resolver(error=own))

        assert exc.value is own
        assert exc.value.errors == K.SIGNATURE_INVALID
        assert exc.value.unverified_payload is None


class TestAllowList:
    def test_excluded_algorithm_short_circuits(
        self,
        registry: m.SigningMethodRegistry,
        signed_token: str,
        key: bytes,
        payload: bytes,
        test_method: Any,
        make_resolver: Callable[..., Any],
    ):
        parser = m.Parser(m.ParserOptions(valid_methods=("HS256",)), registry=registry)
        resolver = make_resolver(key=key)

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(signed_token, resolver)

        assert exc.value.errors == K.SIGNATURE_INVALID
        assert str(exc.value) == "signing method TEST is invalid"
        assert not resolver.called
        assert test_method.verify_calls == 0
        assert exc.value.unverified_payload == payload

    def test_included_algorithm_passes(
        self,
        registry: m.SigningMethodRegistry,
        signed_token: str,
        key: bytes,
        payload: bytes,
        make_resolver: Callable[..., Any],
    ):
        parser = m.Parser(m.ParserOptions(valid_methods=("HS256", "TEST")), registry=registry)
        assert parser.parse(signed_token, make_resolver(key=key)) == payload

    def test_empty_allow_list_accepts_any_registered(
        self,
        registry: m.SigningMethodRegistry,
        signed_token: str,
        key: bytes,
        payload: bytes,
    ):
        parser = m.Parser(m.ParserOptions(valid_methods=()), registry=registry)
        assert parser.parse(signed_token, m.StaticKeyResolver(key)) == payload

    def test_str_allow_list_is_rejected(self):
        with pytest.raises(TypeError):
            m.ParserOptions(valid_methods="HS256")  # type: ignore[arg-type]

        with pytest.raises(TypeError):
            m.parse("a.b.c", m.StaticKeyResolver(b"k"), valid_methods="HS256")

    def test_allow_list_is_exact_match_not_substring(
        self,
        make_method: Callable[..., Any],
        key: bytes,
        make_resolver: Callable[..., Any],
    ):
        method = make_method("HS")
        reg = m.SigningMethodRegistry()
        reg.register(method)
        token = m.sign(b"{}", key, method)
        resolver = make_resolver(key=key)

        parser = m.Parser(m.ParserOptions(valid_methods=["HS256"]), registry=reg)  # type: ignore[arg-type]
        assert parser.options.valid_methods == ("HS256",)

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(token, resolver)

        assert exc.value.errors == K.SIGNATURE_INVALID
        assert not resolver.called


class TestSignatureInvalid:
    def test_tampered_signature(
        self,
        parser: m.Parser,
        signed_token: str,
        key: bytes,
        payload: bytes,
        make_resolver: Callable[..., Any],
    ):
        header, body, signature = signed_token.split(".")
        tampered = f"{header}.{body}.{_flip_first_char(signature)}"

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(tampered, make_resolver(key=key))

        err = exc.value
        assert err.errors == K.SIGNATURE_INVALID
        assert isinstance(err.inner, m.InvalidSignatureError)
        # The decoded payload is still available, but only on the error
        assert err.unverified_payload == payload

    def test_any_change_to_last_signature_char_is_rejected(
        self,
        parser: m.Parser,
        signed_token: str,
        key: bytes,
        make_resolver: Callable[..., Any],
    ):
        header, body, signature = signed_token.split(".")
        resolver = make_resolver(key=key)
        alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"

        for c in alphabet.replace(signature[-1], ""):
            with pytest.raises(m.ValidationError) as exc:
                parser.parse(f"{header}.{body}.{signature[:-1]}{c}", resolver)

            assert exc.value.errors == K.SIGNATURE_INVALID

    def test_tampered_payload(
        self, parser: m.Parser, signed_token: str, key: bytes, make_resolver: Callable[..., Any]
    ):
        header, _, signature = signed_token.split(".")
        forged_body = m.encode_segment(b'{"sub":"root"}')
        forged = f"{header}.{forged_body}.{signature}"

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(forged, make_resolver(key=key))

        assert exc.value.errors == K.SIGNATURE_INVALID
        assert exc.value.unverified_payload == b'{"sub":"root"}'

    def test_wrong_key(
        self, parser: m.Parser, signed_token: str, make_resolver: Callable[..., Any]
    ):
        with pytest.raises(m.ValidationError) as exc:
            parser.parse(signed_token, make_resolver(key=b"other-key"))

        assert exc.value.errors == K.SIGNATURE_INVALID

    def test_wrong_key_type_is_signature_invalid(
        self, parser: m.Parser, signed_token: str, make_resolver: Callable[..., Any]
    ):
        with pytest.raises(m.ValidationError) as exc:
            parser.parse(signed_token, make_resolver(key="not-bytes"))

        assert exc.value.errors == K.SIGNATURE_INVALID
        assert isinstance(exc.value.inner, TypeError)

    def test_undecodable_signature_segment(
        self, parser: m.Parser, signed_token: str, key: bytes, make_resolver: Callable[..., Any]
    ):
        header, body, _ = signed_token.split(".")

        with pytest.raises(m.ValidationError) as exc:
            parser.parse(f"{header}.{body}.***", make_resolver(key=key))

        assert exc.value.errors == K.SIGNATURE_INVALID
        assert isinstance(exc.value.inner, m.SegmentDecodeError)


class TestParseUnverified:
    def test_returns_parsed_token(
        self, parser: m.Parser, signed_token: str, payload: bytes, test_method: Any
    ):
        parsed = parser.parse_unverified(signed_token)

        assert parsed.parts == tuple(signed_token.split("."))
        assert parsed.header == b"TEST"
        assert parsed.alg == "TEST"
        assert parsed.payload == payload
        assert parsed.method is test_method
        assert parsed.signing_input == signed_token.rsplit(".", 1)[0]

    def test_does_not_check_signature(
        self, parser: m.Parser, signed_token: str, test_method: Any
    ):
        header, body, _ = signed_token.split(".")
        parsed = parser.parse_unverified(f"{header}.{body}.garbage")

        assert parsed.parts[2] == "garbage"
        assert test_method.verify_calls == 0


def test_inert_options_do_not_change_outcome(
    registry: m.SigningMethodRegistry, signed_token: str, key: bytes, payload: bytes
):
    options = m.ParserOptions(use_json_number=True, skip_claims_validation=True)
    parser = m.Parser(options, registry=registry)

    assert parser.options is options
    assert parser.parse(signed_token, m.StaticKeyResolver(key)) == payload


def test_default_parser_uses_default_registry(signed_token: str, key: bytes):
    # TEST is only in the isolated registry
    with pytest.raises(m.ValidationError) as exc:
        m.Parser().parse(signed_token, m.StaticKeyResolver(key))

    assert exc.value.errors == K.UNVERIFIABLE
