"""
Tests for the token codec: signing, claim validation, type checks and
expiry against the injected clock.
"""

from datetime import timedelta

import jwt
import pytest

from console_api.config.settings import settings
from console_api.core.clock import to_timestamp
from console_api.core.exceptions import ExpiredTokenError, InvalidTokenError
from console_api.entities.auth import ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE
from console_api.infrastructure.security.token_codec import TokenCodec, hash_token


def _raw_claims(clock, **overrides):
    claims = {
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "sub": "1",
        "sid": "sess_abc",
        "iat": to_timestamp(clock()),
        "exp": to_timestamp(clock() + timedelta(minutes=5)),
        "jti": "j1",
        "typ": ACCESS_TOKEN_TYPE,
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


class TestAccessTokens:
    def test_issue_and_verify(self, codec, clock):
        issued = codec.issue_access_token(7, "sess_one")

        claims = codec.verify_access_token(issued.token)

        assert claims.user_id == 7
        assert claims.sid == "sess_one"
        assert claims.typ == ACCESS_TOKEN_TYPE
        assert issued.expires_at == clock() + timedelta(minutes=settings.jwt_access_minutes)
        assert claims.exp == to_timestamp(issued.expires_at)

    def test_each_token_gets_its_own_jti(self, codec):
        a = codec.verify_access_token(codec.issue_access_token(1, "s").token)
        b = codec.verify_access_token(codec.issue_access_token(1, "s").token)
        assert a.jti != b.jti

    def test_expired_exactly_at_exp(self, codec, clock):
        issued = codec.issue_access_token(1, "sess_x")
        clock.set(issued.expires_at)

        with pytest.raises(ExpiredTokenError):
            codec.verify_access_token(issued.token)

    def test_valid_one_second_before_exp(self, codec, clock):
        issued = codec.issue_access_token(1, "sess_x")
        clock.set(issued.expires_at - timedelta(seconds=1))

        assert codec.verify_access_token(issued.token).user_id == 1

    def test_refresh_token_is_not_an_access_token(self, codec):
        refresh = codec.issue_refresh_token(1, "sess_x")

        with pytest.raises(InvalidTokenError):
            codec.verify_access_token(refresh.token)

    def test_bad_signature(self, codec, clock):
        forged = jwt.encode(_raw_claims(clock), "another-secret-of-sufficient-length-0000", algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            codec.verify_access_token(forged)

    def test_wrong_audience(self, codec, clock):
        token = jwt.encode(_raw_claims(clock, aud="someone-else"), settings.jwt_secret, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            codec.verify_access_token(token)

    @pytest.mark.parametrize("missing", ["sub", "sid", "iat", "exp", "typ", "jti"])
    def test_missing_claim_is_rejected(self, codec, clock, missing):
        token = jwt.encode(_raw_claims(clock, **{missing: None}), settings.jwt_secret, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            codec.verify_access_token(token)

    def test_non_numeric_subject_is_rejected(self, codec, clock):
        token = jwt.encode(_raw_claims(clock, sub="admin"), settings.jwt_secret, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            codec.verify_access_token(token)

    @pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c"])
    def test_garbage(self, codec, garbage):
        with pytest.raises(InvalidTokenError):
            codec.verify_access_token(garbage)


class TestRefreshTokens:
    def test_issue_returns_hash_of_raw_value(self, codec):
        issued = codec.issue_refresh_token(3, "sess_r")

        assert issued.token_hash == hash_token(issued.token)
        assert len(issued.token_hash) == 64
        assert issued.token not in issued.token_hash

    def test_expiry_capped_by_not_after(self, codec, clock):
        cap = clock() + timedelta(minutes=10)

        issued = codec.issue_refresh_token(3, "sess_r", not_after=cap)

        assert issued.expires_at == cap
        assert codec.verify_refresh_token(issued.token).exp == to_timestamp(cap)

    def test_not_after_later_than_ttl_is_ignored(self, codec, clock):
        issued = codec.issue_refresh_token(3, "sess_r", not_after=clock() + timedelta(days=30))
        assert issued.expires_at == clock() + timedelta(minutes=settings.jwt_refresh_minutes)

    def test_expiry_check_can_be_skipped(self, codec, clock):
        issued = codec.issue_refresh_token(3, "sess_r")
        clock.advance(minutes=settings.jwt_refresh_minutes + 1)

        with pytest.raises(ExpiredTokenError):
            codec.verify_refresh_token(issued.token)

        claims = codec.verify_refresh_token(issued.token, verify_expiry=False)
        assert claims.typ == REFRESH_TOKEN_TYPE
        assert claims.sid == "sess_r"

    def test_access_token_is_not_a_refresh_token(self, codec):
        access = codec.issue_access_token(1, "sess_x")

        with pytest.raises(InvalidTokenError):
            codec.verify_refresh_token(access.token)


def test_codec_requires_a_secret(clock):
    with pytest.raises(ValueError):
        TokenCodec(secret="", issuer="i", audience="a", access_minutes=1, refresh_minutes=1, clock=clock)
