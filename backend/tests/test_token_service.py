"""
QuillMind Backend — Token Service Unit Tests
==============================================

What we test:
    ✅ issue → verify returns the same principal
    ✅ Expired, tampered, wrong-secret and malformed tokens are Forbidden
    ✅ The payload carries identity claims only
    ✅ A missing secret is an internal error, not a usable token
"""

from datetime import timedelta

import pytest
from jose import jwt

from quillmind.exceptions import ForbiddenError, InternalError
from quillmind.services.token_service import Principal, TokenService


SECRET = "unit-test-secret"


class TestIssueAndVerify:

    def setup_method(self):
        self.tokens = TokenService(secret=SECRET, algorithm="HS256", expires_minutes=60)

    def test_round_trip_returns_principal(self):
        token = self.tokens.issue(Principal(user_id=7, username="ada"))
        assert self.tokens.verify(token) == Principal(user_id=7, username="ada")

    def test_payload_has_only_identity_claims(self):
        token = self.tokens.issue(Principal(user_id=7, username="ada"))
        claims = jwt.get_unverified_claims(token)
        assert set(claims) == {"sub", "username", "iat", "exp"}
        assert claims["sub"] == "7"
        assert claims["exp"] - claims["iat"] == 3600

    def test_expired_token_is_forbidden(self):
        token = self.tokens.issue(Principal(7, "ada"), expires_delta=timedelta(seconds=-5))
        with pytest.raises(ForbiddenError, match="expired"):
            self.tokens.verify(token)

    def test_wrong_secret_is_forbidden(self):
        other = TokenService(secret="someone-else", algorithm="HS256")
        token = other.issue(Principal(7, "ada"))
        with pytest.raises(ForbiddenError):
            self.tokens.verify(token)

    def test_tampered_payload_is_forbidden(self):
        token = self.tokens.issue(Principal(7, "ada"))
        header, payload, signature = token.split(".")
        forged = jwt.encode({"sub": "8", "username": "eve"}, "guess", algorithm="HS256")
        token = ".".join([header, forged.split(".")[1], signature])
        with pytest.raises(ForbiddenError):
            self.tokens.verify(token)

    @pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
    def test_malformed_token_is_forbidden(self, token):
        with pytest.raises(ForbiddenError):
            self.tokens.verify(token)

    def test_non_numeric_subject_is_forbidden(self):
        token = jwt.encode({"sub": "ada", "username": "ada", "exp": 4102444800}, SECRET, algorithm="HS256")
        with pytest.raises(ForbiddenError):
            self.tokens.verify(token)


class TestMissingSecret:

    def test_issue_without_secret_is_internal_error(self):
        tokens = TokenService(secret="")
        with pytest.raises(InternalError):
            tokens.issue(Principal(1, "ada"))

    def test_verify_without_secret_is_internal_error(self):
        tokens = TokenService(secret="")
        with pytest.raises(InternalError):
            tokens.verify("anything")
