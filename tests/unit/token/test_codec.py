"""Tests for token signing and verification."""

from datetime import timedelta

import jwt
import pytest

from webfiles.core.modules.token.codec import issue_token, verify_token
from webfiles.errors import InvalidTokenSignatureError, TokenExpiredError

SECRET = "codec-secret-0123456789abcdef0123456789abcdef"
OTHER_SECRET = "another-secret-0123456789abcdef0123456789abcd"


class TestIssueToken:
    """Tests for issue_token."""

    def test_claims_carry_subject(self):
        """Test that issued claims carry the requested subject."""
        _, claims = issue_token(SECRET, "session-1")
        assert claims.subject == "session-1"

    def test_default_lifetime_is_one_day(self):
        """Test that tokens expire 24 hours after issue by default."""
        _, claims = issue_token(SECRET, "session-1")
        assert claims.expires_at - claims.issued_at == timedelta(hours=24)

    def test_custom_lifetime(self):
        """Test that a custom lifetime is honoured."""
        _, claims = issue_token(SECRET, "session-1", timedelta(minutes=5))
        assert claims.expires_at - claims.issued_at == timedelta(minutes=5)

    def test_signed_with_hs256(self):
        """Test that tokens are signed with HS256."""
        token, _ = issue_token(SECRET, "session-1")
        assert jwt.get_unverified_header(token)["alg"] == "HS256"


class TestVerifyToken:
    """Tests for verify_token."""

    @pytest.mark.parametrize("subject", ["a", "3f2b9c1e-0000-4000-8000-000000000000", "user with spaces", "ünïcödé"])
    def test_round_trip_subject(self, subject):
        """Test that verifying an issued token returns its subject."""
        token, claims = issue_token(SECRET, subject)
        verified = verify_token(token, SECRET)
        assert verified.subject == subject
        assert verified == claims

    def test_wrong_secret_rejected(self):
        """Test that a token signed with another secret fails signature verification."""
        token, _ = issue_token(OTHER_SECRET, "session-1")
        with pytest.raises(InvalidTokenSignatureError):
            verify_token(token, SECRET)

    def test_expired_token_rejected(self):
        """Test that a token past its expiry is rejected as expired."""
        token, _ = issue_token(SECRET, "session-1", timedelta(seconds=-1))
        with pytest.raises(TokenExpiredError):
            verify_token(token, SECRET)

    def test_expiry_at_issue_time_rejected(self):
        """Test that a token is expired once now reaches exp."""
        token, _ = issue_token(SECRET, "session-1", timedelta(0))
        with pytest.raises(TokenExpiredError):
            verify_token(token, SECRET)

    def test_unsigned_token_rejected(self):
        """Test that tokens using the 'none' algorithm are rejected."""
        token = jwt.encode({"sub": "session-1", "iat": 0, "exp": 4102444800}, "", algorithm="none")
        with pytest.raises(InvalidTokenSignatureError):
            verify_token(token, SECRET)

    def test_tampered_payload_rejected(self):
        """Test that changing the payload invalidates the signature."""
        token, _ = issue_token(SECRET, "session-1")
        forged, _ = issue_token(SECRET, "session-2")
        header, _, signature = token.split(".")
        _, forged_payload, _ = forged.split(".")
        with pytest.raises(InvalidTokenSignatureError):
            verify_token(f"{header}.{forged_payload}.{signature}", SECRET)

    @pytest.mark.parametrize("garbage", ["", "not-a-token", "a.b.c", "....."])
    def test_malformed_token_rejected(self, garbage):
        """Test that malformed tokens are reported as invalid."""
        with pytest.raises(InvalidTokenSignatureError):
            verify_token(garbage, SECRET)

    def test_missing_subject_rejected(self):
        """Test that a correctly signed token without a subject is rejected."""
        token = jwt.encode({"iat": 0, "exp": 4102444800}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenSignatureError):
            verify_token(token, SECRET)
