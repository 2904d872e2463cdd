"""Tests for bearer-token caller identity."""

import jwt

from engagement.core.auth import caller_from_authorization

SECRET = "unit-test-secret-that-is-long-enough"


def _bearer(claims, secret=SECRET):
    return "Bearer " + jwt.encode(claims, secret, algorithm="HS256")


class TestCallerFromAuthorization:
    def test_valid_token(self):
        assert caller_from_authorization(_bearer({"sub": "admin-1"}), secret=SECRET) == "admin-1"

    def test_missing_header(self):
        assert caller_from_authorization(None, secret=SECRET) is None
        assert caller_from_authorization("", secret=SECRET) is None

    def test_not_bearer(self):
        assert caller_from_authorization("Basic abc", secret=SECRET) is None

    def test_wrong_secret(self):
        assert caller_from_authorization(_bearer({"sub": "x"}, "another-secret-that-is-long-enough"), secret=SECRET) is None

    def test_missing_subject(self):
        assert caller_from_authorization(_bearer({"role": "admin"}), secret=SECRET) is None

    def test_no_secret_configured(self):
        assert caller_from_authorization(_bearer({"sub": "x"}), secret="") is None
