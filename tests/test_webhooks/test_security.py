"""Tests for webhook authorization headers."""

import base64
import hashlib

import pytest

from storehook.webhooks.models import Authentication, Hook, HookType
from storehook.webhooks.security import (
    DigestParams,
    auth_header_for_hook,
    basic_auth_header,
    build_auth_header,
    digest_auth_header,
    request_uri,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def digest_params():
    """Static digest challenge parameters."""
    return DigestParams(
        realm="shop",
        nonce="abc123",
        algorithm="MD5",
        qop="auth",
        nonce_count="00000001",
        client_nonce="0a4f113b",
        opaque="5ccc069c",
    )


def _md5(value: str) -> str:
    return hashlib.md5(value.encode()).hexdigest()


# ============================================================================
# Basic Tests
# ============================================================================


class TestBasicAuth:
    """Tests for Basic authorization."""

    def test_known_value(self):
        """Test the header for u/p."""
        assert basic_auth_header("u", "p") == "Basic dTpw"

    def test_round_trips_credentials(self):
        """Test that the token decodes back to user:password."""
        header = basic_auth_header("admin", "s3cr:et")
        token = header.removeprefix("Basic ")

        assert base64.b64decode(token).decode() == "admin:s3cr:et"

    def test_build_auth_header_basic(self):
        """Test dispatch through build_auth_header."""
        header = build_auth_header(
            Authentication.BASIC, "https://example.com", "POST", "u", "p"
        )

        assert header == "Basic dTpw"


# ============================================================================
# Digest Tests
# ============================================================================


class TestDigestAuth:
    """Tests for Digest authorization."""

    def test_request_uri_path_and_query(self):
        """Test that only path and query are used as the URI."""
        assert request_uri("https://example.com/hooks/order?id=5") == "/hooks/order?id=5"
        assert request_uri("https://example.com/hooks") == "/hooks"

    def test_response_hash(self, digest_params):
        """Test the digest response against a hand-computed value."""
        header = digest_auth_header(
            "https://example.com/api/orders?x=1", "POST", "user", "pass", digest_params
        )

        ha1 = _md5("user:shop:pass")
        ha2 = _md5("POST:/api/orders?x=1")
        expected = _md5(f"{ha1}:abc123:00000001:0a4f113b:auth:{ha2}")

        assert f'response="{expected}"' in header

    def test_field_order(self, digest_params):
        """Test that fields appear in the fixed order."""
        header = digest_auth_header("https://example.com/a", "GET", "user", "pass", digest_params)

        assert header.startswith('Digest username="user", realm="shop", nonce="abc123", uri="/a"')
        positions = [
            header.index(f"{name}=")
            for name in (
                "username", "realm", "nonce", "uri", "cnonce", "nc",
                "qop", "response", "opaque", "algorithm",
            )
        ]
        assert positions == sorted(positions)
        assert "nc=00000001," in header
        assert header.endswith('algorithm="MD5"')

    def test_empty_method_defaults_to_get(self, digest_params):
        """Test that an empty method signs as GET."""
        empty = digest_auth_header("https://example.com/a", "", "u", "p", digest_params)
        get = digest_auth_header("https://example.com/a", "GET", "u", "p", digest_params)

        assert empty == get

    def test_deterministic(self, digest_params):
        """Test that same inputs give the same header."""
        first = digest_auth_header("https://example.com/a", "PUT", "u", "p", digest_params)
        second = digest_auth_header("https://example.com/a", "PUT", "u", "p", digest_params)

        assert first == second


# ============================================================================
# Scheme Selection Tests
# ============================================================================


class TestBuildAuthHeader:
    """Tests for scheme selection."""

    def test_none_is_empty(self):
        """Test that no authentication produces no header."""
        assert build_auth_header(Authentication.NONE, "https://x.test", "GET", "u", "p") == ""

    def test_digest_without_params_uses_defaults(self):
        """Test digest with default parameters."""
        header = build_auth_header(Authentication.DIGEST, "https://x.test/a", "GET", "u", "p")

        assert header.startswith("Digest ")
        assert 'qop="auth"' in header

    def test_for_hook(self):
        """Test building the header from hook configuration."""
        hook = Hook(
            name="ERP",
            hook_type=HookType.ORDER,
            payload_url="https://erp.test/orders",
            method="POST",
            authentication=Authentication.DIGEST,
            username="user",
            password="pass",
            realm="erp",
            nonce="n1",
            client_nonce="c1",
            opaque="o1",
        )

        header = auth_header_for_hook(hook, "https://erp.test/orders/100")

        assert 'realm="erp"' in header
        assert 'uri="/orders/100"' in header
        assert 'opaque="o1"' in header
