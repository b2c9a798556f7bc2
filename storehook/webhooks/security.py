"""Authorization headers for outbound webhook requests.

Supports HTTP Basic and Digest. Digest uses the static challenge
parameters stored on the hook (realm, nonce, qop...) rather than a
server-issued challenge, so the response hash is fully determined by the
hook configuration and the request URI.
"""

import base64
import hashlib
from urllib.parse import urlsplit

import structlog
from pydantic import BaseModel

from storehook.webhooks.models import Authentication, Hook

logger = structlog.get_logger(__name__)

AUTHORIZATION_HEADER = "Authorization"


class DigestParams(BaseModel):
    """Static digest challenge parameters."""

    realm: str = ""
    nonce: str = ""
    algorithm: str = "MD5"
    qop: str = "auth"
    nonce_count: str = "00000001"
    client_nonce: str = ""
    opaque: str = ""

    @classmethod
    def from_hook(cls, hook: Hook) -> "DigestParams":
        return cls(
            realm=hook.realm,
            nonce=hook.nonce,
            algorithm=hook.algorithm,
            qop=hook.qop,
            nonce_count=hook.nonce_count,
            client_nonce=hook.client_nonce,
            opaque=hook.opaque,
        )


def _md5(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest()  # noqa: S324


def request_uri(url: str) -> str:
    """Path and query component of a URL, as used in the digest A2 hash."""
    parts = urlsplit(url)
    uri = parts.path or "/"
    if parts.query:
        uri = f"{uri}?{parts.query}"
    return uri


def basic_auth_header(username: str, password: str) -> str:
    """Build a Basic authorization header value.

    Args:
        username: Account name.
        password: Account password.

    Returns:
        ``"Basic " + base64(username:password)``.
    """
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


def digest_auth_header(
    url: str,
    method: str | None,
    username: str,
    password: str,
    params: DigestParams,
) -> str:
    """Build a Digest authorization header value.

    The response is computed as:
    MD5(MD5(username:realm:password):nonce:nc:cnonce:qop:MD5(method:uri))

    Args:
        url: Request URL; only its path and query are signed.
        method: HTTP verb (GET when empty).
        username: Account name.
        password: Account password.
        params: Static challenge parameters.

    Returns:
        Header value with the fields in the fixed order username, realm,
        nonce, uri, cnonce, nc, qop, response, opaque, algorithm.
    """
    uri = request_uri(url)
    method = method or "GET"

    ha1 = _md5(f"{username}:{params.realm}:{password}")
    ha2 = _md5(f"{method}:{uri}")
    response = _md5(
        f"{ha1}:{params.nonce}:{params.nonce_count}:{params.client_nonce}:{params.qop}:{ha2}"
    )

    return (
        f'Digest username="{username}", realm="{params.realm}", '
        f'nonce="{params.nonce}", uri="{uri}", cnonce="{params.client_nonce}", '
        f'nc={params.nonce_count}, qop="{params.qop}", response="{response}", '
        f'opaque="{params.opaque}", algorithm="{params.algorithm}"'
    )


def build_auth_header(
    scheme: Authentication,
    url: str,
    method: str | None,
    username: str,
    password: str,
    digest: DigestParams | None = None,
) -> str:
    """Build the Authorization header value for a scheme.

    Args:
        scheme: Authentication scheme.
        url: Request URL.
        method: HTTP verb.
        username: Account name.
        password: Account password.
        digest: Digest parameters (required for Digest, defaults otherwise).

    Returns:
        Header value, or "" when no header should be sent.
    """
    if scheme is Authentication.BASIC:
        return basic_auth_header(username, password)

    if scheme is Authentication.DIGEST:
        return digest_auth_header(url, method, username, password, digest or DigestParams())

    return ""


def auth_header_for_hook(hook: Hook, url: str) -> str:
    """Build the Authorization header value configured on a hook.

    Args:
        hook: Hook carrying the scheme and credentials.
        url: Rendered request URL.

    Returns:
        Header value, or "" for hooks without authentication.
    """
    header = build_auth_header(
        hook.authentication,
        url,
        hook.method,
        hook.username,
        hook.password,
        DigestParams.from_hook(hook),
    )

    if header:
        logger.debug(
            "auth_header_built",
            hook_id=hook.id,
            scheme=hook.authentication.value,
        )

    return header
