"""Webhook signature validation."""

from __future__ import annotations

import hmac
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

GITHUB_SIGNATURE_HEADER = "X-Hub-Signature"
GITEA_SIGNATURE_HEADER = "X-Gitea-Signature"

# "sha1=" plus 40 hex digits
GITHUB_SIGNATURE_LENGTH = 45
# 64 hex digits, without any prefix
GITEA_SIGNATURE_LENGTH = 64


class WebhookSignatureError(Exception):
    """Raised when webhook signature verification fails."""

    pass


class MissingSignatureError(WebhookSignatureError):
    """Raised when the request carries no signature header."""

    def __init__(self) -> None:
        super().__init__(
            f"missing signature header ({GITHUB_SIGNATURE_HEADER} or {GITEA_SIGNATURE_HEADER})"
        )


class InvalidSignatureError(WebhookSignatureError):
    """Raised when a signature header is malformed or does not match."""

    def __init__(self) -> None:
        super().__init__("invalid signature header")


def _hex_digest(secret_key: str, body: bytes, digestmod: str) -> str:
    return hmac.new(secret_key.encode(), body, digestmod).hexdigest()


def verify_github_signature(secret_key: str, signature: str | None, body: bytes) -> None:
    """Verify an ``X-Hub-Signature`` header (HMAC-SHA1, ``sha1=`` prefix).

    Args:
        secret_key: The secret shared with the sending platform.
        signature: The header value, or None if the header is absent.
        body: The raw request body bytes.

    Raises:
        MissingSignatureError: If the header is absent or blank.
        InvalidSignatureError: If the header is malformed or does not match.
    """
    signature = (signature or "").strip()
    if not signature:
        raise MissingSignatureError()

    if len(signature) != GITHUB_SIGNATURE_LENGTH:
        raise InvalidSignatureError()

    expected_signature = "sha1=" + _hex_digest(secret_key, body, "sha1")
    if not hmac.compare_digest(signature.encode(), expected_signature.encode()):
        raise InvalidSignatureError()


def verify_gitea_signature(secret_key: str, signature: str | None, body: bytes) -> None:
    """Verify an ``X-Gitea-Signature`` header (bare HMAC-SHA256 hex digest).

    Args:
        secret_key: The secret shared with the sending platform.
        signature: The header value, or None if the header is absent.
        body: The raw request body bytes.

    Raises:
        MissingSignatureError: If the header is absent or blank.
        InvalidSignatureError: If the header is malformed or does not match.
    """
    signature = (signature or "").strip()
    if not signature:
        raise MissingSignatureError()

    if len(signature) != GITEA_SIGNATURE_LENGTH:
        raise InvalidSignatureError()

    expected_signature = _hex_digest(secret_key, body, "sha256")
    if not hmac.compare_digest(signature.encode(), expected_signature.encode()):
        raise InvalidSignatureError()


def verify_request_signature(secret_key: str, headers: Mapping[str, str], body: bytes) -> None:
    """Verify whichever signature header the request carries.

    The GitHub header is checked first. The Gitea header is only consulted
    when the GitHub header is absent; a present but invalid GitHub signature
    fails immediately.

    Args:
        secret_key: The secret shared with the sending platform.
        headers: The request headers (case-insensitive lookup expected).
        body: The raw request body bytes.

    Raises:
        MissingSignatureError: If neither header is present.
        InvalidSignatureError: If the present header does not verify.
    """
    try:
        verify_github_signature(secret_key, headers.get(GITHUB_SIGNATURE_HEADER), body)
    except MissingSignatureError:
        verify_gitea_signature(secret_key, headers.get(GITEA_SIGNATURE_HEADER), body)
