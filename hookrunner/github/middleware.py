# =============================================================================
# HOOKRUNNER - GITHUB SIGNATURE MIDDLEWARE
# =============================================================================
"""
GitHub Signature Middleware

aiohttp middleware guarding the webhook endpoint. For every POST to a
guarded path it:

    1. Rejects requests whose User-Agent does not start with GitHub-Hookshot/
    2. When a secret is configured, reads the full raw body and checks the
       X-Hub-Signature-256 HMAC-SHA256 digest in constant time
    3. Stores the exact bytes that were verified on the request, so the
       event handler parses the signed payload

Without a secret, step 2 is skipped. That mode accepts any request that
looks like it comes from GitHub and must only be used on trusted networks.

Failures are answered immediately with a 400 JSON error.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import logging
from typing import Awaitable, Callable, Iterable, Optional

from aiohttp import web

from hookrunner.errors import InvalidSignature, InvalidUserAgent, WebhookError


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

HEADER_SIGNATURE = "X-Hub-Signature-256"
HEADER_USER_AGENT = "User-Agent"
SIGNATURE_PREFIX = "sha256="
GITHUB_USER_AGENT_PREFIX = "GitHub-Hookshot/"

# Request key holding the body bytes read by the middleware
RAW_BODY_KEY = "hookrunner.raw_body"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


# =============================================================================
# SIGNATURE CHECKS
# =============================================================================


def compute_signature(secret: str, body: bytes) -> str:
    """Hex HMAC-SHA256 digest of ``body`` keyed with ``secret``."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def is_valid_signature(signature: str, body: bytes, secret: str) -> bool:
    """
    Check a hex-encoded HMAC-SHA256 signature.

    Args:
        signature: Hex digest, without the sha256= prefix
        body: Raw request body
        secret: Shared webhook secret

    Returns:
        True if the digest matches
    """
    try:
        decoded = binascii.unhexlify(signature)
    except (binascii.Error, ValueError):
        return False

    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return hmac.compare_digest(expected, decoded)


def check_user_agent(user_agent: Optional[str]) -> None:
    """
    Raises:
        InvalidUserAgent: Unless the agent is GitHub's hook sender
    """
    if not user_agent or not user_agent.startswith(GITHUB_USER_AGENT_PREFIX):
        raise InvalidUserAgent()


def check_signature(signature_header: Optional[str], body: bytes, secret: str) -> None:
    """
    Raises:
        InvalidSignature: If the header is missing, malformed or wrong
    """
    if not signature_header:
        raise InvalidSignature()
    if not signature_header.startswith(SIGNATURE_PREFIX):
        raise InvalidSignature()

    signature = signature_header[len(SIGNATURE_PREFIX):]
    if not is_valid_signature(signature, body, secret):
        raise InvalidSignature()


# =============================================================================
# MIDDLEWARE
# =============================================================================


def error_response(error: WebhookError) -> web.Response:
    """JSON response for a request-facing error."""
    return web.json_response(error.details(), status=error.status_code)


def create_signature_middleware(
    secret: Optional[str],
    paths: Iterable[str] = ("/webhook/github",),
):
    """
    Build the verification middleware.

    Args:
        secret: Shared webhook secret; None or empty disables HMAC checks
        paths: Request paths the middleware guards

    Returns:
        aiohttp middleware
    """
    guarded_paths = frozenset(paths)
    secret = secret or None

    @web.middleware
    async def verify_github_signature(
        request: web.Request,
        handler: Handler,
    ) -> web.StreamResponse:
        if request.method != "POST" or request.path not in guarded_paths:
            return await handler(request)

        try:
            check_user_agent(request.headers.get(HEADER_USER_AGENT))

            if secret is not None:
                body = await request.read()
                check_signature(request.headers.get(HEADER_SIGNATURE), body, secret)
                request[RAW_BODY_KEY] = body

        except WebhookError as e:
            logger.warning(f"Rejected webhook from {request.remote}: {e.message}")
            return error_response(e)

        return await handler(request)

    return verify_github_signature


__all__ = [
    "create_signature_middleware",
    "error_response",
    "compute_signature",
    "is_valid_signature",
    "check_user_agent",
    "check_signature",
    "HEADER_SIGNATURE",
    "SIGNATURE_PREFIX",
    "GITHUB_USER_AGENT_PREFIX",
    "RAW_BODY_KEY",
]
