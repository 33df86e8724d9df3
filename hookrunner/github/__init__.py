# =============================================================================
# HOOKRUNNER - GITHUB PACKAGE
# =============================================================================
"""
GitHub Integration Package

Components:
    - middleware: User-Agent and X-Hub-Signature-256 verification
    - webhook_handler: Routes ping/push deliveries
    - client: Installs and removes repository webhooks
    - models: Payload and REST response models
"""

from hookrunner.github.client import (
    BadStatusCode,
    CouldNotListWebhooks,
    CouldNotRegisterWebhook,
    CouldNotUnregisterWebhook,
    GitHubClient,
    GitHubError,
    MalformedResponse,
)
from hookrunner.github.middleware import (
    compute_signature,
    create_signature_middleware,
    is_valid_signature,
)
from hookrunner.github.models import PingEvent, PushEvent, RemoteWebhook
from hookrunner.github.webhook_handler import WebhookHandler

__all__ = [
    # Webhooks
    "WebhookHandler",
    "create_signature_middleware",
    "compute_signature",
    "is_valid_signature",
    # Models
    "PingEvent",
    "PushEvent",
    "RemoteWebhook",
    # Client
    "GitHubClient",
    "GitHubError",
    "CouldNotRegisterWebhook",
    "CouldNotListWebhooks",
    "CouldNotUnregisterWebhook",
    "BadStatusCode",
    "MalformedResponse",
]
