# =============================================================================
# HOOKRUNNER - REQUEST ERROR CODES
# =============================================================================
"""
Request-facing errors.

Each error carries a stable numeric ``internal_code`` for machines, an HTTP
status and a human message. The HTTP layer turns any of them into::

    {"internal_code": 7, "message": "Malformed event body field 'ref': '...'"}
"""

from typing import Any, Dict


class WebhookError(Exception):
    """Base exception for errors returned to webhook senders."""

    internal_code: int = 0
    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        """JSON body sent back to the client."""
        return {
            "internal_code": self.internal_code,
            "message": self.message,
        }


class MissingEventHeader(WebhookError):
    internal_code = 1

    def __init__(self):
        super().__init__("Missing X-GitHub-Event header")


class InvalidSignature(WebhookError):
    internal_code = 2

    def __init__(self):
        super().__init__("Invalid X-Hub-Signature-256 signature")


class InvalidUserAgent(WebhookError):
    internal_code = 3

    def __init__(self):
        super().__init__("Invalid User-Agent")


class MalformedEventHeader(WebhookError):
    internal_code = 4

    def __init__(self):
        super().__init__("Malformed event header")


class UnsupportedEventHeader(WebhookError):
    internal_code = 5

    def __init__(self, event: str):
        super().__init__(f"Unsupported event header: '{event}'")
        self.event = event


class MalformedEventBody(WebhookError):
    internal_code = 6

    def __init__(self, parse_error: str):
        super().__init__(f"Malformed event body: '{parse_error}'")
        self.parse_error = parse_error


class MalformedEventBodyField(WebhookError):
    internal_code = 7

    def __init__(self, field: str, reason: str):
        super().__init__(f"Malformed event body field '{field}': '{reason}'")
        self.field = field
        self.reason = reason


class UnhandledError(WebhookError):
    """Operational failure while handling a valid event."""

    internal_code = 99
    status_code = 500

    def __init__(self, error: str):
        super().__init__(f"Unhandled error: '{error}'")
        self.error = error


__all__ = [
    "WebhookError",
    "MissingEventHeader",
    "InvalidSignature",
    "InvalidUserAgent",
    "MalformedEventHeader",
    "UnsupportedEventHeader",
    "MalformedEventBody",
    "MalformedEventBodyField",
    "UnhandledError",
]
