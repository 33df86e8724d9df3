# =============================================================================
# HOOKRUNNER - WEBHOOK HANDLER
# =============================================================================
"""
GitHub Webhook Handler

Routes authenticated GitHub deliveries to their event handler.

Supported Events:
    - ping: Sent when the webhook is created; echoed back
    - push: Synchronizes the local working copy, then echoes the payload

Every failure is raised as a WebhookError subclass carrying its HTTP status
and stable internal code. Signature and user agent checks happen before this
module, in the signature middleware.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Type, TypeVar

from multidict import CIMultiDict
from pydantic import BaseModel, ValidationError

from hookrunner.errors import (
    MalformedEventBody,
    MalformedEventBodyField,
    MalformedEventHeader,
    MissingEventHeader,
    UnhandledError,
    UnsupportedEventHeader,
)
from hookrunner.git import (
    GitBackend,
    GitError,
    Reference,
    RepoSynchronizer,
    RepositoryPath,
)
from hookrunner.github.models import PingEvent, PushEvent, dump_event
from monitoring.logger import log_context


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# GitHub event header names
HEADER_EVENT = "X-GitHub-Event"
HEADER_DELIVERY = "X-GitHub-Delivery"

EventT = TypeVar("EventT", bound=BaseModel)
EventHandler = Callable[[bytes], Awaitable[Dict[str, Any]]]


def format_validation_error(error: ValidationError) -> str:
    """One-line description of a payload validation failure."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def parse_body(model: Type[EventT], body: bytes) -> EventT:
    """
    Validate a raw JSON body against an event model.

    Raises:
        MalformedEventBody: If the body is not valid JSON for the model
    """
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise MalformedEventBody(format_validation_error(e)) from e


# =============================================================================
# WEBHOOK HANDLER CLASS
# =============================================================================


class WebhookHandler:
    """
    Handles authenticated GitHub webhooks.

    This class:
    1. Reads the event type header
    2. Parses the event payload
    3. Dispatches to the matching event handler

    Attributes:
        synchronizer: RepoSynchronizer used by push events
        backend: Hosting backend used to build clone URLs
    """

    def __init__(
        self,
        synchronizer: RepoSynchronizer,
        backend: GitBackend = None,
    ):
        self.synchronizer = synchronizer
        self.backend = backend or GitBackend.github()

        self.event_handlers: Dict[str, EventHandler] = {
            "ping": self._handle_ping_event,
            "push": self._handle_push_event,
        }

    async def handle_webhook(
        self,
        headers: Mapping[str, str],
        body: bytes,
    ) -> Dict[str, Any]:
        """
        Process an incoming webhook.

        Args:
            headers: HTTP headers including X-GitHub-Event
            body: Raw request body

        Returns:
            The parsed payload, re-serialized

        Raises:
            WebhookError: For any invalid delivery or failed synchronization
        """
        headers = CIMultiDict(headers)
        event_type = self._read_event_type(headers)

        handler = self.event_handlers.get(event_type)
        if handler is None:
            raise UnsupportedEventHeader(event_type)

        delivery_id = headers.get(HEADER_DELIVERY, "unknown")
        with log_context(github_event=event_type, delivery=delivery_id):
            logger.info(f"Webhook received: {event_type} (delivery: {delivery_id})")
            return await handler(body)

    def _read_event_type(self, headers: Mapping[str, str]) -> str:
        event_type = headers.get(HEADER_EVENT)
        if event_type is None:
            raise MissingEventHeader()

        try:
            event_type.encode("utf-8")
        except UnicodeEncodeError:
            raise MalformedEventHeader() from None

        return event_type

    # =========================================================================
    # EVENT HANDLERS
    # =========================================================================

    async def _handle_ping_event(self, body: bytes) -> Dict[str, Any]:
        """Echo the ping payload back."""
        event = parse_body(PingEvent, body)
        logger.info(f"Webhook ping received for {event.repository.full_name}: {event.zen}")
        return dump_event(event)

    async def _handle_push_event(self, body: bytes) -> Dict[str, Any]:
        """
        Synchronize the pushed repository and echo the payload back.

        Raises:
            MalformedEventBodyField: If ref or repository.full_name is invalid
            UnhandledError: If the synchronization fails
        """
        event = parse_body(PushEvent, body)

        try:
            reference = Reference.parse(event.reference)
        except GitError as e:
            raise MalformedEventBodyField("ref", e.message) from e

        try:
            repository = RepositoryPath.parse(event.repository.full_name)
        except GitError as e:
            raise MalformedEventBodyField("repository.full_name", e.message) from e

        logger.info(f"Push to {repository.full_name} on {reference.name}")

        try:
            await self.synchronizer.synchronize(repository, reference, self.backend)
        except GitError as e:
            logger.error(f"Synchronization of {repository.full_name} failed: {e.message}")
            raise UnhandledError(e.message) from e

        return dump_event(event)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "WebhookHandler",
    "parse_body",
    "format_validation_error",
    "HEADER_EVENT",
    "HEADER_DELIVERY",
]
