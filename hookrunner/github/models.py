# =============================================================================
# HOOKRUNNER - GITHUB PAYLOAD MODELS
# =============================================================================
"""
GitHub webhook payload and REST response models.

Only the fields hookrunner relies on are declared; anything else in a
payload is ignored, and therefore absent from the echoed response.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Repository(BaseModel):
    full_name: str
    name: str


class Commit(BaseModel):
    message: str
    timestamp: str


class CommitUser(BaseModel):
    name: str
    email: str


class PingEvent(BaseModel):
    """Sent by GitHub when a webhook is created."""

    zen: str
    repository: Repository


class PushEvent(BaseModel):
    """Sent by GitHub for every push to a branch or tag."""

    model_config = ConfigDict(populate_by_name=True)

    reference: str = Field(alias="ref")
    base_ref: Optional[str]
    head_commit: Optional[Commit]
    repository: Repository
    pusher: CommitUser


def dump_event(event: BaseModel) -> Dict[str, Any]:
    """Serialize an event back to its wire shape."""
    return event.model_dump(mode="json", by_alias=True)


# =============================================================================
# REST MODELS
# =============================================================================


class WebhookConfig(BaseModel):
    url: str


class RemoteWebhook(BaseModel):
    """A webhook registered on a repository, as listed by the REST API."""

    id: int
    config: WebhookConfig

    @property
    def url(self) -> str:
        return self.config.url


__all__ = [
    "Repository",
    "Commit",
    "CommitUser",
    "PingEvent",
    "PushEvent",
    "dump_event",
    "WebhookConfig",
    "RemoteWebhook",
]
