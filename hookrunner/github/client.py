# =============================================================================
# HOOKRUNNER - GITHUB API CLIENT
# =============================================================================
"""
GitHub API Client

Client for the repository webhook endpoints of the GitHub REST API:

    GET    {api}/repos/{owner}/{repo}/hooks
    POST   {api}/repos/{owner}/{repo}/hooks
    DELETE {api}/repos/{owner}/{repo}/hooks/{id}

Registration and removal are idempotent: registering an already known URL
returns the existing id, and removing an unknown URL only logs an error.

Authentication:
    - HTTP basic auth (username + token) when a username is given
    - Otherwise an ``Authorization: token <token>`` header

Requests use a fixed connect timeout and are never retried.

Usage:
    with GitHubClient(token="ghp_xxx") as client:
        hook_id = client.try_register_webhook("acme", "widgets", "https://hooks.example.com/webhook/github")
"""

import logging
from typing import Any, List, Optional

import requests
from pydantic import TypeAdapter, ValidationError

from hookrunner import APP_NAME, __version__
from hookrunner.config import DEFAULT_GITHUB_API_URL
from hookrunner.github.models import RemoteWebhook


logger = logging.getLogger(__name__)

_WEBHOOK = TypeAdapter(RemoteWebhook)
_WEBHOOK_LIST = TypeAdapter(List[RemoteWebhook])


# =============================================================================
# EXCEPTIONS
# =============================================================================

class GitHubError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self):
        if self.status_code:
            return f"[{self.status_code}] {self.message}"
        return self.message


class CouldNotRegisterWebhook(GitHubError):
    """Transport failure while creating a webhook."""

    def __init__(self, detail: str):
        super().__init__(f"error while registering webhook: {detail}")


class CouldNotListWebhooks(GitHubError):
    """Transport failure while listing webhooks."""

    def __init__(self, detail: str):
        super().__init__(f"error while listing webhooks: {detail}")


class CouldNotUnregisterWebhook(GitHubError):
    """Transport failure while deleting a webhook."""

    def __init__(self, detail: str):
        super().__init__(f"error while unregistering webhook: {detail}")


class BadStatusCode(GitHubError):
    """GitHub answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str = ""):
        message = "error code received from GitHub"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, status_code=status_code)


class MalformedResponse(GitHubError):
    """GitHub answered with a body that does not match the expected shape."""

    def __init__(self, detail: str):
        super().__init__(f"error while parsing GitHub response: {detail}")


# =============================================================================
# GITHUB CLIENT CLASS
# =============================================================================

class GitHubClient:
    """
    Webhook registry backed by the GitHub REST API.

    Attributes:
        token: GitHub API token
        username: Optional username; enables basic auth
        api_url: API base URL
        connect_timeout: Connect timeout in seconds
    """

    DEFAULT_CONNECT_TIMEOUT = 10

    def __init__(
        self,
        token: str,
        username: Optional[str] = None,
        api_url: str = DEFAULT_GITHUB_API_URL,
        connect_timeout: float = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub API token
            username: GitHub username (optional)
            api_url: API base URL (default: api.github.com)
            connect_timeout: Connect timeout in seconds (default: 10)

        Raises:
            ValueError: If token is empty
        """
        if not token:
            raise ValueError("GitHub token required")

        self.token = token
        self.username = username or None
        self.api_url = api_url.rstrip("/")
        self.connect_timeout = connect_timeout or self.DEFAULT_CONNECT_TIMEOUT

        self._session = self._create_session()

        logger.debug(f"GitHubClient initialized for {self.api_url}")

    def _create_session(self) -> requests.Session:
        """Create an authenticated HTTP session."""
        session = requests.Session()

        session.headers.update({
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": f"{APP_NAME}/{__version__}",
        })

        if self.username:
            session.auth = (self.username, self.token)
        else:
            session.headers["Authorization"] = f"token {self.token}"

        return session

    # =========================================================================
    # WEBHOOK OPERATIONS
    # =========================================================================

    def list_webhooks(self, owner: str, repo: str) -> List[RemoteWebhook]:
        """
        List the webhooks of a repository.

        Raises:
            CouldNotListWebhooks: On transport failure
            BadStatusCode: On a non-2xx answer
            MalformedResponse: If the body is not a list of webhooks
        """
        response = self._request("GET", f"/repos/{owner}/{repo}/hooks", CouldNotListWebhooks)
        return self._parse(response, _WEBHOOK_LIST)

    def find_webhook(self, owner: str, repo: str, url: str) -> Optional[int]:
        """Id of the webhook delivering to ``url``, if any."""
        for webhook in self.list_webhooks(owner, repo):
            if webhook.url == url:
                return webhook.id
        return None

    def register_webhook(self, owner: str, repo: str, url: str) -> RemoteWebhook:
        """
        Create a push webhook delivering JSON to ``url``.

        No secret is sent; configure it on GitHub to match the server's.
        """
        data = {
            "name": "web",
            "config": {
                "url": url,
                "content_type": "json",
            },
            "events": ["push"],
        }

        response = self._request(
            "POST", f"/repos/{owner}/{repo}/hooks", CouldNotRegisterWebhook, data=data
        )
        webhook = self._parse(response, _WEBHOOK)

        logger.info(f"New webhook installed on {owner}/{repo}: id={webhook.id} url={url}")
        return webhook

    def unregister_webhook(self, owner: str, repo: str, hook_id: int) -> None:
        """Delete a webhook by id."""
        self._request(
            "DELETE", f"/repos/{owner}/{repo}/hooks/{hook_id}", CouldNotUnregisterWebhook
        )
        logger.info(f"Webhook unregistered from {owner}/{repo}: id={hook_id}")

    def try_register_webhook(self, owner: str, repo: str, url: str) -> int:
        """
        Ensure a webhook delivering to ``url`` exists.

        Returns:
            Id of the existing or newly created webhook
        """
        existing = self.find_webhook(owner, repo, url)
        if existing is not None:
            logger.warning(f"Webhook already registered on {owner}/{repo}: id={existing} url={url}")
            return existing

        return self.register_webhook(owner, repo, url).id

    def try_unregister_webhook(self, owner: str, repo: str, url: str) -> None:
        """Remove the webhook delivering to ``url``; unknown URLs are only logged."""
        existing = self.find_webhook(owner, repo, url)
        if existing is None:
            logger.error(f"Unknown webhook on {owner}/{repo}: url={url}")
            return

        self.unregister_webhook(owner, repo, existing)

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _request(
        self,
        method: str,
        endpoint: str,
        transport_error: type,
        data: dict = None,
    ) -> requests.Response:
        """
        Make an authenticated API request.

        Args:
            method: HTTP method
            endpoint: Path below the API root
            transport_error: GitHubError subclass raised on transport failure
            data: JSON body (optional)
        """
        url = f"{self.api_url}{endpoint}"

        logger.debug(f"GitHub API: {method} {endpoint}")

        try:
            response = self._session.request(
                method=method,
                url=url,
                json=data,
                timeout=(self.connect_timeout, None),
            )
        except requests.exceptions.RequestException as e:
            raise transport_error(str(e)) from e

        if not 200 <= response.status_code < 300:
            self._handle_error(response)

        return response

    def _handle_error(self, response: requests.Response) -> None:
        """Raise BadStatusCode with GitHub's message when it sent one."""
        try:
            message = response.json().get("message", response.text)
        except (ValueError, AttributeError):
            message = response.text

        logger.error(f"GitHub API error [{response.status_code}]: {message}")
        raise BadStatusCode(response.status_code, message)

    def _parse(self, response: requests.Response, adapter: TypeAdapter) -> Any:
        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            raise MalformedResponse(str(e)) from e

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the HTTP session."""
        if self._session:
            self._session.close()
            logger.debug("GitHubClient session closed")


__all__ = [
    "GitHubClient",
    "GitHubError",
    "CouldNotRegisterWebhook",
    "CouldNotListWebhooks",
    "CouldNotUnregisterWebhook",
    "BadStatusCode",
    "MalformedResponse",
]
