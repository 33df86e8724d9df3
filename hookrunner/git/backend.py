# =============================================================================
# HOOKRUNNER - GIT HOSTING BACKENDS
# =============================================================================
"""
Git hosting backends.

A backend only decides the root URL used to build clone URLs.

Accepted names (case-insensitive):
    - github
    - gitlab
    - custom:<root url>
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from hookrunner.git.errors import UnsupportedGitBackend


CUSTOM_PREFIX = "custom:"


class BackendKind(Enum):
    """Supported hosting backends."""
    GITHUB = "github"
    GITLAB = "gitlab"
    CUSTOM = "custom"


ROOT_URLS = {
    BackendKind.GITHUB: "https://github.com",
    BackendKind.GITLAB: "https://gitlab.com",
}


@dataclass(frozen=True)
class GitBackend:
    """Hosting backend, with a base URL for custom ones."""

    kind: BackendKind
    custom_url: Optional[str] = None

    @classmethod
    def github(cls) -> "GitBackend":
        return cls(BackendKind.GITHUB)

    @classmethod
    def gitlab(cls) -> "GitBackend":
        return cls(BackendKind.GITLAB)

    @classmethod
    def custom(cls, url: str) -> "GitBackend":
        return cls(BackendKind.CUSTOM, url)

    @classmethod
    def parse(cls, value: str) -> "GitBackend":
        """
        Parse a backend name.

        Raises:
            UnsupportedGitBackend: For anything but github, gitlab or custom:<url>
        """
        lowered = value.lower()
        if lowered == "github":
            return cls.github()
        if lowered == "gitlab":
            return cls.gitlab()
        if lowered.startswith(CUSTOM_PREFIX) and len(value) > len(CUSTOM_PREFIX):
            return cls.custom(value[len(CUSTOM_PREFIX):])
        raise UnsupportedGitBackend(value)

    @property
    def root_url(self) -> str:
        if self.kind is BackendKind.CUSTOM:
            return self.custom_url.rstrip("/")
        return ROOT_URLS[self.kind]

    def clone_url(self, full_name: str) -> str:
        """Remote URL of ``owner/name`` on this backend."""
        return f"{self.root_url}/{full_name}"
