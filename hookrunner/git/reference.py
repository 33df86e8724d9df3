# =============================================================================
# HOOKRUNNER - GIT REFERENCES
# =============================================================================
"""
Git reference parsing.

Wire references look like ``refs/branches/<name>`` or ``refs/tags/<name>``.
Once parsed, only the bare name is passed on to git: branches and tags are
handled the same way downstream.
"""

from dataclasses import dataclass
from enum import Enum

from hookrunner.git.errors import UnsupportedRefType


BRANCH_PREFIX = "refs/branches/"
TAG_PREFIX = "refs/tags/"


class RefKind(Enum):
    """Kind of git reference."""
    BRANCH = "branch"
    TAG = "tag"


@dataclass(frozen=True)
class Reference:
    """A parsed branch or tag reference."""

    kind: RefKind
    name: str

    @classmethod
    def branch(cls, name: str) -> "Reference":
        return cls(RefKind.BRANCH, name)

    @classmethod
    def tag(cls, name: str) -> "Reference":
        return cls(RefKind.TAG, name)

    @classmethod
    def parse(cls, value: str) -> "Reference":
        """
        Parse a wire reference.

        Args:
            value: Reference such as ``refs/tags/v1.0``

        Returns:
            Parsed Reference

        Raises:
            UnsupportedRefType: If the prefix is neither tags nor branches
        """
        if value.startswith(TAG_PREFIX):
            return cls.tag(value[len(TAG_PREFIX):])
        if value.startswith(BRANCH_PREFIX):
            return cls.branch(value[len(BRANCH_PREFIX):])
        raise UnsupportedRefType(value)

    @property
    def is_branch(self) -> bool:
        return self.kind is RefKind.BRANCH

    @property
    def is_tag(self) -> bool:
        return self.kind is RefKind.TAG

    def __str__(self) -> str:
        return self.name
