# =============================================================================
# HOOKRUNNER - REPOSITORY PATH
# =============================================================================
"""
Repository path parsing (``owner/name``).
"""

from dataclasses import dataclass

from hookrunner.git.errors import MalformedRepositoryPath


@dataclass(frozen=True)
class RepositoryPath:
    """Owner and name of a hosted repository."""

    owner: str
    name: str

    @classmethod
    def parse(cls, value: str) -> "RepositoryPath":
        """
        Split ``owner/name`` into its parts.

        No character-set validation is done beyond the split.

        Raises:
            MalformedRepositoryPath: Unless there are exactly two
                non-empty segments
        """
        parts = value.split("/")
        if len(parts) != 2 or not all(parts):
            raise MalformedRepositoryPath(value)
        return cls(owner=parts[0], name=parts[1])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name
