# =============================================================================
# HOOKRUNNER - REPOSITORY SYNCHRONIZER
# =============================================================================
"""
Repository Synchronizer

Brings a local working copy in line with a pushed reference.

The state of a working copy is whether its directory exists on disk:

    - absent  -> clone the reference into it
    - present -> fetch, checkout the reference, pull

Any failing step aborts the remaining ones and the error propagates; the
working copy is left as the last successful step put it.

Deliveries for the same target directory are serialized with an
asyncio.Lock per resolved directory. Different directories proceed
concurrently.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, TYPE_CHECKING

from monitoring.logger import log_context

from hookrunner.git.backend import GitBackend
from hookrunner.git.executor import VersionControl
from hookrunner.git.reference import Reference
from hookrunner.git.repository_path import RepositoryPath

if TYPE_CHECKING:
    from hookrunner.config import Config


logger = logging.getLogger(__name__)


class SyncAction(Enum):
    """Transition applied to a working copy."""
    CLONED = "cloned"
    UPDATED = "updated"


class RepoSynchronizer:
    """
    Clones or updates working copies through a VersionControl provider.

    Attributes:
        config: Configuration (working dir and repository mapping)
        vcs: Version control provider
    """

    def __init__(self, config: Config, vcs: VersionControl):
        self.config = config
        self.vcs = vcs
        self._locks: Dict[Path, asyncio.Lock] = {}

    def resolve_target_dir(self, repository: RepositoryPath) -> Path:
        """
        Directory holding the working copy of ``repository``.

        A repository mapping entry wins; otherwise the working copy lives in
        ``<working_dir>/<name>``.
        """
        mapped = self.config.repo_mapping.get(repository.full_name)
        if mapped is not None:
            return Path(mapped)
        return self.config.resolve_working_dir() / repository.name

    async def synchronize(
        self,
        repository: RepositoryPath,
        reference: Reference,
        backend: GitBackend,
    ) -> SyncAction:
        """
        Synchronize the configured working copy of ``repository``.

        Args:
            repository: Repository to synchronize
            reference: Branch or tag to check out
            backend: Hosting backend used for the clone URL

        Returns:
            The transition that was applied

        Raises:
            GitError: If any git step fails
        """
        target_dir = self.resolve_target_dir(repository)
        return await self.synchronize_directory(repository, reference, backend, target_dir)

    async def synchronize_directory(
        self,
        repository: RepositoryPath,
        reference: Reference,
        backend: GitBackend,
        target_dir: Path,
    ) -> SyncAction:
        """Synchronize ``repository`` into an explicit directory."""
        remote_url = backend.clone_url(repository.full_name)

        with log_context(repository=repository.full_name, reference=reference.name):
            async with self._lock_for(target_dir):
                if not target_dir.exists():
                    logger.info(f"Cloning {remote_url} ({reference.name}) into {target_dir}")
                    await self.vcs.clone(
                        target_dir.parent,
                        reference.name,
                        remote_url,
                        target_dir.name,
                    )
                    action = SyncAction.CLONED
                else:
                    logger.info(f"Updating {target_dir} to {reference.name}")
                    await self.vcs.fetch(target_dir)
                    await self.vcs.checkout(target_dir, reference.name)
                    await self.vcs.pull(target_dir)
                    action = SyncAction.UPDATED

            logger.info(f"Working copy {target_dir} {action.value}")
            return action

    def _lock_for(self, target_dir: Path) -> asyncio.Lock:
        key = target_dir.resolve()
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock


__all__ = [
    "RepoSynchronizer",
    "SyncAction",
]
