# =============================================================================
# HOOKRUNNER - GIT PACKAGE
# =============================================================================
"""
Git Package

Everything needed to turn a push notification into a synchronized working
copy.

Components:
    - Reference: Branch/tag reference parsed from refs/branches/ or refs/tags/
    - RepositoryPath: owner/name pair
    - GitBackend: Hosting backend (github, gitlab, custom:<url>)
    - VersionControl: Interface implemented by GitExecutable and
      MemoryVersionControl
    - RepoSynchronizer: Clone-or-update decision

Usage:
    from hookrunner.git import GitExecutable, RepoSynchronizer, Reference, RepositoryPath

    synchronizer = RepoSynchronizer(config, GitExecutable())
    await synchronizer.synchronize(
        RepositoryPath.parse("acme/widgets"),
        Reference.parse("refs/branches/main"),
        GitBackend.github(),
    )
"""

from hookrunner.git.backend import BackendKind, GitBackend
from hookrunner.git.errors import (
    GitError,
    GitExecutionError,
    GitIOError,
    MalformedRepositoryPath,
    MissingGitBinary,
    UnsupportedGitBackend,
    UnsupportedRefType,
)
from hookrunner.git.executor import (
    GitExecutable,
    MemoryVersionControl,
    VersionControl,
    VersionControlCall,
)
from hookrunner.git.reference import RefKind, Reference
from hookrunner.git.repository_path import RepositoryPath
from hookrunner.git.synchronizer import RepoSynchronizer, SyncAction

__all__ = [
    # Models
    "Reference",
    "RefKind",
    "RepositoryPath",
    "GitBackend",
    "BackendKind",
    # Execution
    "VersionControl",
    "VersionControlCall",
    "GitExecutable",
    "MemoryVersionControl",
    # Synchronization
    "RepoSynchronizer",
    "SyncAction",
    # Exceptions
    "GitError",
    "MissingGitBinary",
    "GitExecutionError",
    "GitIOError",
    "UnsupportedRefType",
    "UnsupportedGitBackend",
    "MalformedRepositoryPath",
]
