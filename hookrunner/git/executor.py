# =============================================================================
# HOOKRUNNER - GIT EXECUTION
# =============================================================================
"""
Git Execution

Capability interface over the version-control tool, plus two providers:

    - GitExecutable: shells out to the ``git`` binary found on PATH
    - MemoryVersionControl: records calls and returns canned output,
      used to exercise the synchronizer without disk or processes

Every operation returns the trimmed standard output on success and raises
GitExecutionError carrying the trimmed standard error otherwise.

Usage:
    vcs = GitExecutable()
    await vcs.clone(Path("/srv"), "main", "https://github.com/acme/widgets", "widgets")
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Protocol, Tuple, runtime_checkable

from hookrunner.git.errors import GitExecutionError, GitIOError, MissingGitBinary


logger = logging.getLogger(__name__)


# =============================================================================
# INTERFACE
# =============================================================================


@runtime_checkable
class VersionControl(Protocol):
    """Operations the synchronizer needs from a version-control tool."""

    async def clone(
        self,
        parent_dir: Path,
        reference: str,
        remote_url: str,
        target_name: str,
    ) -> str: ...

    async def fetch(self, working_dir: Path) -> str: ...

    async def checkout(self, working_dir: Path, reference: str) -> str: ...

    async def pull(self, working_dir: Path) -> str: ...


# =============================================================================
# GIT BINARY
# =============================================================================


class GitExecutable:
    """
    Runs the git binary as a subprocess.

    The binary is resolved once, at construction. Commands are blocking
    ``subprocess.run`` calls moved off the event loop with
    ``asyncio.to_thread``; no timeout is applied to them.

    Attributes:
        binary_path: Absolute path of the git executable
    """

    def __init__(self, binary: str = "git"):
        """
        Locate the git binary.

        Args:
            binary: Executable name or path to look up

        Raises:
            MissingGitBinary: If the binary is not on PATH
        """
        resolved = shutil.which(binary)
        if resolved is None:
            raise MissingGitBinary()

        self.binary_path = resolved
        logger.debug(f"Using git binary at {self.binary_path}")

    async def clone(
        self,
        parent_dir: Path,
        reference: str,
        remote_url: str,
        target_name: str,
    ) -> str:
        return await self._execute(
            parent_dir, "clone", ["-b", reference, remote_url, target_name]
        )

    async def fetch(self, working_dir: Path) -> str:
        return await self._execute(working_dir, "fetch", [])

    async def checkout(self, working_dir: Path, reference: str) -> str:
        # References are never read as options, even when they start with a dash
        return await self._execute(working_dir, "checkout", ["--end-of-options", reference])

    async def pull(self, working_dir: Path) -> str:
        return await self._execute(working_dir, "pull", [])

    async def _execute(self, working_dir: Path, command: str, args: List[str]) -> str:
        return await asyncio.to_thread(self._run, working_dir, command, args)

    def _run(self, working_dir: Path, command: str, args: List[str]) -> str:
        """Run one git command in ``working_dir`` and capture its output."""
        cmd = [self.binary_path, command, *args]
        logger.info(f"Running git {command} in {working_dir}")

        try:
            process = subprocess.run(
                cmd,
                cwd=str(working_dir),
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error(f"Could not run git {command} in {working_dir}: {e}")
            raise GitIOError(str(e)) from e

        if process.returncode != 0:
            stderr = (process.stderr or "").strip()
            logger.error(
                f"git {command} failed with code {process.returncode}: {stderr}"
            )
            raise GitExecutionError(stderr, return_code=process.returncode)

        stdout = (process.stdout or "").strip()
        logger.debug(f"git {command} succeeded: {stdout}")
        return stdout


# =============================================================================
# IN-MEMORY PROVIDER
# =============================================================================


@dataclass
class VersionControlCall:
    """One recorded invocation."""
    operation: str
    args: Tuple = ()


@dataclass
class MemoryVersionControl:
    """
    Version control provider that never touches disk.

    Calls are appended to ``calls`` in order. Output comes from ``outputs``
    (default ``"OK"``); an operation listed in ``failures`` raises
    GitExecutionError with the given message instead.
    """

    outputs: Dict[str, str] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    calls: List[VersionControlCall] = field(default_factory=list)

    async def clone(
        self,
        parent_dir: Path,
        reference: str,
        remote_url: str,
        target_name: str,
    ) -> str:
        return self._record("clone", parent_dir, reference, remote_url, target_name)

    async def fetch(self, working_dir: Path) -> str:
        return self._record("fetch", working_dir)

    async def checkout(self, working_dir: Path, reference: str) -> str:
        return self._record("checkout", working_dir, reference)

    async def pull(self, working_dir: Path) -> str:
        return self._record("pull", working_dir)

    def fail(self, operation: str, message: str = "failure") -> None:
        """Make ``operation`` raise from now on."""
        self.failures[operation] = message

    def calls_to(self, operation: str) -> List[VersionControlCall]:
        return [c for c in self.calls if c.operation == operation]

    @property
    def operations(self) -> List[str]:
        return [c.operation for c in self.calls]

    def reset(self) -> None:
        self.calls.clear()

    def _record(self, operation: str, *args) -> str:
        self.calls.append(VersionControlCall(operation, args))
        if operation in self.failures:
            raise GitExecutionError(self.failures[operation])
        return self.outputs.get(operation, "OK")


__all__ = [
    "VersionControl",
    "GitExecutable",
    "MemoryVersionControl",
    "VersionControlCall",
]
