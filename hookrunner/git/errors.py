# =============================================================================
# HOOKRUNNER - GIT ERRORS
# =============================================================================
"""
Operational errors raised by the git layer.

These never reach an HTTP client directly: the webhook handler wraps them
into an UnhandledError, and the CLI prints them and exits non-zero.
"""


class GitError(Exception):
    """Base exception for git layer errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingGitBinary(GitError):
    """Raised when no git executable is found on PATH."""

    def __init__(self):
        super().__init__(
            "Missing Git binary. Make sure Git is installed on your system "
            "and is globally accessible (present in PATH)."
        )


class GitExecutionError(GitError):
    """Raised when a git command exits with a non-zero status."""

    def __init__(self, output: str, return_code: int = None):
        super().__init__(f"Error while executing git: {output}")
        self.output = output
        self.return_code = return_code


class GitIOError(GitError):
    """Raised when git could not be spawned (bad cwd, permissions...)."""

    def __init__(self, detail: str):
        super().__init__(f"I/O error: {detail}")
        self.detail = detail


class UnsupportedRefType(GitError):
    """Raised for references outside refs/branches/ and refs/tags/."""

    def __init__(self, value: str):
        super().__init__(f"Unsupported Git reference type: {value}")
        self.value = value


class UnsupportedGitBackend(GitError):
    """Raised for an unknown hosting backend name."""

    def __init__(self, value: str):
        super().__init__(f"Unsupported Git backend: {value}")
        self.value = value


class MalformedRepositoryPath(GitError):
    """Raised when a repository path is not exactly owner/name."""

    def __init__(self, value: str):
        super().__init__(f"Malformed repository path: {value}")
        self.value = value
