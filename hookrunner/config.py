# =============================================================================
# HOOKRUNNER - CONFIGURATION
# =============================================================================
"""
Configuration

Builds the configuration value objects consumed by the rest of the system.
Sources are applied in order, later ones winning:

    1. Built-in defaults
    2. Optional YAML file
    3. HR_* environment variables
    4. Command-line options (applied by main.py)

Environment Variables:
    - HR_GITHUB_API_URL: GitHub API root (default: https://api.github.com)
    - HR_WEBHOOK_SECRET: Shared webhook secret (default: verification disabled)
    - HR_WORKING_DIR: Parent directory for working copies (default: cwd)
    - HR_REPO_MAPPING: owner/name=path,owner2/name2=path2
    - HR_BIND_IP: host:port to listen on (default: 0.0.0.0:3000)
    - HR_LOG_LEVEL, HR_LOG_FORMAT, HR_LOG_FILE: Logging options
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import yaml

from hookrunner.git.errors import MalformedRepositoryPath
from hookrunner.git.repository_path import RepositoryPath


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_BIND_IP = "0.0.0.0:3000"

ENV_MAPPINGS = {
    "HR_GITHUB_API_URL": "github_api_url",
    "HR_WEBHOOK_SECRET": "webhook_secret",
    "HR_WORKING_DIR": "working_dir",
    "HR_REPO_MAPPING": "repo_mapping",
    "HR_BIND_IP": "bind_ip",
    "HR_LOG_LEVEL": "log_level",
    "HR_LOG_FORMAT": "log_format",
    "HR_LOG_FILE": "log_file",
}


# =============================================================================
# EXCEPTIONS
# =============================================================================


class ConfigError(Exception):
    """Base exception for configuration errors."""
    pass


class MissingWorkingDirectory(ConfigError):
    """Raised when the configured working directory does not exist."""

    def __init__(self, path: Path):
        super().__init__(
            f"Missing working directory: '{path}'. Make sure it exists on disk."
        )
        self.path = path


class MalformedRepoMapping(ConfigError):
    """Raised when a repository mapping entry cannot be parsed."""

    def __init__(self, entry: str, reason: str):
        super().__init__(f"Malformed repository mapping entry '{entry}': {reason}")
        self.entry = entry


class MalformedBindAddress(ConfigError):
    """Raised when a bind address is not host:port."""

    def __init__(self, value: str):
        super().__init__(f"Malformed bind address '{value}', expected host:port")
        self.value = value


# =============================================================================
# CONFIGURATION OBJECTS
# =============================================================================


@dataclass(frozen=True)
class Config:
    """
    Settings shared by the webhook server and the CLI commands.

    Attributes:
        github_api_url: Root of the GitHub REST API
        webhook_secret: Shared secret; None disables signature checks
        working_dir: Parent of default working copies; None means cwd
        repo_mapping: full_name -> working copy directory overrides
    """

    github_api_url: str = DEFAULT_GITHUB_API_URL
    webhook_secret: Optional[str] = None
    working_dir: Optional[Path] = None
    repo_mapping: Dict[str, Path] = field(default_factory=dict)
    log_level: str = "INFO"
    log_format: str = "text"
    log_file: Optional[str] = None

    @property
    def signature_verification_enabled(self) -> bool:
        return bool(self.webhook_secret)

    def resolve_working_dir(self) -> Path:
        """Configured working directory, or the process cwd."""
        if self.working_dir is not None:
            return Path(self.working_dir)
        return Path.cwd()

    def with_overrides(self, **overrides: Any) -> "Config":
        """Copy with the non-None overrides applied."""
        values = _coerce({k: v for k, v in overrides.items() if v is not None})
        return replace(self, **values)

    def validate(self) -> "Config":
        """
        Check the configuration against the filesystem.

        Raises:
            MissingWorkingDirectory: If working_dir is set but absent
        """
        if self.working_dir is not None and not Path(self.working_dir).exists():
            raise MissingWorkingDirectory(Path(self.working_dir))
        return self


@dataclass(frozen=True)
class ServerConfig:
    """Listening address of the HTTP server."""

    host: str = "0.0.0.0"
    port: int = 3000

    @classmethod
    def from_bind_ip(cls, value: str) -> "ServerConfig":
        host, port = parse_bind_address(value)
        return cls(host=host, port=port)

    @property
    def bind_ip(self) -> str:
        return f"{self.host}:{self.port}"


# =============================================================================
# PARSERS
# =============================================================================


def parse_repo_mapping(value: str) -> Dict[str, Path]:
    """
    Parse a repository mapping string.

    Syntax::

        org/repo-name=./local/folder,org2/repo-name2=./target/folder

    Raises:
        MalformedRepoMapping: If an entry is not ``owner/name=path``
    """
    mapping: Dict[str, Path] = {}
    if not value or not value.strip():
        return mapping

    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        key, sep, path = entry.partition("=")
        if not sep or not path:
            raise MalformedRepoMapping(entry, "expected owner/name=path")
        try:
            repository = RepositoryPath.parse(key.strip())
        except MalformedRepositoryPath as e:
            raise MalformedRepoMapping(entry, str(e)) from e
        mapping[repository.full_name] = Path(path.strip())

    return mapping


def parse_bind_address(value: str) -> Tuple[str, int]:
    """
    Split ``host:port``.

    Raises:
        MalformedBindAddress: If the port is missing or not a valid number
    """
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
        raise MalformedBindAddress(value)
    return host.strip("[]"), int(port)


def _coerce(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Convert raw file/env/CLI values to Config field types."""
    result = dict(values)

    if "working_dir" in result:
        result["working_dir"] = Path(result["working_dir"])

    if "repo_mapping" in result:
        mapping = result["repo_mapping"]
        if isinstance(mapping, str):
            result["repo_mapping"] = parse_repo_mapping(mapping)
        else:
            result["repo_mapping"] = parse_repo_mapping(
                ",".join(f"{k}={v}" for k, v in dict(mapping).items())
            )

    if "log_level" in result:
        result["log_level"] = str(result["log_level"]).upper()

    return result


# =============================================================================
# LOADING
# =============================================================================


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Tuple[Config, ServerConfig]:
    """
    Load configuration from an optional YAML file and the environment.

    Environment variables override YAML values. Empty variables are ignored.

    Args:
        config_path: Path to a YAML file (optional)
        environ: Environment mapping (default: os.environ)

    Returns:
        (Config, ServerConfig)
    """
    environ = os.environ if environ is None else environ
    raw: Dict[str, Any] = {}

    if config_path:
        config_file = Path(config_path)
        if config_file.exists():
            with open(config_file) as f:
                raw = yaml.safe_load(f) or {}
            if not isinstance(raw, dict):
                raise ConfigError(f"Config file {config_path} must contain a mapping")
            logger.info(f"Loaded config from {config_path}")
        else:
            logger.warning(f"Config file not found: {config_path}, using defaults")

    file_bind_ip = raw.pop("bind_ip", None)
    unknown = set(raw) - set(Config.__dataclass_fields__)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        for key in unknown:
            raw.pop(key)

    env_values: Dict[str, Any] = {}
    for env_var, key in ENV_MAPPINGS.items():
        value = environ.get(env_var)
        if value:
            env_values[key] = value
    env_bind_ip = env_values.pop("bind_ip", None)

    config = Config(**_coerce({**raw, **env_values}))

    server_config = ServerConfig()
    if file_bind_ip:
        server_config = ServerConfig.from_bind_ip(str(file_bind_ip))
    if env_bind_ip:
        try:
            server_config = ServerConfig.from_bind_ip(env_bind_ip)
        except MalformedBindAddress:
            logger.error(
                f"Error while parsing bind ip '{env_bind_ip}' from environment "
                f"variable HR_BIND_IP, will use '{server_config.bind_ip}'"
            )

    return config, server_config


__all__ = [
    "Config",
    "ServerConfig",
    "load_config",
    "parse_repo_mapping",
    "parse_bind_address",
    "ConfigError",
    "MissingWorkingDirectory",
    "MalformedRepoMapping",
    "MalformedBindAddress",
    "DEFAULT_GITHUB_API_URL",
    "DEFAULT_BIND_IP",
]
