# =============================================================================
# HOOKRUNNER - MAIN ENTRY POINT
# =============================================================================
"""
Hookrunner Main Module

Command line entry point. Four commands are available:

    serve        Run the webhook server until SIGINT/SIGTERM
    install      Register the server's URL as a push webhook on GitHub
    uninstall    Remove that webhook again
    synchronize  Clone or update one working copy, once

Usage:
    python -m hookrunner.main serve --bind-ip 127.0.0.1:3000
    python -m hookrunner.main --config hookrunner.yaml serve
    python -m hookrunner.main install --repository acme/widgets --url https://hooks.example.com/webhook/github --token ghp_xxx
    python -m hookrunner.main synchronize --repository acme/widgets --ref refs/branches/main
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import asdict
from typing import Any, Callable, List, Optional, Tuple

from hookrunner import APP_NAME, __version__
from hookrunner.config import (
    Config,
    ConfigError,
    ServerConfig,
    load_config,
)
from hookrunner.git import (
    GitBackend,
    GitError,
    GitExecutable,
    Reference,
    RepoSynchronizer,
    RepositoryPath,
)
from hookrunner.github.client import GitHubClient, GitHubError
from hookrunner.http import WebhookServer, build_app
from monitoring.logger import mask_dict, setup_logging


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

logger = logging.getLogger(__name__)


# =============================================================================
# CLI ARGUMENT PARSING
# =============================================================================


def _argument_type(parse: Callable[[str], Any], name: str) -> Callable[[str], Any]:
    """Adapt a domain parser to argparse, which only reports ValueError-like errors."""

    def convert(value: str) -> Any:
        try:
            return parse(value)
        except (GitError, ConfigError) as e:
            raise argparse.ArgumentTypeError(str(e)) from e

    convert.__name__ = name
    return convert


repository_type = _argument_type(RepositoryPath.parse, "repository")
reference_type = _argument_type(Reference.parse, "reference")
backend_type = _argument_type(GitBackend.parse, "backend")
bind_ip_type = _argument_type(ServerConfig.from_bind_ip, "bind_ip")


def _add_webhook_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--repository",
        required=True,
        type=repository_type,
        help="Repository in owner/name format",
    )
    parser.add_argument(
        "--url",
        required=True,
        help="Public URL of this server's /webhook/github endpoint",
    )
    parser.add_argument(
        "--token",
        required=True,
        help="GitHub API token",
    )
    parser.add_argument(
        "--username",
        default=None,
        help="GitHub username; switches to basic authentication",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Keeps local working copies in sync with GitHub push webhooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"{APP_NAME} {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file",
    )
    parser.add_argument(
        "--github-api-url",
        default=None,
        help="GitHub API root (default: https://api.github.com)",
    )
    parser.add_argument(
        "--working-dir",
        default=None,
        help="Parent directory of working copies (default: current directory)",
    )
    parser.add_argument(
        "--webhook-secret",
        default=None,
        help="Shared webhook secret; without it signatures are not checked",
    )
    parser.add_argument(
        "--repo-mapping",
        default=None,
        help="Working copy overrides: owner/name=path,owner2/name2=path2",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "text"],
        help="Console log format (default: text)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write JSON logs to this file",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    serve = subparsers.add_parser("serve", help="Run the webhook server")
    serve.add_argument(
        "--bind-ip",
        type=bind_ip_type,
        default=None,
        help="host:port to listen on (default: 0.0.0.0:3000)",
    )

    install = subparsers.add_parser("install", help="Register the webhook on GitHub")
    _add_webhook_arguments(install)

    uninstall = subparsers.add_parser("uninstall", help="Remove the webhook from GitHub")
    _add_webhook_arguments(uninstall)

    synchronize = subparsers.add_parser("synchronize", help="Synchronize one working copy")
    synchronize.add_argument(
        "--repository",
        required=True,
        type=repository_type,
        help="Repository in owner/name format",
    )
    synchronize.add_argument(
        "--ref",
        required=True,
        type=reference_type,
        help="Reference: refs/branches/<name> or refs/tags/<name>",
    )
    synchronize.add_argument(
        "--backend",
        type=backend_type,
        default=GitBackend.github(),
        help="Git backend: github, gitlab or custom:<url> (default: github)",
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def resolve_config(args: argparse.Namespace) -> Tuple[Config, ServerConfig]:
    """
    Merge file, environment and command line settings.

    Raises:
        ConfigError: If a setting is malformed or the working dir is missing
    """
    config, server_config = load_config(args.config)

    config = config.with_overrides(
        github_api_url=args.github_api_url,
        working_dir=args.working_dir,
        webhook_secret=args.webhook_secret,
        repo_mapping=args.repo_mapping,
        log_level=args.log_level,
        log_format=args.log_format,
        log_file=args.log_file,
    ).validate()

    if getattr(args, "bind_ip", None) is not None:
        server_config = args.bind_ip

    return config, server_config


# =============================================================================
# COMMANDS
# =============================================================================


async def run_serve(config: Config, server_config: ServerConfig) -> None:
    """Serve webhooks until a shutdown signal arrives."""
    synchronizer = RepoSynchronizer(config, GitExecutable())
    server = WebhookServer(
        build_app(config, synchronizer),
        host=server_config.host,
        port=server_config.port,
    )
    await server.serve_forever()


async def run_synchronize(config: Config, args: argparse.Namespace) -> None:
    """Synchronize one working copy."""
    synchronizer = RepoSynchronizer(config, GitExecutable())
    action = await synchronizer.synchronize(args.repository, args.ref, args.backend)
    logger.info(f"{args.repository} {action.value} at {args.ref.name}")


def run_install(config: Config, args: argparse.Namespace) -> int:
    """Register the webhook and return its id."""
    repository: RepositoryPath = args.repository
    with GitHubClient(args.token, args.username, api_url=config.github_api_url) as client:
        hook_id = client.try_register_webhook(repository.owner, repository.name, args.url)
    print(hook_id)
    return hook_id


def run_uninstall(config: Config, args: argparse.Namespace) -> None:
    """Remove the webhook if it is registered."""
    repository: RepositoryPath = args.repository
    with GitHubClient(args.token, args.username, api_url=config.github_api_url) as client:
        client.try_unregister_webhook(repository.owner, repository.name, args.url)


def run_command(args: argparse.Namespace, config: Config, server_config: ServerConfig) -> None:
    """Dispatch the selected command."""
    if args.command == "serve":
        asyncio.run(run_serve(config, server_config))
    elif args.command == "install":
        run_install(config, args)
    elif args.command == "uninstall":
        run_uninstall(config, args)
    elif args.command == "synchronize":
        asyncio.run(run_synchronize(config, args))
    else:
        raise ValueError(f"Unknown command: {args.command}")


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config, server_config = resolve_config(args)
        setup_logging(
            level=config.log_level,
            fmt=config.log_format,
            log_file=config.log_file,
        )
        logger.debug(f"{APP_NAME} {__version__} running {args.command}")
        logger.debug(f"Resolved configuration: {mask_dict(asdict(config))}")

        run_command(args, config, server_config)

    except KeyboardInterrupt:
        logger.info("Stopped by user")
    except (ConfigError, GitError, GitHubError) as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
