# =============================================================================
# HOOKRUNNER - PACKAGE
# =============================================================================
"""
Hookrunner Package

A small GitOps bridge: receives GitHub push/ping webhooks, authenticates
them, and keeps a local working copy in sync with the pushed branch or tag.
It can also install and uninstall the webhook on the GitHub side.

Package Structure:
    - main.py: CLI entry point (serve, install, uninstall, synchronize)
    - config.py: Configuration loading (YAML, environment, CLI)
    - errors.py: Request-facing error codes
    - http.py: aiohttp application and server
    - git/: References, repository paths, backends, git execution, sync
    - github/: Webhook signature middleware, event routing, REST client

Usage:
    hookrunner --working-dir /srv/checkouts serve --bind-ip 0.0.0.0:3000
    hookrunner install --repository acme/widgets --url https://hooks.example.com/webhook/github --token ghp_xxx
"""

__version__ = "0.1.0"

APP_NAME = "hookrunner"

__all__ = [
    "APP_NAME",
    "__version__",
]
