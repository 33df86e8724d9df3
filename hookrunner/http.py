# =============================================================================
# HOOKRUNNER - HTTP SERVER
# =============================================================================
"""
HTTP Application and Server

Builds the aiohttp application serving:

    GET  /                 Server info (name and version)
    POST /webhook/github   GitHub webhook deliveries

and runs it with an AppRunner/TCPSite pair until SIGINT or SIGTERM.

Usage:
    app = build_app(config, synchronizer)
    server = WebhookServer(app, host="0.0.0.0", port=3000)
    await server.serve_forever()
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

from aiohttp import web

from hookrunner import APP_NAME, __version__
from hookrunner.config import Config
from hookrunner.errors import UnhandledError, WebhookError
from hookrunner.git import RepoSynchronizer
from hookrunner.github.middleware import (
    RAW_BODY_KEY,
    create_signature_middleware,
    error_response,
)
from hookrunner.github.webhook_handler import WebhookHandler


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

WEBHOOK_PATH = "/webhook/github"

# GitHub caps webhook payloads at 25 MB
MAX_PAYLOAD_SIZE = 25 * 1024 * 1024

WEBHOOK_HANDLER_KEY = web.AppKey("webhook_handler", WebhookHandler)


# =============================================================================
# ROUTES
# =============================================================================


async def handle_server_info(request: web.Request) -> web.Response:
    """Report the server name and version."""
    del request  # Unused but required by aiohttp
    return web.json_response({
        "message": f"{APP_NAME}, ready for action!",
        "version": __version__,
    })


async def handle_github_webhook(request: web.Request) -> web.Response:
    """
    Handle a GitHub delivery that passed the signature middleware.

    Returns:
        200 with the echoed payload, or the error's status with
        {"internal_code", "message"}
    """
    handler = request.app[WEBHOOK_HANDLER_KEY]

    body = request.get(RAW_BODY_KEY)
    if body is None:
        body = await request.read()

    try:
        result = await handler.handle_webhook(request.headers, body)

    except WebhookError as e:
        if e.status_code >= 500:
            logger.error(f"Webhook failed: {e.message}")
        else:
            logger.warning(f"Webhook rejected: {e.message}")
        return error_response(e)

    except Exception as e:
        logger.error(f"Unexpected error handling webhook: {e}", exc_info=True)
        return error_response(UnhandledError(str(e)))

    return web.json_response(result)


def build_app(config: Config, synchronizer: RepoSynchronizer) -> web.Application:
    """
    Create the aiohttp application.

    Args:
        config: Configuration (webhook secret)
        synchronizer: Synchronizer invoked by push events

    Returns:
        Configured application
    """
    if not config.signature_verification_enabled:
        logger.warning(
            "No webhook secret configured: signature verification is disabled, "
            "only run this server on a trusted network"
        )

    app = web.Application(
        client_max_size=MAX_PAYLOAD_SIZE,
        middlewares=[create_signature_middleware(config.webhook_secret, (WEBHOOK_PATH,))],
    )
    app[WEBHOOK_HANDLER_KEY] = WebhookHandler(synchronizer)

    app.router.add_get("/", handle_server_info)
    app.router.add_post(WEBHOOK_PATH, handle_github_webhook)

    return app


# =============================================================================
# SERVER
# =============================================================================


class WebhookServer:
    """
    HTTP server for receiving webhooks.

    Attributes:
        app: aiohttp application to serve
        host: Host to bind to
        port: Port to listen on
    """

    def __init__(self, app: web.Application, host: str = "0.0.0.0", port: int = 3000):
        self.app = app
        self.host = host
        self.port = port

        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._running = False

    async def start(self) -> None:
        """Start listening for connections."""
        if self._running:
            logger.warning("Webhook server already running")
            return

        self._runner = web.AppRunner(self.app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info(f"Webhook server started on http://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the server."""
        if not self._running:
            return

        logger.info("Stopping webhook server...")

        if self._site:
            await self._site.stop()

        if self._runner:
            await self._runner.cleanup()

        self._running = False
        self._runner = None
        self._site = None

        logger.info("Webhook server stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    async def serve_forever(self) -> None:
        """Run until SIGINT or SIGTERM is received."""
        shutdown_event = asyncio.Event()
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, shutdown_event.set)
            except NotImplementedError:
                # add_signal_handler is unavailable on Windows event loops
                pass

        await self.start()
        try:
            await shutdown_event.wait()
            logger.info("Shutdown signal received")
        finally:
            await self.stop()


__all__ = [
    "build_app",
    "WebhookServer",
    "handle_server_info",
    "handle_github_webhook",
    "WEBHOOK_PATH",
    "MAX_PAYLOAD_SIZE",
    "WEBHOOK_HANDLER_KEY",
]
