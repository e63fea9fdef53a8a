"""
Application factory.

Example:
    >>> from megagate import GatewayConfig, create_app
    >>> app = create_app(GatewayConfig(accounts={"user@example.com": "secret"}))
    >>> web.run_app(app, port=3000)
"""
import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from .api import (
    CONFIG_KEY,
    BROKER_KEY,
    SESSIONS_KEY,
    routes,
    request_logger,
    error_middleware,
    attach_request_id,
)
from .core.auth import TokenBroker, TokenStore
from .core.config import GatewayConfig
from .core.storage import StorageBackend, StorageSessionFactory, load_backend

logger = logging.getLogger(__name__)


def _add_static(app: web.Application, static_dir: str) -> None:
    root = Path(static_dir)
    if not root.is_dir():
        raise ValueError(f"Static directory not found: {root}")

    index = root / 'index.html'

    async def index_handler(request: web.Request) -> web.StreamResponse:
        if not index.is_file():
            raise web.HTTPNotFound()
        return web.FileResponse(index)

    app.router.add_get('/', index_handler)
    app.router.add_static('/', root, show_index=False)
    logger.info(f"Serving static files from {root}")


def create_app(
    config: Optional[GatewayConfig] = None,
    backend: Optional[StorageBackend] = None,
    token_store: Optional[TokenStore] = None
) -> web.Application:
    """
    Build the gateway application.

    Args:
        config: Gateway configuration (defaults to GatewayConfig.default())
        backend: Storage backend; loaded from config.backend when omitted
        token_store: Token table; in-memory when omitted

    Returns:
        aiohttp Application ready to run
    """
    config = config or GatewayConfig.default()
    backend = backend if backend is not None else load_backend(config.backend, config)

    sessions = StorageSessionFactory(backend, config.timeouts)
    broker = TokenBroker(sessions, store=token_store, config=config.tokens)

    app = web.Application(middlewares=[request_logger, error_middleware])
    app[CONFIG_KEY] = config
    app[SESSIONS_KEY] = sessions
    app[BROKER_KEY] = broker
    app.on_response_prepare.append(attach_request_id)

    async def on_startup(app: web.Application) -> None:
        logger.info(f"Gateway started (backend: {config.backend})")

    async def on_shutdown(app: web.Application) -> None:
        purged = app[BROKER_KEY].purge_expired()
        logger.info(f"Gateway shutting down ({purged} expired tokens purged)")

    app.on_startup.append(on_startup)
    app.on_shutdown.append(on_shutdown)

    app.add_routes(routes)
    if config.static_dir:
        _add_static(app, config.static_dir)

    return app


def run(config: Optional[GatewayConfig] = None, backend: Optional[StorageBackend] = None) -> None:
    """Create the application and serve it until interrupted."""
    config = config or GatewayConfig.from_env()
    app = create_app(config, backend)
    web.run_app(app, host=config.host, port=config.port, print=None)
