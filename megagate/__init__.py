"""
megagate - Session-authenticated HTTP gateway for remote file storage.

Usage:
    >>> from megagate import GatewayConfig, create_app
    >>> from aiohttp import web
    >>>
    >>> config = GatewayConfig(accounts={"user@example.com": "secret"})
    >>> web.run_app(create_app(config), port=3000)
"""
import logging

from .app import create_app, run
from .core.config import GatewayConfig, TimeoutConfig, TokenConfig, UploadConfig
from .core.auth import Credentials, TokenBroker, TokenStore, MemoryTokenStore
from .core.storage import (
    Node,
    StorageBackend,
    BackendSession,
    StorageSessionFactory,
    MemoryBackend,
    load_backend,
)
from .core.exceptions import (
    GatewayError,
    ValidationError,
    AuthError,
    InvalidCredentials,
    NotFoundError,
    NotAFolderError,
    BackendError,
    StagingError,
    BackendAuthError,
    BackendOperationError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for megagate modules.

    Sets the level of every megagate logger created so far and makes sure
    they propagate to the root logger.

    Args:
        level: Logging level (default: logging.INFO)
    """
    names = ['megagate'] + [
        name for name in logging.root.manager.loggerDict
        if name.startswith('megagate.')
    ]
    for logger_name in names:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'create_app',
    'run',
    'GatewayConfig',
    'TimeoutConfig',
    'TokenConfig',
    'UploadConfig',
    'Credentials',
    'TokenBroker',
    'TokenStore',
    'MemoryTokenStore',
    'Node',
    'StorageBackend',
    'BackendSession',
    'StorageSessionFactory',
    'MemoryBackend',
    'load_backend',
    'GatewayError',
    'ValidationError',
    'AuthError',
    'InvalidCredentials',
    'NotFoundError',
    'NotAFolderError',
    'BackendError',
    'StagingError',
    'BackendAuthError',
    'BackendOperationError',
    'setup_logging',
]
