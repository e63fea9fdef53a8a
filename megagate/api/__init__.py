"""HTTP API surface."""
from .keys import CONFIG_KEY, BROKER_KEY, SESSIONS_KEY
from .middleware import request_logger, error_middleware, attach_request_id, plain_text_errors
from .routes import routes

__all__ = [
    'CONFIG_KEY',
    'BROKER_KEY',
    'SESSIONS_KEY',
    'request_logger',
    'error_middleware',
    'attach_request_id',
    'plain_text_errors',
    'routes',
]
