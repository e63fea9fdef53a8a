"""Typed application keys shared by the routes."""
from aiohttp import web

from ..core.auth import TokenBroker
from ..core.config import GatewayConfig
from ..core.storage import StorageSessionFactory

CONFIG_KEY = web.AppKey('config', GatewayConfig)
BROKER_KEY = web.AppKey('broker', TokenBroker)
SESSIONS_KEY = web.AppKey('sessions', StorageSessionFactory)

REQUEST_ID_KEY = web.RequestKey('request_id', str)
