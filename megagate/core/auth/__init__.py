"""
Token broker.

Binds opaque session tokens to storage credentials kept server-side.
"""
from .models import Credentials, TokenRecord, LoginResult
from .protocols import TokenStore
from .memory_store import MemoryTokenStore
from .broker import TokenBroker, extract_token, generate_token

__all__ = [
    'Credentials',
    'TokenRecord',
    'LoginResult',
    'TokenStore',
    'MemoryTokenStore',
    'TokenBroker',
    'extract_token',
    'generate_token',
]
