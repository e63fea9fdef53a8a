"""Storage sessions, backend protocols and the in-memory backend."""
from .models import Node, TransferProgress
from .protocols import (
    DirectoryCapability,
    BackendSession,
    StorageBackend,
    UploadHandle,
)
from .factory import StorageSessionFactory
from .memory import MemoryBackend, MemorySession
from .loader import load_backend

__all__ = [
    'Node',
    'TransferProgress',
    'DirectoryCapability',
    'BackendSession',
    'StorageBackend',
    'UploadHandle',
    'StorageSessionFactory',
    'MemoryBackend',
    'MemorySession',
    'load_backend',
]
