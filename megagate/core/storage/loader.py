"""Storage backend loading from configuration."""
import importlib
import logging
from typing import Optional

from ..config import GatewayConfig
from .protocols import StorageBackend

logger = logging.getLogger(__name__)

BUILTIN_BACKENDS = {
    'memory': 'megagate.core.storage.memory:create_backend',
}


def load_backend(target: str, config: Optional[GatewayConfig] = None) -> StorageBackend:
    """
    Create a storage backend from an import path.

    Args:
        target: Builtin name ("memory") or "package.module:factory"; the
            factory is called with the gateway configuration
        config: Gateway configuration passed to the factory

    Returns:
        Backend instance

    Raises:
        ValueError: If the target is malformed or cannot be imported
    """
    path = BUILTIN_BACKENDS.get(target, target)
    if ':' not in path:
        raise ValueError(f"Invalid backend {target!r}: expected 'package.module:factory'")

    module_name, attr = path.split(':', 1)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Unable to import backend module {module_name}: {e}") from e

    factory = getattr(module, attr, None)
    if factory is None or not callable(factory):
        raise ValueError(f"Backend factory {attr!r} not found in {module_name}")

    backend = factory(config or GatewayConfig.default())
    logger.info(f"Loaded storage backend {path}")
    return backend
