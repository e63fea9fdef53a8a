"""Storage session factory."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from ..auth.models import Credentials
from ..config import TimeoutConfig
from ..exceptions import BackendAuthError, BackendError, StorageConnectionError
from .protocols import StorageBackend, BackendSession

logger = logging.getLogger(__name__)


class StorageSessionFactory:
    """
    Opens a fresh backend session for every logical operation.

    Sessions are never pooled or reused across requests: each request
    gets its own handle and closes it when done.
    """

    def __init__(self, backend: StorageBackend, timeouts: Optional[TimeoutConfig] = None):
        self._backend = backend
        self._timeouts = timeouts or TimeoutConfig()

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    async def open(self, credentials: Credentials) -> BackendSession:
        """
        Establish a session for the given credentials.

        Raises:
            StorageConnectionError: If the backend rejected the credentials
            BackendError: On timeout or any other connection failure
        """
        try:
            session = await asyncio.wait_for(
                self._backend.connect(credentials.identity, credentials.secret),
                timeout=self._timeouts.connect
            )
        except BackendAuthError as e:
            logger.info(f"Backend rejected credentials for {credentials.identity}: {e}")
            raise StorageConnectionError() from e
        except asyncio.TimeoutError as e:
            logger.error(f"Timed out connecting to storage for {credentials.identity}")
            raise BackendError("Storage connection timed out") from e
        except Exception as e:
            logger.error(f"Storage connection failed for {credentials.identity}: {e}")
            raise BackendError(f"Storage connection failed: {e}") from e

        logger.debug(f"Connected to storage as {credentials.identity}")
        return session

    @asynccontextmanager
    async def session(self, credentials: Credentials) -> AsyncIterator[BackendSession]:
        """Open a session and close it when the block exits."""
        session = await self.open(credentials)
        try:
            yield session
        finally:
            try:
                await session.close()
            except Exception as e:
                logger.warning(f"Error closing storage session: {e}")

    async def verify(self, credentials: Credentials) -> None:
        """Check that credentials can open a session."""
        async with self.session(credentials):
            pass
