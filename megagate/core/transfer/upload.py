"""Upload of a staged file to the backend."""
import logging

import aiofiles
import aiofiles.os

from ..exceptions import GatewayError, BackendError, StagingError
from ..nodes.locator import UploadTarget, FallbackToRoot
from ..storage.models import Node, TransferProgress
from ..storage.protocols import BackendSession
from .staging import StagedUpload

logger = logging.getLogger(__name__)


class UploadStreamer:
    """
    Sends a staged file to the backend.

    The staged file is read whole into memory since the backend needs
    the size up front; it is removed whatever the outcome.
    """

    async def stream_up(
        self,
        session: BackendSession,
        target: UploadTarget,
        name: str,
        staged: StagedUpload
    ) -> Node:
        """
        Upload a staged file into the target folder.

        Args:
            session: Backend session
            target: Resolved destination (or root fallback)
            name: File name to create
            staged: Staged upload; discarded before returning

        Returns:
            The created file node

        Raises:
            StagingError: If the staged file cannot be read
            BackendError: If the backend rejects or fails the upload
        """
        try:
            if isinstance(target, FallbackToRoot):
                logger.warning(f"{target.reason}, uploading to root")

            try:
                stats = await aiofiles.os.stat(staged.path)
                async with aiofiles.open(staged.path, 'rb') as f:
                    data = await f.read()
            except OSError as e:
                raise StagingError(f"Upload error: {e}") from e
            size = stats.st_size
            logger.info(f"Uploading {name} ({size} bytes) to {target.node.name}")

            try:
                handle = session.upload(target.node, name, size)
                handle.on('progress', self._on_progress)
                handle.on('error', lambda error: logger.error(f"Backend upload error: {error}"))
                handle.write(data)
                handle.end()
                node = await handle.complete
            except GatewayError:
                raise
            except Exception as e:
                logger.error(f"Upload of {name} failed: {e}")
                raise BackendError(f"Upload error: {e}") from e

            logger.info(f"Upload completed: {name}")
            return node
        finally:
            await staged.discard()

    @staticmethod
    def _on_progress(progress: TransferProgress) -> None:
        logger.debug(f"Upload progress: {progress.transferred}/{progress.total} ({progress.percent:.1f}%)")
