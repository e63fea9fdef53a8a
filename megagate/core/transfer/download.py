"""
Streaming download from the backend to the HTTP response.

Chunks are forwarded as they arrive; the file is never held in memory.
"""
import asyncio
import logging
import os
import re
from typing import Optional, AsyncIterator, Dict
from urllib.parse import quote

from aiohttp import web

from ..config import TimeoutConfig
from ..exceptions import BackendError, NotFoundError
from ..storage.models import Node
from ..storage.protocols import BackendSession

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f]')


def sanitize_filename(name: str, default: str = 'download') -> str:
    """Strip characters that could break a Content-Disposition header."""
    s = _CONTROL_CHARS.sub('', name or '').replace('"', '').replace('\\', '')
    s = os.path.basename(s.replace('/', os.sep)).strip()
    if not s:
        s = default
    return s[:180]


def content_disposition(name: str) -> str:
    """
    Build an attachment Content-Disposition value.

    ASCII names are sent quoted; other names get an ASCII fallback plus
    the RFC 5987 ``filename*`` form.
    """
    safe = sanitize_filename(name)
    try:
        safe.encode('ascii')
        return f'attachment; filename="{safe}"'
    except UnicodeEncodeError:
        fallback = safe.encode('ascii', 'ignore').decode('ascii').strip() or 'download'
        encoded = quote(safe, safe='')
        return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{encoded}'


def download_headers(node: Node) -> Dict[str, str]:
    return {
        'Content-Disposition': content_disposition(node.name),
        'Content-Type': 'application/octet-stream',
        'Content-Length': str(node.size or 0),
    }


async def _close_stream(stream: AsyncIterator[bytes]) -> None:
    aclose = getattr(stream, 'aclose', None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as e:
        logger.debug(f"Error closing backend stream: {e}")


class DownloadStreamer:
    """Pipes a backend file stream into an aiohttp StreamResponse."""

    def __init__(self, timeouts: Optional[TimeoutConfig] = None):
        self._timeouts = timeouts or TimeoutConfig()

    async def _next_chunk(self, iterator) -> bytes:
        if self._timeouts.transfer_idle is None:
            return await iterator.__anext__()
        return await asyncio.wait_for(iterator.__anext__(), self._timeouts.transfer_idle)

    async def stream_down(self, session: BackendSession, node: Node, request) -> web.StreamResponse:
        """
        Stream a file node to the client.

        Failures before the first byte are raised as BackendError. Once the
        200 status is on the wire a failure can only cut the connection: it
        is logged, the connection is closed and the client sees a body
        shorter than Content-Length.

        Raises:
            NotFoundError: If node is a folder
            BackendError: If the backend fails before any data was sent
        """
        if node.is_folder:
            raise NotFoundError("File not found")

        stream = session.download(node)
        iterator = stream.__aiter__()
        try:
            chunk: Optional[bytes] = await self._next_chunk(iterator)
        except StopAsyncIteration:
            chunk = None
        except Exception as e:
            await _close_stream(stream)
            logger.error(f"Download error for {node.node_id}: {e}")
            raise BackendError(f"File download error: {e}") from e

        response = web.StreamResponse(status=200, headers=download_headers(node))
        written = 0
        try:
            await response.prepare(request)
            while chunk is not None:
                if chunk:
                    await response.write(chunk)
                    written += len(chunk)
                try:
                    chunk = await self._next_chunk(iterator)
                except StopAsyncIteration:
                    chunk = None
            await response.write_eof()
            logger.info(f"Downloaded {node.name} ({written} bytes)")
        except ConnectionError as e:
            logger.info(f"Client disconnected during download of {node.node_id} after {written} bytes: {e}")
            response.force_close()
        except Exception as e:
            logger.error(f"Download error for {node.node_id} after {written} bytes: {e}")
            response.force_close()
        finally:
            await _close_stream(stream)

        return response
