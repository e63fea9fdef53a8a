"""
Multipart upload staging.

Streams the uploaded file part of a multipart request into a temporary
file so the transfer to the backend can start from a file of known size.
"""
import logging
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, AsyncIterator

import aiofiles
import aiofiles.os

from ..config import UploadConfig
from ..exceptions import GatewayError, ValidationError, StagingError

logger = logging.getLogger(__name__)

FILE_FIELD = 'file'
FOLDER_FIELD = 'folderId'
MAX_FIELD_SIZE = 1024


@dataclass
class StagedUpload:
    """
    An uploaded file waiting on local disk.

    Attributes:
        path: Temporary file path
        filename: Original file name sent by the client
        size: Bytes written to disk
        folder_id: Requested destination folder (may be empty)
    """
    path: Path
    filename: str
    size: int = 0
    folder_id: Optional[str] = None
    _discarded: bool = field(default=False, repr=False)

    @property
    def discarded(self) -> bool:
        return self._discarded

    async def discard(self) -> bool:
        """
        Delete the temporary file.

        Only the first call touches the disk; later calls are no-ops.

        Returns:
            True if this call performed the deletion
        """
        if self._discarded:
            return False
        self._discarded = True
        try:
            await aiofiles.os.remove(self.path)
            logger.debug(f"Removed temporary file {self.path}")
        except FileNotFoundError:
            logger.debug(f"Temporary file already gone: {self.path}")
        except OSError as e:
            logger.error(f"Error deleting temporary file {self.path}: {e}")
        return True


def _make_temp_path(filename: str, temp_dir: Optional[str]) -> Path:
    suffix = Path(filename).suffix if filename else ''
    fd, path = tempfile.mkstemp(prefix='megagate-', suffix=suffix, dir=temp_dir)
    os.close(fd)
    return Path(path)


async def _write_part(part, config: UploadConfig) -> StagedUpload:
    """Copy a file part to a temporary file, enforcing the size limit."""
    filename = part.filename or ''
    try:
        staged = StagedUpload(path=_make_temp_path(filename, config.temp_dir), filename=filename)
    except OSError as e:
        raise StagingError(f"File upload error: {e}") from e

    try:
        async with aiofiles.open(staged.path, 'wb') as f:
            while True:
                chunk = await part.read_chunk(config.chunk_size)
                if not chunk:
                    break
                staged.size += len(chunk)
                if staged.size > config.max_size:
                    raise ValidationError(f"File exceeds maximum size of {config.max_size} bytes")
                await f.write(chunk)
    except BaseException:
        await staged.discard()
        raise

    logger.debug(f"Staged {filename} ({staged.size} bytes) at {staged.path}")
    return staged


async def _read_field(part, limit: int = MAX_FIELD_SIZE) -> str:
    """Read a text form field of at most limit bytes."""
    data = bytearray()
    while True:
        chunk = await part.read_chunk(limit)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > limit:
            raise ValidationError(f"Field {part.name} exceeds {limit} bytes")
    try:
        return data.decode(part.get_charset(default='utf-8'))
    except (UnicodeDecodeError, LookupError):
        raise ValidationError(f"Field {part.name} is not valid text")


async def stage_upload(request, config: Optional[UploadConfig] = None) -> StagedUpload:
    """
    Read a multipart request and stage its file part.

    Args:
        request: aiohttp request
        config: Upload configuration

    Returns:
        StagedUpload; the caller owns it and must discard() it

    Raises:
        ValidationError: If the body is not multipart, has no file or is too large
        StagingError: If the body cannot be read or written to disk
    """
    config = config or UploadConfig()
    if not request.content_type.startswith('multipart/'):
        raise ValidationError("Expected multipart/form-data")

    staged: Optional[StagedUpload] = None
    folder_id = ''
    try:
        reader = await request.multipart()
        while True:
            part = await reader.next()
            if part is None:
                break
            name = getattr(part, 'name', None)
            if name == FILE_FIELD and staged is None:
                staged = await _write_part(part, config)
            elif name == FOLDER_FIELD:
                folder_id = (await _read_field(part)).strip()
            else:
                await part.release()
    except GatewayError:
        if staged is not None:
            await staged.discard()
        raise
    except Exception as e:
        if staged is not None:
            await staged.discard()
        logger.error(f"Form parsing error: {e}")
        raise StagingError(f"File upload error: {e}") from e

    if staged is None:
        raise ValidationError("File not found")
    if not staged.filename:
        await staged.discard()
        raise ValidationError("File not found")

    staged.folder_id = folder_id
    return staged


@asynccontextmanager
async def staged_upload(request, config: Optional[UploadConfig] = None) -> AsyncIterator[StagedUpload]:
    """Stage an upload and discard it when the block exits, however it exits."""
    staged = await stage_upload(request, config)
    try:
        yield staged
    finally:
        await staged.discard()
