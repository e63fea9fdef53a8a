"""Streaming transfers between clients and the storage backend."""
from .download import DownloadStreamer, content_disposition, sanitize_filename
from .staging import StagedUpload, stage_upload, staged_upload
from .upload import UploadStreamer

__all__ = [
    'DownloadStreamer',
    'UploadStreamer',
    'StagedUpload',
    'stage_upload',
    'staged_upload',
    'content_disposition',
    'sanitize_filename',
]
