"""Node lookup and listing."""
from .locator import (
    NodeLocator,
    Resolved,
    FallbackToRoot,
    UploadTarget,
    resolve_folder,
    resolve_file,
    resolve_upload_target,
)
from .listing import Listing, ListingEntry, ListingProjector, download_url

__all__ = [
    'NodeLocator',
    'Resolved',
    'FallbackToRoot',
    'UploadTarget',
    'resolve_folder',
    'resolve_file',
    'resolve_upload_target',
    'Listing',
    'ListingEntry',
    'ListingProjector',
    'download_url',
]
