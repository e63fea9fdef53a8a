"""Folder listing projection."""
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from urllib.parse import quote

from ..exceptions import NotAFolderError
from ..storage.models import Node
from ..storage.protocols import DirectoryCapability

DOWNLOAD_PATH = '/api/download/'


def download_url(node: Node) -> str:
    """Client-facing download path for a file node."""
    return DOWNLOAD_PATH + quote(node.node_id, safe='')


@dataclass(frozen=True)
class ListingEntry:
    """One child of a listed folder."""
    name: str
    id: str
    type: str
    size: Optional[int]
    created: Optional[int]
    download_url: Optional[str] = None

    @classmethod
    def from_node(cls, node: Node) -> 'ListingEntry':
        return cls(
            name=node.name,
            id=node.node_id,
            type=node.kind,
            size=node.size,
            created=node.created,
            download_url=None if node.is_folder else download_url(node)
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'name': self.name,
            'id': self.id,
            'type': self.type,
            'size': self.size,
            'created': self.created,
        }
        if self.download_url is not None:
            result['downloadUrl'] = self.download_url
        return result


@dataclass
class Listing:
    """Immediate children of a folder, split into files and folders."""
    files: List[ListingEntry] = field(default_factory=list)
    folders: List[ListingEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'files': [entry.to_dict() for entry in self.files],
            'folders': [entry.to_dict() for entry in self.folders],
        }


class ListingProjector:
    """Projects one level of a folder into a Listing."""

    async def project(self, directory: DirectoryCapability, node: Node) -> Listing:
        """
        List a folder.

        Raises:
            NotAFolderError: If node is a file
        """
        if not node.is_folder:
            raise NotAFolderError("Not a folder")

        listing = Listing()
        for child in await directory.children(node):
            entry = ListingEntry.from_node(child)
            if child.is_folder:
                listing.folders.append(entry)
            else:
                listing.files.append(entry)
        return listing
