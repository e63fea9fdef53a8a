"""Node lookup by id and folder resolution policies."""
from dataclasses import dataclass
from typing import Optional, Union
import logging

from ..exceptions import NotFoundError, NotAFolderError
from ..storage.models import Node
from ..storage.protocols import DirectoryCapability, BackendSession

logger = logging.getLogger(__name__)


class NodeLocator:
    """
    Finds a node by id with a depth-first walk over a lazily listed tree.

    No index is kept: children are listed through the directory
    capability as the walk reaches them, and the walk stops at the first
    match.
    """

    def __init__(self, directory: DirectoryCapability):
        self._directory = directory

    async def locate(self, root: Node, target_id: str) -> Optional[Node]:
        """
        Find the node with the given id below (or at) root.

        Args:
            root: Node to start from
            target_id: Id to look for

        Returns:
            The node, or None if not found
        """
        if root.node_id == target_id:
            return root
        if not root.is_folder:
            return None

        children = await self._directory.children(root)
        for child in children:
            if child.node_id == target_id:
                return child

        for child in children:
            if child.is_folder:
                found = await self.locate(child, target_id)
                if found is not None:
                    return found

        return None


async def resolve_folder(
    session: BackendSession,
    folder_id: Optional[str],
    missing_message: str = "Folder not found",
    not_folder_message: str = "Not a folder"
) -> Node:
    """
    Resolve a folder id, using the root when no id is given.

    Raises:
        NotFoundError: If the id does not exist
        NotAFolderError: If the id names a file
    """
    root = await session.root()
    if not folder_id:
        return root
    node = await NodeLocator(session).locate(root, folder_id)
    if node is None:
        raise NotFoundError(missing_message)
    if not node.is_folder:
        raise NotAFolderError(not_folder_message)
    return node


async def resolve_file(session: BackendSession, file_id: str) -> Node:
    """
    Resolve a file id.

    Raises:
        NotFoundError: If the id does not exist or names a folder
    """
    root = await session.root()
    node = await NodeLocator(session).locate(root, file_id) if file_id else None
    if node is None or node.is_folder:
        raise NotFoundError("File not found")
    return node


@dataclass(frozen=True)
class Resolved:
    """Upload goes into the requested folder."""
    node: Node


@dataclass(frozen=True)
class FallbackToRoot:
    """Upload goes into the root because the requested folder was unusable."""
    node: Node
    reason: str


UploadTarget = Union[Resolved, FallbackToRoot]


async def resolve_upload_target(session: BackendSession, folder_id: Optional[str]) -> UploadTarget:
    """
    Pick the destination folder of an upload.

    An unknown id or a file id does not fail the upload: the root is used
    instead and the reason is recorded on the result.
    """
    root = await session.root()
    if not folder_id:
        return Resolved(root)

    node = await NodeLocator(session).locate(root, folder_id)
    if node is None:
        return FallbackToRoot(root, f"Folder {folder_id} not found")
    if not node.is_folder:
        return FallbackToRoot(root, f"Node {folder_id} is not a folder")
    return Resolved(node)
