"""
Storage backend protocols.

Defines the capabilities the gateway needs from a remote storage provider.
Any provider (MEGA, a test double, an object store) can be plugged in by
implementing these interfaces.
"""
from typing import Protocol, List, AsyncIterator, Awaitable, Callable, runtime_checkable

from .models import Node


@runtime_checkable
class DirectoryCapability(Protocol):
    """Anything that can list the children of a folder node."""

    async def children(self, node: Node) -> List[Node]:
        """
        List the immediate children of a folder.

        Returns:
            Child nodes in the order reported by the backend
        """
        ...


@runtime_checkable
class UploadHandle(Protocol):
    """
    A running upload.

    Emits 'progress' (TransferProgress) and 'error' (Exception) events.
    """

    complete: Awaitable[Node]

    def on(self, event: str, callback: Callable) -> 'UploadHandle':
        """Registers an event handler."""
        ...

    def write(self, data: bytes) -> None:
        """Queue data for upload."""
        ...

    def end(self) -> None:
        """Signal that no more data will be written."""
        ...


@runtime_checkable
class BackendSession(DirectoryCapability, Protocol):
    """A live, per-request handle to one account's storage."""

    async def root(self) -> Node:
        """Get the root folder node."""
        ...

    async def mkdir(self, parent: Node, name: str) -> Node:
        """Create a folder under parent."""
        ...

    def download(self, node: Node) -> AsyncIterator[bytes]:
        """Stream the content of a file node."""
        ...

    def upload(self, parent: Node, name: str, size: int) -> UploadHandle:
        """
        Start an upload of a file of known size into parent.

        Returns:
            Upload handle; await its `complete` for the created node
        """
        ...

    async def close(self) -> None:
        """Release the session."""
        ...


@runtime_checkable
class StorageBackend(Protocol):
    """
    Factory of storage sessions.

    Implementations raise BackendAuthError when credentials are rejected.
    """

    async def connect(self, identity: str, secret: str) -> BackendSession:
        """Establish a session for the given account."""
        ...

