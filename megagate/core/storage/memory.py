"""
In-memory storage backend.

Keeps one node tree per account in process memory. Used for local
development and tests.

Example:
    >>> backend = MemoryBackend({"user@example.com": "secret"})
    >>> session = await backend.connect("user@example.com", "secret")
    >>> root = await session.root()
    >>> docs = await session.mkdir(root, "Documents")
"""
import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, AsyncIterator, Mapping

from ..events import EventEmitter
from ..exceptions import BackendAuthError, BackendOperationError
from .models import Node, TransferProgress

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _new_handle() -> str:
    return uuid.uuid4().hex[:8]


@dataclass
class _Entry:
    """Mutable tree entry backing a Node."""
    handle: str
    name: str
    is_folder: bool
    created: int
    data: bytes = b''
    children: List['_Entry'] = field(default_factory=list)

    def to_node(self) -> Node:
        return Node(
            node_id=self.handle,
            name=self.name,
            is_folder=self.is_folder,
            size=None if self.is_folder else len(self.data),
            created=self.created
        )


class MemoryUploadHandle(EventEmitter):
    """
    Upload into a memory account.

    Data written is buffered until end(); then size is checked and the
    file node is created, resolving `complete`.
    """

    def __init__(self, account: '_Account', parent: _Entry, name: str, size: int):
        super().__init__()
        self._account = account
        self._parent = parent
        self._name = name
        self._size = size
        self._buffer = bytearray()
        self._ended = False
        self.complete: asyncio.Future = asyncio.get_running_loop().create_future()

    def write(self, data: bytes) -> None:
        if self._ended:
            raise BackendOperationError("write after end")
        self._buffer.extend(data)
        self.emit('progress', TransferProgress(len(self._buffer), self._size))

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        asyncio.get_running_loop().call_soon(self._finish)

    def _finish(self) -> None:
        if self.complete.done():
            return
        if len(self._buffer) != self._size:
            error = BackendOperationError(
                f"Size mismatch: declared {self._size} bytes, received {len(self._buffer)}"
            )
            self.emit('error', error)
            self.complete.set_exception(error)
            return
        entry = self._account.add_file(self._parent, self._name, bytes(self._buffer))
        self.complete.set_result(entry.to_node())


class _Account:
    """Tree and credentials of one account."""

    def __init__(self, email: str, password: str):
        self.email = email
        self.password = password
        self.root = _Entry(_new_handle(), 'Cloud Drive', True, int(time.time()))
        self.index: Dict[str, _Entry] = {self.root.handle: self.root}

    def get(self, node: Node) -> _Entry:
        entry = self.index.get(node.node_id)
        if entry is None:
            raise BackendOperationError(f"Node not found: {node.node_id}")
        return entry

    def add_folder(self, parent: _Entry, name: str) -> _Entry:
        entry = _Entry(_new_handle(), name, True, int(time.time()))
        parent.children.append(entry)
        self.index[entry.handle] = entry
        return entry

    def add_file(self, parent: _Entry, name: str, data: bytes) -> _Entry:
        entry = _Entry(_new_handle(), name, False, int(time.time()), data=data)
        parent.children.append(entry)
        self.index[entry.handle] = entry
        return entry


class MemorySession:
    """Session handle bound to one memory account."""

    def __init__(self, account: _Account, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._account = account
        self._chunk_size = chunk_size
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise BackendOperationError("Session is closed")

    async def root(self) -> Node:
        self._check_open()
        return self._account.root.to_node()

    async def children(self, node: Node) -> List[Node]:
        self._check_open()
        entry = self._account.get(node)
        return [child.to_node() for child in entry.children]

    async def mkdir(self, parent: Node, name: str) -> Node:
        self._check_open()
        entry = self._account.get(parent)
        if not entry.is_folder:
            raise BackendOperationError(f"Not a folder: {parent.node_id}")
        return self._account.add_folder(entry, name).to_node()

    async def download(self, node: Node) -> AsyncIterator[bytes]:
        self._check_open()
        entry = self._account.get(node)
        if entry.is_folder:
            raise BackendOperationError(f"Cannot download a folder: {node.node_id}")
        data = entry.data
        for start in range(0, len(data), self._chunk_size):
            await asyncio.sleep(0)
            yield data[start:start + self._chunk_size]

    def upload(self, parent: Node, name: str, size: int) -> MemoryUploadHandle:
        self._check_open()
        entry = self._account.get(parent)
        if not entry.is_folder:
            raise BackendOperationError(f"Not a folder: {parent.node_id}")
        return MemoryUploadHandle(self._account, entry, name, size)

    async def close(self) -> None:
        self._closed = True


class MemoryBackend:
    """
    Storage backend keeping every account in memory.

    Args:
        accounts: Mapping of email to password
        chunk_size: Size of the chunks yielded by downloads
    """

    def __init__(self, accounts: Optional[Mapping[str, str]] = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._accounts: Dict[str, _Account] = {}
        self._chunk_size = chunk_size
        for email, password in (accounts or {}).items():
            self.add_account(email, password)

    def add_account(self, email: str, password: str) -> None:
        """Register an account with an empty drive."""
        self._accounts[email] = _Account(email, password)

    async def connect(self, identity: str, secret: str) -> MemorySession:
        await asyncio.sleep(0)
        account = self._accounts.get(identity)
        if account is None or account.password != secret:
            raise BackendAuthError("ENOENT (-9): Object (typically, node or user) not found. Wrong password?")
        logger.debug(f"Memory session opened for {identity}")
        return MemorySession(account, self._chunk_size)

    # Direct seeding helpers, bypassing sessions.

    def seed_folder(self, email: str, name: str, parent_id: Optional[str] = None) -> Node:
        account = self._accounts[email]
        parent = account.index[parent_id] if parent_id else account.root
        return account.add_folder(parent, name).to_node()

    def seed_file(self, email: str, name: str, data: bytes, parent_id: Optional[str] = None) -> Node:
        account = self._accounts[email]
        parent = account.index[parent_id] if parent_id else account.root
        return account.add_file(parent, name, data).to_node()


def create_backend(config=None) -> MemoryBackend:
    """Backend factory used by the loader."""
    accounts = getattr(config, 'accounts', None) or {}
    return MemoryBackend(accounts)
