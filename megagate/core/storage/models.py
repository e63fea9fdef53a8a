"""Storage node models."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Node:
    """
    A file or folder in the remote storage graph.

    Nodes do not hold their children: those are fetched through the
    session handle every time they are needed.

        >>> Node("h1", "report.pdf", size=1024, created=1699900000)
        Node(node_id='h1', name='report.pdf', is_folder=False, size=1024, created=1699900000)
    """
    node_id: str
    name: str
    is_folder: bool = False
    size: Optional[int] = None
    created: Optional[int] = None

    def __post_init__(self):
        if self.is_folder and self.size is not None:
            object.__setattr__(self, 'size', None)

    @property
    def is_file(self) -> bool:
        return not self.is_folder

    @property
    def kind(self) -> str:
        return 'folder' if self.is_folder else 'file'


@dataclass
class TransferProgress:
    """Progress of a running transfer."""
    transferred: int
    total: int

    @property
    def percent(self) -> float:
        if self.total <= 0:
            return 100.0
        return min(100.0, self.transferred * 100.0 / self.total)
