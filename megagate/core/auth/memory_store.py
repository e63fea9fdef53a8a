"""
In-memory token storage implementation.

Tokens live in process memory and are lost on restart.
"""
import threading
import time
from collections import OrderedDict
from typing import Optional

from .models import TokenRecord
from .protocols import TokenStore


class MemoryTokenStore(TokenStore):
    """
    In-memory token table guarded by a lock.

    Example:
        >>> store = MemoryTokenStore(max_tokens=1000)
        >>> store.put(token, record)
        >>> store.get(token)
    """

    def __init__(self, max_tokens: Optional[int] = None):
        """
        Initialize memory token storage.

        Args:
            max_tokens: When set, storing a new token beyond this count
                evicts the oldest one
        """
        self._records: 'OrderedDict[str, TokenRecord]' = OrderedDict()
        self._max_tokens = max_tokens
        self._lock = threading.Lock()

    def get(self, token: str) -> Optional[TokenRecord]:
        with self._lock:
            return self._records.get(token)

    def put(self, token: str, record: TokenRecord) -> None:
        with self._lock:
            self._records[token] = record
            self._records.move_to_end(token)
            if self._max_tokens:
                while len(self._records) > self._max_tokens:
                    self._records.popitem(last=False)

    def delete(self, token: str) -> bool:
        with self._lock:
            return self._records.pop(token, None) is not None

    def purge_expired(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        with self._lock:
            dead = [token for token, record in self._records.items() if record.is_expired(now)]
            for token in dead:
                del self._records[token]
        return len(dead)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, token: str) -> bool:
        with self._lock:
            return token in self._records
