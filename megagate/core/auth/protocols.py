"""
Token storage protocols.

Defines the interface for token table implementations so the in-memory
table can be replaced by a persistent or shared store.
"""
from typing import Protocol, Optional, runtime_checkable
from .models import TokenRecord


@runtime_checkable
class TokenStore(Protocol):
    """
    Protocol for token storage implementations.

    Implementations must be safe to call from concurrent requests.
    """

    def get(self, token: str) -> Optional[TokenRecord]:
        """
        Look up a token.

        Returns:
            TokenRecord if the token exists, None otherwise
        """
        ...

    def put(self, token: str, record: TokenRecord) -> None:
        """
        Store a token record.

        Args:
            token: Token string
            record: Record to associate with the token
        """
        ...

    def delete(self, token: str) -> bool:
        """
        Remove a token.

        Returns:
            True if the token existed
        """
        ...

    def purge_expired(self, now: Optional[float] = None) -> int:
        """
        Remove expired tokens.

        Returns:
            Number of tokens removed
        """
        ...

    def __len__(self) -> int:
        ...
