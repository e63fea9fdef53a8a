"""Credential and token models."""
from dataclasses import dataclass, field
from typing import Optional
import time


@dataclass(frozen=True)
class Credentials:
    """Storage account credentials bound to a token."""
    identity: str
    secret: str = field(repr=False)

    def __str__(self) -> str:
        return self.identity


@dataclass(frozen=True)
class TokenRecord:
    """
    Everything stored for an issued token.

    Attributes:
        credentials: Credentials the token stands for
        issued_at: Unix timestamp of issuance
        expires_at: Unix timestamp of expiry (None: never expires)
    """
    credentials: Credentials
    issued_at: float = field(default_factory=time.time)
    expires_at: Optional[float] = None

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return (time.time() if now is None else now) >= self.expires_at


@dataclass(frozen=True)
class LoginResult:
    """Result of a successful login."""
    token: str
    identity: str

    def to_dict(self) -> dict:
        return {'token': self.token, 'email': self.identity}
