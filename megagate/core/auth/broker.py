"""Token issuance and request authentication."""
import logging
import secrets
import time
from typing import Optional, Mapping, Any, TYPE_CHECKING

from ..config import TokenConfig
from ..exceptions import AuthError, InvalidCredentials, StorageConnectionError
from .memory_store import MemoryTokenStore
from .models import Credentials, TokenRecord, LoginResult
from .protocols import TokenStore

if TYPE_CHECKING:
    from ..storage.factory import StorageSessionFactory

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24


def generate_token() -> str:
    """Generate an opaque random token (48 hex chars)."""
    return secrets.token_hex(TOKEN_BYTES)


def extract_token(headers: Mapping[str, str], query: Mapping[str, str]) -> Optional[str]:
    """
    Extract a bearer token from a request.

    The Authorization header wins; the `token` query parameter is the
    fallback used by plain navigations such as downloads.
    """
    parts = (headers.get('Authorization') or '').split(' ')
    if len(parts) == 2 and parts[0] == 'Bearer' and parts[1]:
        return parts[1]
    token = query.get('token')
    return str(token) if token else None


class TokenBroker:
    """
    Issues tokens bound to storage credentials and resolves them back.

    Credentials never leave the broker: clients only ever see the token.
    """

    def __init__(
        self,
        sessions: 'StorageSessionFactory',
        store: Optional[TokenStore] = None,
        config: Optional[TokenConfig] = None
    ):
        self._sessions = sessions
        self._config = config or TokenConfig()
        self._store = store if store is not None else MemoryTokenStore(self._config.max_tokens)

    @property
    def store(self) -> TokenStore:
        return self._store

    async def issue(self, identity: str, secret: str) -> LoginResult:
        """
        Verify credentials against the backend and issue a token.

        Raises:
            InvalidCredentials: If the backend rejected the credentials
            BackendError: If the backend could not be reached
        """
        credentials = Credentials(identity, secret)
        try:
            await self._sessions.verify(credentials)
        except StorageConnectionError as e:
            raise InvalidCredentials() from e

        token = generate_token()
        now = time.time()
        expires_at = now + self._config.ttl if self._config.ttl else None
        self._store.put(token, TokenRecord(credentials, issued_at=now, expires_at=expires_at))
        logger.info(f"Issued token for {identity}")
        return LoginResult(token=token, identity=identity)

    def lookup(self, token: Optional[str]) -> Optional[Credentials]:
        """Map a token to its credentials; None when unknown or expired."""
        if not token:
            return None
        record = self._store.get(token)
        if record is None:
            return None
        if record.is_expired():
            self._store.delete(token)
            logger.debug("Dropped expired token")
            return None
        return record.credentials

    def resolve(self, request: Any) -> Optional[Credentials]:
        """Resolve the credentials of a request, or None."""
        return self.lookup(extract_token(request.headers, request.query))

    def authenticate(self, request: Any) -> Credentials:
        """
        Like resolve(), but raises instead of returning None.

        Raises:
            AuthError: If the request carries no valid token
        """
        credentials = self.resolve(request)
        if credentials is None:
            raise AuthError()
        return credentials

    def revoke(self, token: Optional[str]) -> bool:
        """Forget a token. Returns True if it was known."""
        if not token:
            return False
        removed = self._store.delete(token)
        if removed:
            logger.info("Token revoked")
        return removed

    def purge_expired(self) -> int:
        return self._store.purge_expired()
