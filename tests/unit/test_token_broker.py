"""Tests for TokenBroker."""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from megagate.core.auth import TokenBroker, MemoryTokenStore, extract_token, generate_token
from megagate.core.config import TokenConfig
from megagate.core.exceptions import AuthError, InvalidCredentials, BackendError
from megagate.core.storage import MemoryBackend, StorageSessionFactory

EMAIL = "user@example.com"
PASSWORD = "secret"


def make_request(headers=None, query=None):
    return SimpleNamespace(headers=headers or {}, query=query or {})


@pytest.fixture
def backend():
    return MemoryBackend({EMAIL: PASSWORD, "other@example.com": "other-secret"})


@pytest.fixture
def broker(backend):
    return TokenBroker(StorageSessionFactory(backend))


class TestExtractToken:
    """Tests for token extraction."""

    def test_bearer_header(self):
        assert extract_token({'Authorization': 'Bearer abc'}, {}) == 'abc'

    def test_query_fallback(self):
        assert extract_token({}, {'token': 'xyz'}) == 'xyz'

    def test_header_wins_over_query(self):
        assert extract_token({'Authorization': 'Bearer abc'}, {'token': 'xyz'}) == 'abc'

    def test_malformed_header_falls_back_to_query(self):
        assert extract_token({'Authorization': 'Basic abc'}, {'token': 'xyz'}) == 'xyz'
        assert extract_token({'Authorization': 'Bearer'}, {'token': 'xyz'}) == 'xyz'

    def test_missing(self):
        assert extract_token({}, {}) is None


class TestGenerateToken:
    """Tests for token generation."""

    def test_format(self):
        token = generate_token()

        assert len(token) == 48
        int(token, 16)

    def test_unique(self):
        assert len({generate_token() for _ in range(1000)}) == 1000


class TestTokenBroker:
    """Test suite for TokenBroker."""

    @pytest.mark.asyncio
    async def test_issue_and_resolve_round_trip(self, broker):
        """The issued token maps back to the exact credentials."""
        result = await broker.issue(EMAIL, PASSWORD)

        credentials = broker.resolve(make_request({'Authorization': f'Bearer {result.token}'}))

        assert result.identity == EMAIL
        assert credentials.identity == EMAIL
        assert credentials.secret == PASSWORD

    @pytest.mark.asyncio
    async def test_login_result_hides_password(self, broker):
        result = await broker.issue(EMAIL, PASSWORD)

        payload = result.to_dict()

        assert payload == {'token': result.token, 'email': EMAIL}
        assert PASSWORD not in str(payload)

    @pytest.mark.asyncio
    async def test_resolve_by_query(self, broker):
        result = await broker.issue(EMAIL, PASSWORD)

        assert broker.resolve(make_request(query={'token': result.token})).identity == EMAIL

    @pytest.mark.asyncio
    async def test_invalid_credentials_store_nothing(self, broker):
        with pytest.raises(InvalidCredentials):
            await broker.issue(EMAIL, "wrong")

        assert len(broker.store) == 0

    @pytest.mark.asyncio
    async def test_unknown_account(self, broker):
        with pytest.raises(InvalidCredentials):
            await broker.issue("nobody@example.com", PASSWORD)

    @pytest.mark.asyncio
    async def test_backend_failure_is_not_invalid_credentials(self, backend, broker):
        with patch.object(backend, 'connect', AsyncMock(side_effect=OSError("network down"))):
            with pytest.raises(BackendError):
                await broker.issue(EMAIL, PASSWORD)

        assert len(broker.store) == 0

    def test_unknown_token_same_as_missing(self, broker):
        assert broker.resolve(make_request({'Authorization': 'Bearer nope'})) is None
        assert broker.resolve(make_request(query={'token': 'nope'})) is None
        assert broker.resolve(make_request()) is None

    def test_authenticate_raises(self, broker):
        with pytest.raises(AuthError) as exc_info:
            broker.authenticate(make_request())

        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_expired_token_is_dropped(self, backend):
        broker = TokenBroker(StorageSessionFactory(backend), config=TokenConfig(ttl=60))
        result = await broker.issue(EMAIL, PASSWORD)
        request = make_request(query={'token': result.token})

        with patch('megagate.core.auth.models.time.time', return_value=10 ** 12):
            assert broker.resolve(request) is None

        assert len(broker.store) == 0

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self, backend):
        broker = TokenBroker(StorageSessionFactory(backend), config=TokenConfig(ttl=None))
        result = await broker.issue(EMAIL, PASSWORD)

        with patch('megagate.core.auth.models.time.time', return_value=10 ** 12):
            assert broker.resolve(make_request(query={'token': result.token})) is not None

    @pytest.mark.asyncio
    async def test_revoke(self, broker):
        result = await broker.issue(EMAIL, PASSWORD)

        assert broker.revoke(result.token) is True
        assert broker.revoke(result.token) is False
        assert broker.resolve(make_request(query={'token': result.token})) is None

    @pytest.mark.asyncio
    async def test_injected_store(self, backend):
        store = MemoryTokenStore()
        broker = TokenBroker(StorageSessionFactory(backend), store=store)

        result = await broker.issue(EMAIL, PASSWORD)

        assert store.get(result.token).credentials.identity == EMAIL

    @pytest.mark.asyncio
    async def test_concurrent_logins_get_distinct_tokens(self, broker):
        """Parallel logins never share a token or see each other's credentials."""
        results = await asyncio.gather(
            broker.issue(EMAIL, PASSWORD),
            broker.issue("other@example.com", "other-secret"),
            broker.issue(EMAIL, PASSWORD),
        )

        tokens = [result.token for result in results]
        assert len(set(tokens)) == 3

        resolved = [broker.resolve(make_request(query={'token': t})) for t in tokens]
        assert [c.identity for c in resolved] == [EMAIL, "other@example.com", EMAIL]
        assert resolved[1].secret == "other-secret"
