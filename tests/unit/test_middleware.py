"""Tests for request id middleware."""
import warnings

import pytest
from aiohttp import web
from aiohttp.test_utils import make_mocked_request

from megagate.api.keys import REQUEST_ID_KEY
from megagate.api.middleware import request_logger, attach_request_id


class TestRequestId:
    """Test suite for request id propagation."""

    def test_key_is_typed(self):
        assert isinstance(REQUEST_ID_KEY, web.RequestKey)

    @pytest.mark.asyncio
    async def test_incoming_id_stored_on_request(self):
        request = make_mocked_request('GET', '/health', headers={'X-Request-ID': 'req-42'})
        seen = []

        async def handler(req):
            seen.append(req[REQUEST_ID_KEY])
            return web.Response(text='ok')

        with warnings.catch_warnings():
            warnings.simplefilter('error')
            await request_logger(request, handler)

        assert seen == ['req-42']

    @pytest.mark.asyncio
    async def test_minted_id_echoed(self):
        request = make_mocked_request('GET', '/health')
        response = web.Response(text='ok')

        async def handler(req):
            return response

        await request_logger(request, handler)
        await attach_request_id(request, response)

        assert response.headers['X-Request-ID'] == request[REQUEST_ID_KEY]
        assert len(response.headers['X-Request-ID']) == 36
