"""Request logging and error rendering."""
import functools
import logging
import time
from typing import Awaitable, Callable
from uuid import uuid4

from aiohttp import web

from ..core.exceptions import GatewayError
from .keys import REQUEST_ID_KEY

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = 'X-Request-ID'

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def request_logger(request: web.Request, handler: Handler) -> web.StreamResponse:
    """
    Log each request with a correlation id.

    An incoming X-Request-ID is reused; otherwise one is minted. The id is
    echoed on the response by attach_request_id.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
    request[REQUEST_ID_KEY] = request_id

    start = time.perf_counter()
    logger.debug(f"request.start {request.method} {request.path} [{request_id}]")
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info(f"request.end {request.method} {request.path} {exc.status} {elapsed_ms:.1f}ms [{request_id}]")
        raise
    except Exception:
        logger.exception(f"request.error {request.method} {request.path} [{request_id}]")
        raise

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    logger.info(f"request.end {request.method} {request.path} {response.status} {elapsed_ms:.1f}ms [{request_id}]")
    return response


async def attach_request_id(request: web.Request, response: web.StreamResponse) -> None:
    """on_response_prepare hook; works for streamed responses too."""
    request_id = request.get(REQUEST_ID_KEY)
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id


def json_error(message: str, status: int) -> web.Response:
    return web.json_response({'error': message}, status=status)


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Render gateway errors as JSON `{"error": ...}` responses."""
    try:
        return await handler(request)
    except GatewayError as e:
        return json_error(e.message, e.status)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unhandled error on {request.path}")
        return json_error(str(e) or e.__class__.__name__, 500)


def plain_text_errors(handler: Handler) -> Handler:
    """Render errors of a handler as plain text instead of JSON."""
    @functools.wraps(handler)
    async def wrapper(request: web.Request) -> web.StreamResponse:
        try:
            return await handler(request)
        except GatewayError as e:
            return web.Response(text=e.message, status=e.status)
        except web.HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Unhandled error on {request.path}")
            return web.Response(text=f"Server error: {e}", status=500)
    return wrapper
