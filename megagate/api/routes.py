"""HTTP routes."""
import json
import logging
from typing import Any, Dict

from aiohttp import web

from ..core.auth import extract_token
from ..core.exceptions import ValidationError, BackendError, GatewayError
from ..core.nodes import (
    ListingProjector,
    resolve_folder,
    resolve_file,
    resolve_upload_target,
)
from ..core.transfer import DownloadStreamer, UploadStreamer, staged_upload
from .keys import CONFIG_KEY, BROKER_KEY, SESSIONS_KEY
from .middleware import plain_text_errors

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


async def _json_body(request: web.Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError("Invalid JSON body")
    return body if isinstance(body, dict) else {}


@routes.get('/health')
async def health(request: web.Request) -> web.Response:
    return web.json_response({'ok': True})


@routes.post('/api/login')
async def login(request: web.Request) -> web.Response:
    """Verify storage credentials and issue a token."""
    body = await _json_body(request)
    email = body.get('email')
    password = body.get('password')
    if not email or not password:
        raise ValidationError("Email and password are required")

    result = await request.app[BROKER_KEY].issue(str(email), str(password))
    return web.json_response(result.to_dict())


@routes.post('/api/logout')
async def logout(request: web.Request) -> web.Response:
    """Revoke the token used for this request."""
    broker = request.app[BROKER_KEY]
    broker.authenticate(request)
    broker.revoke(extract_token(request.headers, request.query))
    return web.json_response({'success': True})


@routes.get('/api/files')
async def list_files(request: web.Request) -> web.Response:
    """List the files and folders of a folder (root by default)."""
    credentials = request.app[BROKER_KEY].authenticate(request)
    folder_id = request.query.get('folderId', '')

    async with request.app[SESSIONS_KEY].session(credentials) as session:
        folder = await resolve_folder(session, folder_id)
        listing = await ListingProjector().project(session, folder)

    return web.json_response(listing.to_dict())


@routes.get('/api/download/{file_id}')
@plain_text_errors
async def download(request: web.Request) -> web.StreamResponse:
    """Stream a file to the client."""
    credentials = request.app[BROKER_KEY].authenticate(request)
    streamer = DownloadStreamer(request.app[CONFIG_KEY].timeouts)

    async with request.app[SESSIONS_KEY].session(credentials) as session:
        node = await resolve_file(session, request.match_info['file_id'])
        return await streamer.stream_down(session, node, request)


@routes.post('/api/folder')
async def create_folder(request: web.Request) -> web.Response:
    """Create a folder under parentId (root by default)."""
    credentials = request.app[BROKER_KEY].authenticate(request)
    body = await _json_body(request)
    name = str(body.get('name') or '').strip()
    if not name:
        raise ValidationError("Folder name is required")
    parent_id = str(body.get('parentId') or '')

    async with request.app[SESSIONS_KEY].session(credentials) as session:
        parent = await resolve_folder(
            session,
            parent_id,
            missing_message="Parent folder not found",
            not_folder_message="Parent is not a folder"
        )
        try:
            folder = await session.mkdir(parent, name)
        except GatewayError:
            raise
        except Exception as e:
            logger.error(f"Error creating folder {name}: {e}")
            raise BackendError(str(e)) from e

    return web.json_response({
        'success': True,
        'message': f'Folder "{name}" created successfully',
        'folder': {
            'name': folder.name,
            'id': folder.node_id,
            'type': 'folder',
        }
    })


@routes.post('/upload')
@plain_text_errors
async def upload(request: web.Request) -> web.Response:
    """Receive a multipart upload and send it to storage."""
    # Authenticate before reading a potentially large body
    credentials = request.app[BROKER_KEY].authenticate(request)
    config = request.app[CONFIG_KEY]

    async with staged_upload(request, config.upload) as staged:
        async with request.app[SESSIONS_KEY].session(credentials) as session:
            target = await resolve_upload_target(session, staged.folder_id)
            await UploadStreamer().stream_up(session, target, staged.filename, staged)

    logger.info(f"File uploaded successfully: {staged.filename}")
    return web.Response(text=f'File "{staged.filename}" uploaded successfully!')
