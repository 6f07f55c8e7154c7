"""HTTP routes for the document storage.

The key of a document is built from the `prefix` and `suffix` path
parameters as ``prefix + '|' + suffix``; '|' may not appear in either.
The prefix/suffix mechanism lets different assets use the same identifier,
e.g. asset A stores under ``/A/key`` and asset B under ``/B/key``.

Storage errors are not handled here: they propagate to the application's
`StorageError` handler which turns them into ``{"message": ...}`` responses.
"""
from fastapi import APIRouter, Body, Request
from starlette.concurrency import run_in_threadpool
from starlette.responses import Response

from gamestorage_lib.services.resolver import resolve_service
from gamestorage_lib.storage.errors import MissingKeyComponent
from gamestorage_lib.storage.interfaces import DocumentStorageProtocol

import logging
router = APIRouter()
logger = logging.getLogger(__name__)

SUCCESS = {'message': 'Success.'}


def _storage(request: Request) -> DocumentStorageProtocol:
    return resolve_service(request, 'document_storage')


def _validate_params(prefix: str, suffix: str) -> None:
    if not prefix:
        raise MissingKeyComponent('prefix')
    if not suffix:
        raise MissingKeyComponent('suffix')


@router.get('/{prefix}/{suffix}')
async def api_document_get(request: Request, prefix: str, suffix: str):
    """Return the document, or an empty body if there is none."""
    _validate_params(prefix, suffix)
    storage = _storage(request)
    document = await run_in_threadpool(storage.get, prefix, suffix)
    if document is None:
        logger.debug("No document for %s|%s", prefix, suffix)
        return Response(content=b'', media_type='application/json')
    return document


@router.post('/update/{prefix}/{suffix}')
async def api_document_update_fields(request: Request, prefix: str, suffix: str, payload: dict = Body(default={})):
    """Update fields of an existing document. Dot notation is supported."""
    _validate_params(prefix, suffix)
    storage = _storage(request)
    await run_in_threadpool(storage.update_fields, prefix, suffix, payload)
    return SUCCESS


@router.post('/{prefix}/{suffix}')
async def api_document_create(request: Request, prefix: str, suffix: str, payload: dict = Body(default={})):
    _validate_params(prefix, suffix)
    storage = _storage(request)
    await run_in_threadpool(storage.create, prefix, suffix, payload)
    return SUCCESS


@router.put('/{prefix}/{suffix}')
async def api_document_update_and_set(request: Request, prefix: str, suffix: str, payload: dict = Body(default={})):
    """Create the document, or override all its values if it exists."""
    _validate_params(prefix, suffix)
    storage = _storage(request)
    await run_in_threadpool(storage.update_and_set, prefix, suffix, payload)
    return SUCCESS


@router.patch('/{prefix}/{suffix}')
async def api_document_update(request: Request, prefix: str, suffix: str, payload: dict = Body(default={})):
    """Replace an existing document; fails if there is none."""
    _validate_params(prefix, suffix)
    storage = _storage(request)
    await run_in_threadpool(storage.update, prefix, suffix, payload)
    return SUCCESS


@router.delete('/{prefix}/{suffix}')
async def api_document_delete(request: Request, prefix: str, suffix: str):
    _validate_params(prefix, suffix)
    storage = _storage(request)
    await run_in_threadpool(storage.delete, prefix, suffix)
    return SUCCESS
