from fastapi import APIRouter, Request
from gamestorage_lib.services.resolver import resolve_optional_service
from .health import get_health

router = APIRouter()


@router.get('/health')
async def api_health(request: Request):
    backend = resolve_optional_service(request, 'document_backend')
    return get_health(backend=backend, server_name=getattr(request.app.state, 'server_name', None))
