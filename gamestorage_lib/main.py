"""Application factory for the game storage FastAPI app.

This module exposes `create_app(config: Config) -> FastAPI` which performs
all heavy setup (logging, backend/facade composition, middleware and router
registration). Avoids performing side-effects at import time so tests can
construct isolated apps.

To create an app for production or local runs:

    from gamestorage_lib.main import create_app, Config
    app = create_app(Config())

Note: we intentionally do not create a global `app` at import time.
"""
from contextlib import asynccontextmanager
from dataclasses import dataclass, fields
import logging
import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gamestorage_lib.logging_config import configure_logging
from gamestorage_lib.setup import has_feature_flag
from gamestorage_lib.storage import (
    RETRY_INTERVAL,
    DocumentBackend,
    DocumentStorage,
    StorageClientError,
    StorageError,
    create_backend,
)

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "GAMESTORAGE_DATA_DIR"
PASSWORD_ENV = "GAMESTORAGE_PASSWORD"


@dataclass
class Config:
    data_dir: str = "data"
    storage_backend: str = "file"
    serializer: str = "json"
    collection: str = "documents"
    # Only used by the 'encrypted' serializer
    password: Optional[str] = None
    retry_interval: float = RETRY_INTERVAL
    api_path: str = "/api"
    server_name: Optional[str] = None
    log_level: Optional[str] = None
    # If None, check feature-flag at runtime via has_feature_flag
    enable_brotli: Optional[bool] = None

    @classmethod
    def from_server_config(cls, cfg: Mapping[str, Any], env: Optional[Mapping[str, str]] = None) -> "Config":
        """Build a Config from the YAML server config plus environment overrides."""
        env = os.environ if env is None else env
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in cfg.items() if k in known and v is not None}
        if env.get(DATA_DIR_ENV):
            values["data_dir"] = env[DATA_DIR_ENV]
        if env.get(PASSWORD_ENV):
            values["password"] = env[PASSWORD_ENV]
        return cls(**values)


def build_backend(config: Config) -> DocumentBackend:
    return create_backend(
        backend=config.storage_backend,
        serializer=config.serializer,
        data_dir=config.data_dir,
        collection=config.collection,
        password=config.password,
        retry_interval=config.retry_interval,
    )


def create_app(config: Config, config_path: Optional[Path] = None, backend: Optional[DocumentBackend] = None) -> FastAPI:
    """Create and return a configured FastAPI application.

    The backend starts connecting right away, in the background; requests
    arriving before it is connected get a 500 'not available' answer.
    Pass `backend` to inject a prebuilt one (tests).
    """
    app_logger = configure_logging(config_path, level=config.log_level)

    # Compose storage
    if backend is None:
        backend = build_backend(config)
    backend.start()
    document_storage = DocumentStorage(backend)

    # Register composed services on a minimal container. Routes resolve
    # them via `resolve_service(request, name)`.
    from gamestorage_lib.services import ServiceContainer

    container = ServiceContainer()
    container.register_singleton("document_backend", backend)
    container.register_singleton("document_storage", document_storage)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        backend.close()

    app = FastAPI(title="Game Storage Server", lifespan=lifespan)
    app.state.container = container
    app.state.server_name = config.server_name

    # Add Brotli compression middleware if enabled via config or feature flag
    enable_brotli = config.enable_brotli if config.enable_brotli is not None else has_feature_flag('gamestorage_use_brotli')
    if enable_brotli:
        app_logger.info("Brotli compression middleware is enabled")
        from gamestorage_lib.middleware import BrotliCompression
        app.add_middleware(BrotliCompression)

    # Exception handlers
    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        if isinstance(exc, StorageClientError):
            logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
        else:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
        return JSONResponse({'message': exc.message}, status_code=exc.status)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        problems = []
        for err in exc.errors():
            loc = '.'.join(str(part) for part in err.get('loc', ()))
            problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get('msg')))
        message = 'Invalid request.'
        if problems:
            message += ' ' + '; '.join(problems)
        return JSONResponse({'message': message}, status_code=422)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return JSONResponse({'message': message}, status_code=exc.status_code, headers=getattr(exc, 'headers', None))

    # Router registration: import routers here to avoid import-time side-effects
    from gamestorage_lib.documents.api import router as documents_router
    from gamestorage_lib.server.api import router as server_router

    api_path = config.api_path.rstrip('/')
    app.include_router(documents_router, prefix=f'{api_path}/storage')
    app.include_router(documents_router, prefix=f'{api_path}/usermodel')
    app.include_router(server_router, prefix=api_path)

    return app


def clean_documents(
    config: Config,
    assume_yes: bool = False,
    input_fn: Callable[[str], str] = input,
    timeout: float = 30.0,
    backend: Optional[DocumentBackend] = None,
) -> int:
    """Delete every stored document. Returns a process exit code."""
    if not assume_yes:
        answer = input_fn(f"Delete ALL documents in '{config.collection}'? [y/N]: ")
        if answer.strip().lower() not in ('y', 'yes'):
            print("Aborted.")
            return 1

    if backend is None:
        backend = build_backend(config)
    backend.start()
    try:
        if not backend.wait_until_connected(timeout):
            print(f"Document store not reachable after {timeout}s")
            return 2
        DocumentStorage(backend).clean()
    except StorageError as e:
        print(f"Clean failed: {e.message}")
        return 1
    finally:
        backend.close()
    print("All documents deleted.")
    return 0
