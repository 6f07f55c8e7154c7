import logging

import brotli
from starlette.datastructures import MutableHeaders
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


#############################################
## Brotli compression middleware
## Compresses JSON/text response bodies when the client accepts 'br'.
#############################################
class BrotliCompression(BaseHTTPMiddleware):
    def __init__(self, app, minimum_size: int = 300, quality: int = 4):
        super().__init__(app)
        self.minimum_size = minimum_size
        self.quality = quality

    @staticmethod
    def _compressible(content_type: str) -> bool:
        return 'application/json' in content_type or content_type.startswith('text/')

    async def dispatch(self, request: Request, call_next):
        accept_encoding = request.headers.get('accept-encoding', '')
        if 'br' not in accept_encoding.lower():
            return await call_next(request)

        response = await call_next(request)

        # Already encoded or not a type worth compressing: pass through untouched
        if response.headers.get('content-encoding') or not self._compressible(response.headers.get('content-type', '')):
            return response

        body = b''.join([chunk async for chunk in response.body_iterator])
        # Work on the raw header list so repeated headers (set-cookie) survive
        headers = MutableHeaders(raw=[(k, v) for k, v in response.raw_headers if k.lower() != b'content-length'])

        if len(body) >= self.minimum_size:
            try:
                body = brotli.compress(body, quality=self.quality)
                headers['content-encoding'] = 'br'
                headers.add_vary_header('Accept-Encoding')
            except brotli.error:
                logger.warning("Brotli compression failed; sending uncompressed response")

        headers['content-length'] = str(len(body))
        compressed = Response(content=body, status_code=response.status_code, background=getattr(response, 'background', None))
        compressed.raw_headers = headers.raw
        return compressed
