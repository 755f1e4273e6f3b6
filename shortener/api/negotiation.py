"""Request negotiation: body decompression, content type checks and panic recovery.

Classes:
    GzipRequest:
        Request whose body is transparently gunzipped when 'Content-Encoding: gzip' is set.

    GzipRoute:
        APIRoute handing GzipRequest instances to dependencies and endpoints.

    RecoveryMiddleware:
        ASGI middleware turning unhandled exceptions into a logged 500 response.

Functions:
    is_text_plain(content_type: str) -> bool
    is_json(content_type: str) -> bool

NOTE:
    Response compression is handled by Starlette's GZipMiddleware, installed in
    `shortener.api.app.create_app()`.
"""

import gzip
import zlib
import logging
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from fastapi.routing import APIRoute
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from shortener.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from shortener.exceptions import ShortenerError


logger = logging.getLogger(__name__)


class BadRequestBodyError(ShortenerError):
    """Raised when a request body can't be decoded (e.g. broken gzip stream)."""

    error_code = 'http:bad_request_body'


class GzipRequest(Request):
    async def body(self) -> bytes:
        if not hasattr(self, '_body'):
            body = await super().body()
            encodings = [e.strip().lower() for e in self.headers.get('content-encoding', '').split(',')]
            if 'gzip' in encodings:
                try:
                    body = gzip.decompress(body)
                except (OSError, EOFError, zlib.error) as e:
                    raise BadRequestBodyError(f'failed to decompress gzip body: {e}') from e
            self._body = body
        return self._body


class GzipRoute(APIRoute):
    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            request = GzipRequest(request.scope, request.receive)
            return await original_route_handler(request)

        return custom_route_handler


def _media_type(content_type: str) -> str:
    return content_type.split(';', 1)[0].strip().lower()


def is_text_plain(content_type: str) -> bool:
    """'text/plain' with any parameters (e.g. charset)."""
    return _media_type(content_type) == 'text/plain'


def is_json(content_type: str) -> bool:
    """Exactly 'application/json' (case-insensitive, surrounding spaces ignored)."""
    return content_type.strip().lower() == 'application/json'


class RecoveryMiddleware:
    """Last line of defense: log the stack trace and answer 500

    If the response has already started, the exception is re-raised to let
    the server abort the connection.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope['type'] != 'http':
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message['type'] == 'http.response.start':
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            logger.exception(
                'Unhandled exception while serving request. Responding with 500.',
                extra={'method': scope.get('method'), 'path': scope.get('path'), 'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            if response_started:
                raise
            response = PlainTextResponse('internal server error', status_code=500)
            await response(scope, receive, send)
