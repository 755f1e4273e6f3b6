"""HTTP application factory.

Functions:
    create_app(config: Config, dao: URLBaseDAO, tokens: TokenService | None = None,
               pipeline: DeletionPipeline | None = None, rpc_server: grpc.Server | None = None) -> FastAPI
        Build the FastAPI application serving the short URL API.

Middleware chain (outermost first):
    RecoveryMiddleware -> GZipMiddleware (responses) -> routing (GzipRoute decompresses requests)

Example:
    >>> from fastapi.testclient import TestClient
    >>> from shortener.dao import URLMemoryDAO
    >>> from shortener.utils.config import Config
    >>> app = create_app(Config(file_storage_path=''), URLMemoryDAO())
    >>> with TestClient(app) as client:
    ...     client.post('/', content='https://go.dev/', headers={'Content-Type': 'text/plain'}).text
    'http://0.0.0.0:8080/YBbxJEcQ9vq'
"""

import logging
from contextlib import asynccontextmanager

import grpc
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortener import __version__
from shortener.auth import TokenService
from shortener.dao.base import URLBaseDAO
from shortener.deletion import DeletionPipeline
from shortener.utils.config import Config
from shortener.api.negotiation import RecoveryMiddleware
from shortener.api.responses import text_error
from shortener.api.routes import ping, redirect_url, shorten_url, stats, user_urls
from shortener.api.constants import INVALID_BODY, INVALID_METHOD, ROUTE_NOT_FOUND


logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    # Clients expect 400 instead of 405 for unsupported methods
    if exc.status_code == 405:
        return text_error(400, f'bad method: {request.method}', 'invalid request', event=INVALID_METHOD, extra={'path': request.url.path})
    if exc.status_code == 404:
        return text_error(404, 'not found', event=ROUTE_NOT_FOUND, extra={'path': request.url.path})
    # Raised by auth dependencies which already logged the outcome
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
    return text_error(400, 'invalid request', str(exc.errors()), event=INVALID_BODY, extra={'path': request.url.path})


def create_app(
    config: Config,
    dao: URLBaseDAO,
    tokens: TokenService | None = None,
    pipeline: DeletionPipeline | None = None,
    rpc_server: grpc.Server | None = None,
) -> FastAPI:
    """Build the application

    The lifespan starts the deletion pipeline, then the RPC server if one is
    given. On shutdown it stops the RPC server (in-flight calls get the shutdown
    timeout as grace period), waits up to the shutdown timeout for pending
    deletions to drain, then closes the data store.

    Args:
        config (Config): service configuration
        dao (URLBaseDAO): data store backend
        tokens (TokenService | None): defaults to one built from config.jwt_*
        pipeline (DeletionPipeline | None): defaults to one built from config.delete_*
        rpc_server (grpc.Server | None): unstarted gRPC server sharing the store, tokens and pipeline

    Returns:
        FastAPI: ASGI application
    """
    tokens = tokens or TokenService(config.jwt_signing_key, config.jwt_expiration)
    pipeline = pipeline or DeletionPipeline(
        dao,
        buffer_length=config.delete_buffer_length,
        flush_interval=config.delete_flush_interval,
        shutdown_timeout=config.shutdown_timeout,
    )

    def stop_rpc_server() -> None:
        rpc_server.stop(grace=config.shutdown_timeout).wait()
        logger.info('RPC server stopped.', extra={'event': 'RPC_SERVER_STOPPED'})

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pipeline.start()
        if rpc_server is not None:
            rpc_server.start()
            logger.info('RPC server started.', extra={'event': 'RPC_SERVER_STARTED'})
        try:
            yield
        finally:
            if rpc_server is not None:
                await run_in_threadpool(stop_rpc_server)
            await run_in_threadpool(pipeline.stop)
            await run_in_threadpool(dao.close)
            logger.info('Application shut down.', extra={'event': 'APPLICATION_SHUTDOWN'})

    app = FastAPI(
        title='shortener',
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = config
    app.state.dao = dao
    app.state.tokens = tokens
    app.state.pipeline = pipeline
    app.state.rpc_server = rpc_server

    app.add_middleware(GZipMiddleware, minimum_size=config.gzip_min_length)
    app.add_middleware(RecoveryMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(ping.router)
    app.include_router(stats.router)
    app.include_router(shorten_url.router)
    app.include_router(user_urls.router)
    # Catch-all `/{short_key}` goes last
    app.include_router(redirect_url.router)

    return app
