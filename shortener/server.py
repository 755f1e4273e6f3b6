"""Service entry point.

Startup sequence:
    1- Load configuration (defaults < config file < flags < environment)
    2- Initialize JSON logging
    3- Build the URL data store selected by the configuration
    4- Prepare TLS material when HTTPS is enabled
    5- Build the token service, the deletion pipeline and, when enabled, the gRPC server
    6- Serve HTTP with uvicorn (optionally over TLS) until SIGINT/SIGTERM; the
       application lifespan runs the gRPC server alongside

On shutdown uvicorn waits up to `shutdown_timeout` for in-flight requests,
then the application lifespan stops the gRPC server, drains the deletion
pipeline and closes the store.

Exit codes:
    0: graceful shutdown
    1: invalid configuration, data store, TLS or RPC server initialization failure
"""

import logging

import uvicorn

from shortener.api import create_app
from shortener.auth import TokenService
from shortener.dao import url_dao_from_config
from shortener.dao.exceptions import DataStoreError
from shortener.deletion import DeletionPipeline
from shortener.exceptions import ConfigurationError
from shortener.rpc import create_rpc_server, load_server_credentials
from shortener.utils import ensure_certificate, initialize_logging, load_config


logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    # 1- Load configuration
    try:
        config = load_config(argv)
    except ConfigurationError as e:
        initialize_logging()
        logger.error('Invalid configuration. Exiting.', extra={'cause': str(e), 'event': e.error_code})
        return 1

    # 2- Initialize logging
    initialize_logging(config.log_level)
    logger.info(
        'Starting shortener.',
        extra={'run_address': config.run_address, 'rpc_address': config.rpc_address if config.enable_rpc else None, 'return_address': config.return_address, 'enable_https': config.enable_https},
    )

    # 3- Build data store
    try:
        dao = url_dao_from_config(dsn=config.dsn, file_storage_path=config.file_storage_path)
    except DataStoreError:
        logger.exception('Failed to initialize URL storage. Exiting.', extra={'event': 'DATA_STORE_INIT_FAILED'})
        return 1

    # 4- TLS material
    ssl_options = {}
    if config.enable_https:
        try:
            cert_path, key_path = ensure_certificate(config.tls_cert_path, config.tls_key_path)
        except (ConfigurationError, OSError) as e:
            logger.error('Failed to prepare TLS certificate. Exiting.', extra={'cause': str(e), 'event': 'TLS_SETUP_FAILED'})
            dao.close()
            return 1
        ssl_options = {'ssl_certfile': cert_path, 'ssl_keyfile': key_path}

    # 5- Shared services and the optional RPC server
    tokens = TokenService(config.jwt_signing_key, config.jwt_expiration)
    pipeline = DeletionPipeline(
        dao,
        buffer_length=config.delete_buffer_length,
        flush_interval=config.delete_flush_interval,
        shutdown_timeout=config.shutdown_timeout,
    )
    rpc_server = None
    if config.enable_rpc:
        try:
            credentials = load_server_credentials(cert_path, key_path) if config.enable_https else None
            rpc_server, _ = create_rpc_server(config, dao, tokens, pipeline, credentials)
        except (RuntimeError, OSError) as e:
            logger.error('Failed to set up RPC server. Exiting.', extra={'cause': str(e), 'event': 'RPC_SETUP_FAILED'})
            dao.close()
            return 1

    # 6- Serve until interrupted
    app = create_app(config, dao, tokens, pipeline, rpc_server=rpc_server)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_config=None,
        timeout_graceful_shutdown=config.shutdown_timeout,
        **ssl_options,
    )
    logger.info('Shortener stopped.')
    return 0
