"""gRPC server factory.

Functions:
    create_rpc_server(config, dao, tokens, pipeline, credentials=None, max_workers=10) -> tuple[grpc.Server, int]
        Build an unstarted gRPC server for `shortener.v1.Shortener` on config.rpc_address, with its bound port.

    load_server_credentials(cert_path: str, key_path: str) -> grpc.ServerCredentials
        Read a PEM certificate and key into TLS credentials.

The server is returned unstarted; the HTTP application lifespan starts it and
stops it with a grace period of config.shutdown_timeout.
"""

import logging
from concurrent import futures

import grpc

from shortener.auth import TokenService
from shortener.dao.base import URLBaseDAO
from shortener.deletion import DeletionPipeline
from shortener.utils.config import Config
from shortener.rpc.messages import SERVICE_NAME
from shortener.rpc.service import ShortenerService


logger = logging.getLogger(__name__)


def load_server_credentials(cert_path: str, key_path: str) -> grpc.ServerCredentials:
    with open(key_path, 'rb') as key_file, open(cert_path, 'rb') as cert_file:
        return grpc.ssl_server_credentials([(key_file.read(), cert_file.read())])


def create_rpc_server(
    config: Config,
    dao: URLBaseDAO,
    tokens: TokenService,
    pipeline: DeletionPipeline,
    credentials: grpc.ServerCredentials | None = None,
    max_workers: int = 10,
) -> tuple[grpc.Server, int]:
    """Build the gRPC server

    Args:
        config (Config): service configuration, config.rpc_address is bound
        dao (URLBaseDAO): data store shared with the HTTP application
        tokens (TokenService): token service shared with the HTTP application
        pipeline (DeletionPipeline): deletion pipeline shared with the HTTP application
        credentials (grpc.ServerCredentials | None): TLS credentials, plaintext when None
        max_workers (int): size of the handler thread pool

    Returns:
        tuple[grpc.Server, int]: unstarted server and its bound port (address port 0 picks a free one)

    Raises:
        RuntimeError: if the address can't be bound
    """
    service = ShortenerService(config, dao, tokens, pipeline)
    server = grpc.server(futures.ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='rpc'))
    server.add_generic_rpc_handlers((grpc.method_handlers_generic_handler(SERVICE_NAME, service.method_handlers()),))

    if credentials is None:
        port = server.add_insecure_port(config.rpc_address)
    else:
        port = server.add_secure_port(config.rpc_address, credentials)
    if port == 0:
        raise RuntimeError(f'Failed to bind RPC server to {config.rpc_address}.')

    logger.info(
        'RPC server bound.',
        extra={'rpc_address': config.rpc_address, 'port': port, 'tls': credentials is not None, 'event': 'RPC_SERVER_BOUND'},
    )
    return server, port
