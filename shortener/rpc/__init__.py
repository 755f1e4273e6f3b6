from shortener.rpc.client import ShortenerStub
from shortener.rpc.server import create_rpc_server, load_server_credentials
from shortener.rpc.service import ShortenerService


__all__ = ['ShortenerStub', 'ShortenerService', 'create_rpc_server', 'load_server_credentials']
