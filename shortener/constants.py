import os
import tempfile
from enum import StrEnum


class Defaults:
    """Default configuration values."""

    ADDRESS = '0.0.0.0:8080'
    RPC_ADDRESS = '0.0.0.0:3200'
    HOST = '0.0.0.0'
    FILE_STORAGE_PATH = os.path.join(tempfile.gettempdir(), 'short-url-db.json')
    LOG_LEVEL = 'info'
    JWT_EXPIRATION = 86_400.0  # 24h
    SHUTDOWN_TIMEOUT = 30.0
    DELETE_BUFFER_LENGTH = 5
    DELETE_FLUSH_INTERVAL = 10.0
    GZIP_MIN_LENGTH = 1024


class ENV(StrEnum):
    """Environment variable names."""

    CONFIG = 'CONFIG'
    SERVER_ADDRESS = 'SERVER_ADDRESS'
    BASE_URL = 'BASE_URL'
    FILE_STORAGE_PATH = 'FILE_STORAGE_PATH'
    DATABASE_DSN = 'DATABASE_DSN'
    LOG_LEVEL = 'LOG_LEVEL'
    ENABLE_HTTPS = 'ENABLE_HTTPS'
    ENABLE_RPC = 'ENABLE_RPC'
    RPC_ADDRESS = 'RPC_ADDRESS'
    TRUSTED_SUBNET = 'TRUSTED_SUBNET'
    JWT_SIGNING_KEY = 'JWT_SIGNING_KEY'  # noqa: S105
    JWT_EXPIRATION = 'JWT_EXPIRATION'
    SHUTDOWN_TIMEOUT = 'SHUTDOWN_TIMEOUT'
    TLS_CERT_PATH = 'TLS_CERT_PATH'
    TLS_KEY_PATH = 'TLS_KEY_PATH'


# Authorization cookie
AUTH_COOKIE_NAME = 'Authorization'
BEARER_PREFIX = 'Bearer '

# Client address header consulted by the trusted subnet gate
REAL_IP_HEADER = 'X-Real-IP'

# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
