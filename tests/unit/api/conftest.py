import time
import ipaddress

import pytest
from fastapi.testclient import TestClient

from shortener.api import create_app
from shortener.auth import TokenService
from shortener.constants import AUTH_COOKIE_NAME
from shortener.dao import URLMemoryDAO
from shortener.deletion import DeletionPipeline
from shortener.utils.config import Config


SIGNING_KEY = 'api-test-signing-key-with-32-bytes!!'
BASE = 'localhost:8080'


@pytest.fixture
def config() -> Config:
    return Config(
        return_address=BASE,
        file_storage_path='',
        jwt_signing_key=SIGNING_KEY,
        trusted_subnet=ipaddress.ip_network('192.168.1.0/24'),
        delete_flush_interval=0.05,
        shutdown_timeout=5.0,
    )


@pytest.fixture
def dao() -> URLMemoryDAO:
    return URLMemoryDAO()


@pytest.fixture
def tokens(config) -> TokenService:
    return TokenService(config.jwt_signing_key, config.jwt_expiration)


@pytest.fixture
def pipeline(config, dao) -> DeletionPipeline:
    return DeletionPipeline(dao, buffer_length=config.delete_buffer_length, flush_interval=config.delete_flush_interval)


@pytest.fixture
def app(config, dao, tokens, pipeline):
    return create_app(config, dao, tokens=tokens, pipeline=pipeline)


@pytest.fixture
def client(app):
    with TestClient(app) as _client:
        yield _client


@pytest.fixture
def login(client, tokens):
    """Authenticate the test client as the given user."""

    def _login(user_id: str) -> None:
        client.cookies.set(AUTH_COOKIE_NAME, tokens.issue(user_id))

    return _login


@pytest.fixture
def wait_for():
    """Poll a predicate until it holds or the timeout expires."""

    def _wait_for(predicate, timeout=2.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return _wait_for
