"""Unit tests for GET /ping

Test coverage includes:

1. Backends without a database answer 500 'database not connected'.
2. A reachable database answers 200 with an empty body.
3. Data store failures answer 500 with the cause.
"""

from unittest.mock import MagicMock

from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import DataStoreError


def test_ping_memory_backend(client):
    response = client.get('/ping')

    assert response.status_code == 500
    assert response.text == 'failed to ping database: database not connected'


def test_ping_database_reachable(app, client):
    app.state.dao = MagicMock(spec=URLBaseDAO)

    response = client.get('/ping')

    assert response.status_code == 200
    assert response.content == b''
    app.state.dao.ping.assert_called_once()


def test_ping_database_unreachable(app, client):
    app.state.dao = MagicMock(spec=URLBaseDAO)
    app.state.dao.ping.side_effect = DataStoreError('connection refused')

    response = client.get('/ping')

    assert response.status_code == 500
    assert 'connection refused' in response.text
