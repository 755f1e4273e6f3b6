"""Unit tests for request negotiation

Test coverage includes:

1. Gzip request bodies
   - Compressed bodies are decompressed for text and JSON routes.
   - Broken gzip streams answer 400.

2. Gzip responses
   - Large responses are compressed when the client accepts gzip.
   - Small responses are sent as is.

3. Routing errors
   - Unsupported methods answer 400 instead of 405.
   - Unknown multi-segment paths answer 404.
   - Unhandled exceptions answer 500 'internal server error'.

4. Helpers
   - is_text_plain() and is_json() media type checks.
"""

import gzip
import json
from unittest.mock import MagicMock

import pytest

from shortener.api.negotiation import is_json, is_text_plain
from shortener.dao.base import URLBaseDAO


# -------------------------------
# 1. Gzip request bodies
# -------------------------------


def test_gzip_text_body(client):
    response = client.post(
        '/',
        content=gzip.compress(b'https://go.dev/'),
        headers={'Content-Type': 'text/plain', 'Content-Encoding': 'gzip'},
    )

    assert response.status_code == 201
    assert response.text == 'http://localhost:8080/YBbxJEcQ9vq'


def test_gzip_text_body_any_content_type(client):
    response = client.post(
        '/',
        content=gzip.compress(b'https://go.dev/'),
        headers={'Content-Type': 'application/x-gzip', 'Content-Encoding': 'gzip'},
    )
    assert response.status_code == 201


def test_gzip_json_body(client):
    response = client.post(
        '/api/shorten',
        content=gzip.compress(json.dumps({'url': 'https://go.dev/'}).encode()),
        headers={'Content-Type': 'application/json', 'Content-Encoding': 'gzip'},
    )

    assert response.status_code == 201
    assert response.json()['result'] == 'http://localhost:8080/YBbxJEcQ9vq'


@pytest.mark.parametrize('path,content_type', [('/', 'text/plain'), ('/api/shorten', 'application/json'), ('/api/shorten/batch', 'application/json')])
def test_broken_gzip_body(client, dao, path, content_type):
    response = client.post(path, content=b'definitely not gzip', headers={'Content-Type': content_type, 'Content-Encoding': 'gzip'})

    assert response.status_code == 400
    assert dao.count_urls() == 0


# -------------------------------
# 2. Gzip responses
# -------------------------------


def test_large_response_compressed(client):
    batch = [{'correlation_id': str(i), 'original_url': f'https://example.com/page/{i}'} for i in range(30)]

    response = client.post(
        '/api/shorten/batch',
        content=json.dumps(batch),
        headers={'Content-Type': 'application/json', 'Accept-Encoding': 'gzip'},
    )

    assert response.status_code == 201
    assert response.headers['content-encoding'] == 'gzip'
    assert len(response.json()) == 30


def test_small_response_not_compressed(client):
    response = client.post('/', content='https://go.dev/', headers={'Content-Type': 'text/plain', 'Accept-Encoding': 'gzip'})

    assert response.status_code == 201
    assert 'content-encoding' not in response.headers


def test_response_not_compressed_without_accept_encoding(client):
    batch = [{'correlation_id': str(i), 'original_url': f'https://example.com/page/{i}'} for i in range(30)]

    response = client.post(
        '/api/shorten/batch',
        content=json.dumps(batch),
        headers={'Content-Type': 'application/json', 'Accept-Encoding': 'identity'},
    )

    assert response.status_code == 201
    assert 'content-encoding' not in response.headers


# -------------------------------
# 3. Routing errors
# -------------------------------


@pytest.mark.parametrize('method,path', [('GET', '/'), ('GET', '/api/shorten'), ('PUT', '/YBbxJEcQ9vq'), ('POST', '/ping')])
def test_bad_method(client, method, path):
    response = client.request(method, path)

    assert response.status_code == 400
    assert response.text == f'bad method: {method}: invalid request'


def test_unknown_path(client):
    response = client.get('/no/such/route')

    assert response.status_code == 404
    assert response.text == 'not found'


def test_unhandled_exception(app, client):
    app.state.dao = MagicMock(spec=URLBaseDAO)
    app.state.dao.save.side_effect = RuntimeError('boom')

    response = client.post('/', content='https://go.dev/', headers={'Content-Type': 'text/plain'})

    assert response.status_code == 500
    assert response.text == 'internal server error'


# -------------------------------
# 4. Helpers
# -------------------------------


@pytest.mark.parametrize(
    'content_type,expected',
    [
        ('text/plain', True),
        ('text/plain; charset=utf-8', True),
        (' Text/Plain ;charset=windows-1251', True),
        ('text/html', False),
        ('application/json', False),
        ('', False),
    ],
)
def test_is_text_plain(content_type, expected):
    assert is_text_plain(content_type) is expected


@pytest.mark.parametrize(
    'content_type,expected',
    [
        ('application/json', True),
        (' APPLICATION/JSON ', True),
        ('application/json; charset=utf-8', False),
        ('text/plain', False),
        ('', False),
    ],
)
def test_is_json(content_type, expected):
    assert is_json(content_type) is expected
