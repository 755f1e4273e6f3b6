"""Unit tests for the shortening endpoints

Test coverage includes:

1. POST /
   - Valid URLs are shortened with 201 and a text/plain short URL.
   - Repeated URLs answer 409 with the same short URL.
   - Anonymous callers are issued an HttpOnly Authorization cookie.
   - Known callers keep their identity.
   - URLs without a scheme are accepted.
   - Content type, empty body and invalid URLs answer 400.
   - Malformed cookies answer 500.
   - Data store failures answer 500.

2. POST /api/shorten
   - Valid payloads answer 201 {"result", "success", "message"}.
   - Repeated URLs answer 409 with the same result.
   - Content type, unparsable body, empty and invalid URLs answer 400 with a JSON error.

3. POST /api/shorten/batch
   - Output preserves input order and correlation IDs.
   - One invalid entry rejects the batch without writes.
   - Content type, unparsable and empty bodies answer 400.
   - Re-submitting shortened URLs succeeds.
"""

import json
from unittest.mock import MagicMock

import pytest

from shortener.constants import AUTH_COOKIE_NAME
from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import DataStoreError, ShortURLCollisionError, ShortURLNotFoundError
from shortener.utils import generate_shortcode


TEXT = {'Content-Type': 'text/plain; charset=utf-8'}
JSON = {'Content-Type': 'application/json'}


def cookie_token(response) -> str:
    return response.cookies[AUTH_COOKIE_NAME].strip('"')


# -------------------------------
# 1. POST /
# -------------------------------


def test_shorten_text(client, dao):
    response = client.post('/', content='https://go.dev/', headers=TEXT)

    assert response.status_code == 201
    assert response.headers['content-type'].startswith('text/plain')
    assert response.text == 'http://localhost:8080/YBbxJEcQ9vq'
    assert dao.get('YBbxJEcQ9vq').original_url == 'https://go.dev/'


def test_shorten_text_strips_whitespace(client):
    response = client.post('/', content='  https://go.dev/\n', headers=TEXT)
    assert response.status_code == 201
    assert response.text == 'http://localhost:8080/YBbxJEcQ9vq'


def test_shorten_text_conflict(client):
    first = client.post('/', content='https://go.dev/', headers=TEXT)
    second = client.post('/', content='https://go.dev/', headers=TEXT)

    assert (first.status_code, second.status_code) == (201, 409)
    assert second.text == first.text


def test_shorten_text_issues_cookie(client, tokens, dao):
    response = client.post('/', content='https://go.dev/', headers=TEXT)

    set_cookie = response.headers['set-cookie']
    assert set_cookie.startswith(f'{AUTH_COOKIE_NAME}=')
    assert 'httponly' in set_cookie.lower()
    assert 'expires=' in set_cookie.lower()

    user_id = tokens.parse(cookie_token(response))
    assert dao.get('YBbxJEcQ9vq').user_id == user_id


def test_shorten_text_keeps_identity(client, login, dao, user_id, tokens):
    login(user_id)
    response = client.post('/', content='https://go.dev/', headers=TEXT)

    assert response.status_code == 201
    assert dao.get('YBbxJEcQ9vq').user_id == user_id
    assert tokens.parse(cookie_token(response)) == user_id


@pytest.mark.parametrize('content_type', ['application/json', 'text/html', ''])
def test_shorten_text_bad_content_type(client, content_type):
    response = client.post('/', content='https://go.dev/', headers={'Content-Type': content_type})
    assert response.status_code == 400
    assert 'bad content-type' in response.text


def test_shorten_text_accepts_any_charset(client):
    response = client.post('/', content='https://go.dev/', headers={'Content-Type': 'TEXT/PLAIN; charset=windows-1251'})
    assert response.status_code == 201


@pytest.mark.parametrize('body', ['', '   ', 'not a url', '://go.dev', 'https://'])
def test_shorten_text_invalid_url(client, dao, body):
    response = client.post('/', content=body, headers=TEXT)
    assert response.status_code == 400
    assert dao.count_urls() == 0


def test_shorten_text_without_scheme(client, dao):
    response = client.post('/', content='go.dev/path', headers=TEXT)

    assert response.status_code == 201
    assert response.text == f'http://localhost:8080/{generate_shortcode("go.dev/path")}'
    assert dao.get(generate_shortcode('go.dev/path')).original_url == 'go.dev/path'


def test_shorten_text_invalid_utf8(client):
    response = client.post('/', content=b'\xff\xfe', headers=TEXT)
    assert response.status_code == 400


def test_shorten_text_malformed_cookie(client, dao):
    client.cookies.set(AUTH_COOKIE_NAME, 'Bearer not-a-token')
    response = client.post('/', content='https://go.dev/', headers=TEXT)

    assert response.status_code == 500
    assert 'failed to parse auth token' in response.text
    assert dao.count_urls() == 0


def test_shorten_text_data_store_error(app, client):
    app.state.dao = MagicMock(spec=URLBaseDAO)
    app.state.dao.save.side_effect = DataStoreError("Can't write to file storage at /tmp/db.json.")

    response = client.post('/', content='https://go.dev/', headers=TEXT)

    assert response.status_code == 500
    assert "Can't write to file storage" in response.text


def test_shorten_text_collision(app, client):
    app.state.dao = MagicMock(spec=URLBaseDAO)
    app.state.dao.save.side_effect = ShortURLCollisionError('collision')

    response = client.post('/', content='https://go.dev/', headers=TEXT)

    assert response.status_code == 409
    assert 'collision' in response.text


# -------------------------------
# 2. POST /api/shorten
# -------------------------------


def test_shorten_json(client, dao):
    response = client.post('/api/shorten', json={'url': 'https://go.dev/'})

    assert response.status_code == 201
    assert response.headers['content-type'] == 'application/json'
    assert response.json() == {'result': 'http://localhost:8080/YBbxJEcQ9vq', 'success': True, 'message': 'OK'}
    assert AUTH_COOKIE_NAME in response.cookies
    assert dao.count_urls() == 1


def test_shorten_json_conflict(client):
    first = client.post('/api/shorten', json={'url': 'https://go.dev/'})
    second = client.post('/api/shorten', json={'url': 'https://go.dev/'})

    assert (first.status_code, second.status_code) == (201, 409)
    assert second.json() == first.json()


def test_shorten_json_shares_keys_with_text_route(client):
    client.post('/', content='https://go.dev/', headers=TEXT)
    response = client.post('/api/shorten', json={'url': 'https://go.dev/'})

    assert response.status_code == 409
    assert response.json()['result'] == 'http://localhost:8080/YBbxJEcQ9vq'


@pytest.mark.parametrize('content_type', ['text/plain', 'application/json; charset=utf-8', 'application/xml'])
def test_shorten_json_bad_content_type(client, content_type):
    response = client.post('/api/shorten', content=json.dumps({'url': 'https://go.dev/'}), headers={'Content-Type': content_type})

    assert response.status_code == 400
    body = response.json()
    assert body['success'] is False
    assert body['result'] == ''
    assert body['message'].startswith('bad content-type')


def test_shorten_json_content_type_is_case_insensitive(client):
    response = client.post('/api/shorten', content=json.dumps({'url': 'https://go.dev/'}), headers={'Content-Type': ' Application/JSON '})
    assert response.status_code == 201


@pytest.mark.parametrize('body', ['{"url": ', '[]', '{"link": "https://go.dev/"}', '{"url": 42}', ''])
def test_shorten_json_unparsable_body(client, body):
    response = client.post('/api/shorten', content=body, headers=JSON)

    assert response.status_code == 400
    assert response.json()['message'].startswith('failed to decode request')


@pytest.mark.parametrize('url, message', [('', 'url field is empty'), ('not a url', 'shorten url: not a url')])
def test_shorten_json_invalid_url(client, url, message):
    response = client.post('/api/shorten', json={'url': url})

    assert response.status_code == 400
    assert response.json()['message'].startswith(message)


# -------------------------------
# 3. POST /api/shorten/batch
# -------------------------------


def test_shorten_batch(client, dao):
    payload = [
        {'correlation_id': 'b', 'original_url': 'https://example.com/b'},
        {'correlation_id': 'a', 'original_url': 'https://example.com/a'},
        {'correlation_id': 'c', 'original_url': 'https://go.dev/'},
    ]
    response = client.post('/api/shorten/batch', json=payload)

    assert response.status_code == 201
    assert response.json() == [
        {'correlation_id': 'b', 'short_url': 'http://localhost:8080/d8Qe9Ch63Wx'},
        {'correlation_id': 'a', 'short_url': 'http://localhost:8080/8fN8k3nZ3BZ'},
        {'correlation_id': 'c', 'short_url': 'http://localhost:8080/YBbxJEcQ9vq'},
    ]
    assert dao.count_urls() == 3
    assert AUTH_COOKIE_NAME in response.cookies


def test_shorten_batch_invalid_entry_writes_nothing(client, dao):
    payload = [
        {'correlation_id': 'a', 'original_url': 'https://go.dev/'},
        {'correlation_id': 'b', 'original_url': ''},
    ]
    response = client.post('/api/shorten/batch', json=payload)

    assert response.status_code == 400
    assert dao.count_urls() == 0


def test_shorten_batch_resubmission(client, dao):
    payload = [{'correlation_id': 'a', 'original_url': 'https://go.dev/'}]
    client.post('/api/shorten/batch', json=payload)
    response = client.post('/api/shorten/batch', json=payload + [{'correlation_id': 'b', 'original_url': 'https://example.com/'}])

    assert response.status_code == 201
    assert [item['correlation_id'] for item in response.json()] == ['a', 'b']
    assert dao.count_urls() == 2


@pytest.mark.parametrize(
    'body',
    [
        '',
        '[',
        '{"correlation_id": "a", "original_url": "https://go.dev/"}',
        '[{"correlation_id": "a"}]',
        '[]',
    ],
)
def test_shorten_batch_bad_body(client, body):
    response = client.post('/api/shorten/batch', content=body, headers=JSON)
    assert response.status_code == 400


def test_shorten_batch_bad_content_type(client):
    response = client.post('/api/shorten/batch', content='[]', headers=TEXT)
    assert response.status_code == 400


def test_shorten_batch_data_store_error(app, client):
    app.state.dao = MagicMock(spec=URLBaseDAO)
    app.state.dao.save_all.side_effect = DataStoreError('database down')

    response = client.post('/api/shorten/batch', json=[{'correlation_id': 'a', 'original_url': 'https://go.dev/'}])

    assert response.status_code == 500
    assert 'failed to save records' in response.text


def test_shorten_batch_lookup_after_save(client, dao):
    client.post('/api/shorten/batch', json=[{'correlation_id': 'a', 'original_url': 'https://go.dev/'}])
    with pytest.raises(ShortURLNotFoundError):
        dao.get('8fN8k3nZ3BZ')
    assert dao.get('YBbxJEcQ9vq').original_url == 'https://go.dev/'
