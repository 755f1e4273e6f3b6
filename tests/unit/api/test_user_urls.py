"""Unit tests for /api/user/urls

Test coverage includes:

1. GET
   - Lists the caller's records as full short URLs.
   - Excludes other users' and soft-deleted records.
   - Answers 204 when the caller owns nothing.
   - Answers 401 without a valid cookie.

2. DELETE
   - Answers 202 and soft-deletes the caller's keys asynchronously.
   - Leaves keys owned by others untouched.
   - Answers 400 on bad content type or body, 401 without a valid cookie.
"""

import json

import pytest
from fastapi.testclient import TestClient

from shortener.constants import AUTH_COOKIE_NAME


JSON = {'Content-Type': 'application/json'}


# -------------------------------
# 1. GET
# -------------------------------


def test_get_user_urls(client, login, dao, make_url, user_id, other_user_id):
    dao.save_all(
        [
            make_url('YBbxJEcQ9vq', 'https://go.dev/'),
            make_url('3XBG2roZ3Fi', 'https://example.com/'),
            make_url('8fN8k3nZ3BZ', 'https://example.com/a', owner=other_user_id),
        ]
    )
    login(user_id)

    response = client.get('/api/user/urls')

    assert response.status_code == 200
    assert sorted(response.json(), key=lambda item: item['short_url']) == [
        {'short_url': 'http://localhost:8080/3XBG2roZ3Fi', 'original_url': 'https://example.com/'},
        {'short_url': 'http://localhost:8080/YBbxJEcQ9vq', 'original_url': 'https://go.dev/'},
    ]


def test_get_user_urls_excludes_deleted(client, login, dao, make_url, user_id):
    dao.save_all([make_url('YBbxJEcQ9vq', 'https://go.dev/'), make_url('3XBG2roZ3Fi', 'https://example.com/')])
    dao.restore(dao.get('3XBG2roZ3Fi').deleted())
    login(user_id)

    response = client.get('/api/user/urls')

    assert response.json() == [{'short_url': 'http://localhost:8080/YBbxJEcQ9vq', 'original_url': 'https://go.dev/'}]


def test_get_user_urls_empty(client, login, user_id):
    login(user_id)
    response = client.get('/api/user/urls')

    assert response.status_code == 204
    assert response.content == b''


def test_get_user_urls_all_deleted(client, login, dao, make_url, user_id):
    dao.save(make_url().deleted())
    login(user_id)
    assert client.get('/api/user/urls').status_code == 204


def test_get_user_urls_after_shortening(client):
    client.post('/', content='https://go.dev/', headers={'Content-Type': 'text/plain'})

    response = client.get('/api/user/urls')

    assert response.status_code == 200
    assert response.json() == [{'short_url': 'http://localhost:8080/YBbxJEcQ9vq', 'original_url': 'https://go.dev/'}]


def test_get_user_urls_unauthenticated(client):
    response = client.get('/api/user/urls')
    assert response.status_code == 401


def test_get_user_urls_invalid_token(client):
    client.cookies.set(AUTH_COOKIE_NAME, 'Bearer not-a-token')
    assert client.get('/api/user/urls').status_code == 401


# -------------------------------
# 2. DELETE
# -------------------------------


def test_delete_user_urls(client, login, dao, make_url, user_id, wait_for):
    dao.save_all([make_url('YBbxJEcQ9vq', 'https://go.dev/'), make_url('3XBG2roZ3Fi', 'https://example.com/')])
    login(user_id)

    response = client.request('DELETE', '/api/user/urls', content=json.dumps(['YBbxJEcQ9vq']), headers=JSON)

    assert response.status_code == 202
    assert wait_for(lambda: dao.get('YBbxJEcQ9vq').is_deleted)
    assert dao.get('3XBG2roZ3Fi').is_deleted is False


def test_delete_user_urls_not_owner(app, client, login, dao, make_url, other_user_id):
    dao.save(make_url())
    login(other_user_id)

    response = client.request('DELETE', '/api/user/urls', content=json.dumps(['YBbxJEcQ9vq']), headers=JSON)

    assert response.status_code == 202
    app.state.pipeline.stop()
    assert dao.get('YBbxJEcQ9vq').is_deleted is False


def test_delete_user_urls_drained_on_shutdown(app, dao, make_url, user_id, tokens):
    dao.save(make_url())
    app.state.pipeline.flush_interval = 60
    with TestClient(app) as client:
        client.cookies.set(AUTH_COOKIE_NAME, tokens.issue(user_id))
        response = client.request('DELETE', '/api/user/urls', content=json.dumps(['YBbxJEcQ9vq']), headers=JSON)
        assert response.status_code == 202

    assert dao.get('YBbxJEcQ9vq').is_deleted is True


@pytest.mark.parametrize('body', ['', '{"short_url": "YBbxJEcQ9vq"}', '[1, 2]', '['])
def test_delete_user_urls_bad_body(client, login, user_id, body):
    login(user_id)
    response = client.request('DELETE', '/api/user/urls', content=body, headers=JSON)
    assert response.status_code == 400


def test_delete_user_urls_bad_content_type(client, login, user_id):
    login(user_id)
    response = client.request('DELETE', '/api/user/urls', content='["YBbxJEcQ9vq"]', headers={'Content-Type': 'text/plain'})
    assert response.status_code == 400


def test_delete_user_urls_unauthenticated(client):
    response = client.request('DELETE', '/api/user/urls', content='["YBbxJEcQ9vq"]', headers=JSON)
    assert response.status_code == 401


def test_delete_user_urls_after_shutdown(app, client, login, user_id):
    login(user_id)
    app.state.pipeline.stop()

    response = client.request('DELETE', '/api/user/urls', content='["YBbxJEcQ9vq"]', headers=JSON)

    assert response.status_code == 500
    assert 'shutting down' in response.text
