import uuid

import pytest

from shortener.models import URLModel


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def other_user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def make_url(user_id):
    """Build URLModel records owned by `user_id` unless told otherwise."""

    def _make_url(short_url: str = 'YBbxJEcQ9vq', original_url: str = 'https://go.dev/', owner: str | None = None) -> URLModel:
        return URLModel(short_url=short_url, original_url=original_url, user_id=owner or user_id)

    return _make_url
