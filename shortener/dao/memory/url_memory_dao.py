"""Data Access Object (DAO) implementation keeping URL records in process memory

Responsibilities:
    - Save and retrieve URL records from a dict keyed by short key;
    - List and count records per user;
    - Soft-delete records on behalf of their owners;
    - Report that no database is connected on ping.

Classes:
    URLMemoryDAO:
        DAO for storing and retrieving URLModel in a Python dict.

Example:
    >>> from shortener.models import URLModel
    >>> from shortener.dao.memory import URLMemoryDAO

    >>> dao = URLMemoryDAO()
    >>> dao.save(URLModel(short_url='YBbxJEcQ9vq', original_url='https://go.dev/', user_id='u1'))
    >>> dao.get('YBbxJEcQ9vq').original_url
    'https://go.dev/'
    >>> dao.ping()
    Traceback (most recent call last):
        ...
    shortener.dao.exceptions.DatabaseNotConnectedError: database not connected
"""

from beartype import beartype

from shortener.models import URLModel, DeletionIntent
from shortener.dao.base import URLBaseDAO
from shortener.dao.memory.rwlock import ReadWriteLock
from shortener.dao.exceptions import (
    ShortURLAlreadyExistsError,
    ShortURLCollisionError,
    ShortURLNotFoundError,
    DatabaseNotConnectedError,
)


class URLMemoryDAO(URLBaseDAO):
    """In-memory Data Access Object (DAO) for URL records

    Every operation is guarded by a ReadWriteLock: reads overlap, writes are
    exclusive. Listing by user is not snapshot-consistent with concurrent
    deletions.

    Methods:
        restore(url: URLModel) -> None:
            Insert or overwrite a record without conflict checks (used to replay logs).

        See URLBaseDAO for the rest of the contract.
    """

    def __init__(self):
        self._store: dict[str, URLModel] = {}
        self._lock = ReadWriteLock()

    @beartype
    def save(self, url: URLModel, **kwargs) -> None:
        with self._lock.write_lock():
            self._check_absent(url)
            self._store[url.short_url] = url

    @beartype
    def save_all(self, urls: list[URLModel], **kwargs) -> None:
        with self._lock.write_lock():
            pending: dict[str, URLModel] = {}
            for url in urls:
                existing = self._store.get(url.short_url) or pending.get(url.short_url)
                if existing is None:
                    pending[url.short_url] = url
                elif existing.original_url != url.original_url:
                    raise ShortURLCollisionError(_collision_message(url.short_url))
            # Nothing is written when a collision aborts the batch
            self._store.update(pending)

    @beartype
    def get(self, short_url: str, **kwargs) -> URLModel:
        with self._lock.read_lock():
            url = self._store.get(short_url)
        if url is None:
            raise ShortURLNotFoundError(f"Short URL with code '{short_url}' not found.")
        return url

    @beartype
    def get_all_by_user_id(self, user_id: str, **kwargs) -> list[URLModel]:
        with self._lock.read_lock():
            urls = [url for url in self._store.values() if url.user_id == user_id]
        if not urls:
            raise ShortURLNotFoundError(f"No short URLs found for user '{user_id}'.")
        return urls

    @beartype
    def delete_urls(self, *intents: DeletionIntent, **kwargs) -> None:
        if not intents:
            return
        with self._lock.write_lock():
            for intent in intents:
                url = self._store.get(intent.short_url)
                if url is None or url.user_id != intent.user_id or url.is_deleted:
                    continue
                self._store[intent.short_url] = url.deleted()

    def count_urls(self, **kwargs) -> int:
        with self._lock.read_lock():
            return len(self._store)

    def count_users(self, **kwargs) -> int:
        with self._lock.read_lock():
            return len({url.user_id for url in self._store.values()})

    def ping(self, **kwargs) -> None:
        raise DatabaseNotConnectedError()

    @beartype
    def restore(self, url: URLModel) -> None:
        with self._lock.write_lock():
            self._store[url.short_url] = url

    def _check_absent(self, url: URLModel) -> None:
        """Raise if the short key is taken. Caller must hold the write lock."""
        existing = self._store.get(url.short_url)
        if existing is None:
            return
        if existing.original_url != url.original_url:
            raise ShortURLCollisionError(_collision_message(url.short_url))
        raise ShortURLAlreadyExistsError(f"Short URL with code '{url.short_url}' already exists.")


def _collision_message(short_url: str) -> str:
    return f"Short URL with code '{short_url}' is already mapped to a different original URL."
