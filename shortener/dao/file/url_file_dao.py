"""Data Access Object (DAO) implementation backed by an append-only JSON lines file

The file is a log of URL records, one JSON object per line:

    {"id": "...", "short_url": "YBbxJEcQ9vq", "original_url": "https://go.dev/", "user_id": "...", "is_deleted": false}

On startup the log is replayed into an in-memory index (a URLMemoryDAO) which
serves every read. When two lines share a short key the later one wins, so
soft deletions are persisted by appending the deleted copy of a record.

Responsibilities:
    - Replay the log at startup, tolerating a truncated last line;
    - Append every saved or deleted record before touching the index, cutting
      partially written lines off the log;
    - Degrade to a pure in-memory store when no file path is configured.

Classes:
    URLFileDAO:
        DAO storing URLModel records in an append-only file.

Functions:
    read_records(path: str) -> Iterator[URLModel]:
        Decode records from a log file until EOF or the first undecodable line.

Example:
    >>> dao = URLFileDAO('/tmp/short-url-db.json')
    >>> dao.save(URLModel(short_url='YBbxJEcQ9vq', original_url='https://go.dev/', user_id='u1'))
    >>> URLFileDAO('/tmp/short-url-db.json').get('YBbxJEcQ9vq').original_url
    'https://go.dev/'
"""

import os
import json
import logging
import threading
from collections.abc import Iterator

from beartype import beartype

from shortener.models import URLModel, DeletionIntent
from shortener.dao.base import URLBaseDAO
from shortener.dao.memory import URLMemoryDAO
from shortener.dao.file.helpers import handle_file_error
from shortener.dao.exceptions import (
    DataStoreError,
    ShortURLAlreadyExistsError,
    ShortURLCollisionError,
    ShortURLNotFoundError,
    DatabaseNotConnectedError,
)


logger = logging.getLogger(__name__)


def read_records(path: str) -> Iterator[URLModel]:
    """Decode URL records from a JSON lines file

    Replay stops at the first line that can't be decoded (e.g. a partial line
    left by a crash) without raising.

    Args:
        path (str):
            Path to the log file. A missing file yields nothing.

    Yields:
        URLModel: records in file order.
    """
    if not os.path.exists(path):
        return

    with open(path, encoding='utf-8') as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                yield URLModel.from_dict(json.loads(line))
            except (ValueError, KeyError, TypeError, AttributeError):
                logger.warning(
                    'Stopped replaying file storage at an undecodable record.',
                    extra={'path': path, 'lineno': lineno},
                )
                return


class URLFileDAO(URLBaseDAO):
    """File-backed Data Access Object (DAO) for URL records

    Attributes:
        path (str):
            Path to the log file. Empty string disables the file entirely.

        index (URLMemoryDAO):
            Authoritative in-memory index serving all reads.

    NOTE:
        Writes are serialized by an internal lock so that the check for an
        existing short key, the file append and the index update happen as one step.
    """

    def __init__(self, path: str):
        """Replay the log file and open it for appending

        Args:
            path (str):
                Path to the log file. It is created if missing.

        Raises:
            DataStoreError:
                If the file can't be read or opened for appending.
        """
        self.path = path
        self.index = URLMemoryDAO()
        self._lock = threading.Lock()
        self._file = None

        if not path:
            logger.info('File storage path is empty. Records are kept in memory only.')
            return

        try:
            replayed = 0
            for url in read_records(path):
                self.index.restore(url)
                replayed += 1
            # Unbuffered so that a failed write can be truncated away
            self._file = open(path, 'ab', buffering=0)  # noqa: SIM115
        except OSError as e:
            raise DataStoreError(f"Can't open file storage at {path}.") from e

        logger.info('File storage initialized.', extra={'path': path, 'replayed': replayed})

    @handle_file_error
    @beartype
    def save(self, url: URLModel, **kwargs) -> None:
        with self._lock:
            self._raise_if_stored(url)
            self._append(url)
            self.index.save(url)

    @handle_file_error
    @beartype
    def save_all(self, urls: list[URLModel], **kwargs) -> None:
        with self._lock:
            pending: dict[str, URLModel] = {}
            for url in urls:
                existing = pending.get(url.short_url) or self._stored(url.short_url)
                if existing is None:
                    pending[url.short_url] = url
                elif existing.original_url != url.original_url:
                    raise ShortURLCollisionError(_collision_message(url.short_url))

            for url in pending.values():
                self._append(url)
                self.index.restore(url)

    def get(self, short_url: str, **kwargs) -> URLModel:
        return self.index.get(short_url, **kwargs)

    def get_all_by_user_id(self, user_id: str, **kwargs) -> list[URLModel]:
        return self.index.get_all_by_user_id(user_id, **kwargs)

    @handle_file_error
    @beartype
    def delete_urls(self, *intents: DeletionIntent, **kwargs) -> None:
        if not intents:
            return
        with self._lock:
            for intent in intents:
                url = self._stored(intent.short_url)
                if url is None or url.user_id != intent.user_id or url.is_deleted:
                    continue
                deleted = url.deleted()
                self._append(deleted)
                self.index.restore(deleted)

    def count_urls(self, **kwargs) -> int:
        return self.index.count_urls()

    def count_users(self, **kwargs) -> int:
        return self.index.count_users()

    def ping(self, **kwargs) -> None:
        raise DatabaseNotConnectedError()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def _stored(self, short_url: str) -> URLModel | None:
        try:
            return self.index.get(short_url)
        except ShortURLNotFoundError:
            return None

    def _raise_if_stored(self, url: URLModel) -> None:
        existing = self._stored(url.short_url)
        if existing is None:
            return
        if existing.original_url != url.original_url:
            raise ShortURLCollisionError(_collision_message(url.short_url))
        raise ShortURLAlreadyExistsError(f"Short URL with code '{url.short_url}' already exists.")

    def _append(self, url: URLModel) -> None:
        """Write one record to the log. Caller must hold the lock.

        A failed write is cut off the log so that replay keeps reading the
        lines appended after it. If even that fails the log is closed and every
        later write raises.
        """
        if self._file is None:
            return
        if self._file.closed:
            raise OSError(f'File storage at {self.path} is read-only after a failed write.')

        line = (json.dumps(url.to_dict()) + '\n').encode('utf-8')
        offset = self._file.tell()
        try:
            if self._file.write(line) != len(line):
                raise OSError(f'Short write to file storage at {self.path}.')
        except OSError:
            self._discard_partial_write(offset)
            raise

    def _discard_partial_write(self, offset: int) -> None:
        try:
            self._file.truncate(offset)
            self._file.seek(offset)
        except OSError:
            logger.exception(
                'Failed to discard a partial record. File storage is now read-only.',
                extra={'path': self.path, 'offset': offset, 'event': 'FILE_STORAGE_READ_ONLY'},
            )
            self._file.close()


def _collision_message(short_url: str) -> str:
    return f"Short URL with code '{short_url}' is already mapped to a different original URL."
