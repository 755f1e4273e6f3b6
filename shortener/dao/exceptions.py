"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    ShortURLNotFoundError:
        Raised when a URLModel is not found in the data store.

    ShortURLAlreadyExistsError:
        Raised when attempting to insert a URLModel whose short key is already stored.

    ShortURLCollisionError:
        Raised when the stored record under the same short key points to a different original URL.

    DataStoreError:
        Raised when there is an error in the data store (e.g., connection issues, I/O failures, etc.).

    DatabaseNotConnectedError:
        Raised by backends which are not backed by a real database when pinged.

Example:
    >>> from shortener.dao.exceptions import ShortURLNotFoundError
    >>> raise ShortURLNotFoundError("Short URL with code 'abc123' not found.")
    Traceback (most recent call last):
        ...
    shortener.dao.exceptions.ShortURLNotFoundError: Short URL with code 'abc123' not found.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    pass


class ShortURLNotFoundError(DAOError):
    """Exception raised when a URLModel is not found in the data store."""

    pass


class ShortURLAlreadyExistsError(DAOError):
    """Exception raised when attempting to insert a URLModel that already exists in the data store."""

    pass


class ShortURLCollisionError(ShortURLAlreadyExistsError):
    """Exception raised when a short key is already mapped to a different original URL."""

    pass


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, file I/O errors, etc.
    """

    pass


class DatabaseNotConnectedError(DAOError):
    """Exception raised when pinging a data store which has no database behind it."""

    def __init__(self, message: str = 'database not connected'):
        super().__init__(message)
