"""Abstract base class for URL data access objects (DAOs).

This class establishes a consistent contract for all URL DAO implementations,
regardless of the underlying storage mechanism (memory, append-only file, SQL).

Responsibilities:
    - Provide an interface for saving, retrieving, listing and soft-deleting URLModel objects.
    - Standardize error handling across multiple data store implementations.
    - Enforce a consistent API for use by the HTTP handlers and the deletion pipeline.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from shortener.models import URLModel, DeletionIntent
        >>> from shortener.dao.memory import URLMemoryDAO

        >>> dao = URLMemoryDAO()

        >>> url = URLModel(
        ...     short_url='YBbxJEcQ9vq',
        ...     original_url='https://go.dev/',
        ...     user_id='8f14e45f-ceea-467a-9575-6e0a4f1c3c11',
        ... )
        >>> dao.save(url)

        >>> dao.get('YBbxJEcQ9vq').original_url
        'https://go.dev/'

        >>> dao.delete_urls(DeletionIntent('YBbxJEcQ9vq', '8f14e45f-ceea-467a-9575-6e0a4f1c3c11'))
        >>> dao.get('YBbxJEcQ9vq').is_deleted
        True
"""

from abc import ABC, abstractmethod

from shortener.models import URLModel, DeletionIntent


class URLBaseDAO(ABC):
    """Interface for URL data access objects (DAOs).

    Methods:
        save(url: URLModel, **kwargs) -> None:
            Insert a new URLModel into the data store.
            Raises ShortURLAlreadyExistsError if the short key already exists.
            Raises DataStoreError on write failure.

        save_all(urls: list[URLModel], **kwargs) -> None:
            Insert many URLModels, skipping the ones already stored.
            Raises DataStoreError on write failure.

        get(short_url: str, **kwargs) -> URLModel:
            Retrieve a URLModel (soft-deleted or not) by its short key.
            Raises ShortURLNotFoundError if the entry does not exist.

        get_all_by_user_id(user_id: str, **kwargs) -> list[URLModel]:
            List every record owned by a user.
            Raises ShortURLNotFoundError if the user owns nothing.

        delete_urls(*intents: DeletionIntent, **kwargs) -> None:
            Soft-delete records whose short key and owner both match.

        count_urls(**kwargs) -> int:
            Number of stored records.

        count_users(**kwargs) -> int:
            Number of distinct owners.

        ping(**kwargs) -> None:
            Probe liveness.
            Raises DatabaseNotConnectedError for data stores without a database.

    Subclassing:
        Datastore-specific implementations (e.g., URLMemoryDAO or URLSqlDAO)
        must extend this class and implement all abstract methods.

    NOTE:
        - Records are never removed. Deletion only flips `is_deleted`, which keeps
          the short key reserved and the mapping available for auditing.
    """

    @abstractmethod
    def save(self, url: URLModel, **kwargs) -> None:
        """Insert a new URLModel into the data store.

        Args:
            url (URLModel):
                The URLModel instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Raises:
            ShortURLAlreadyExistsError:
                If a URLModel with the same short key and original URL already exists.

            ShortURLCollisionError:
                If the short key is already mapped to a different original URL.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def save_all(self, urls: list[URLModel], **kwargs) -> None:
        """Insert many URLModels into the data store.

        Records whose short key is already stored are skipped.

        Args:
            urls (list[URLModel]):
                The URLModel instances to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, short_url: str, **kwargs) -> URLModel:
        """Retrieve a URLModel from the data store by its short key.

        Args:
            short_url (str):
                The short key of the URLModel to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            URLModel: The stored record, including its `is_deleted` flag.

        Raises:
            ShortURLNotFoundError:
                If no URLModel with the given short key exists.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get_all_by_user_id(self, user_id: str, **kwargs) -> list[URLModel]:
        """Retrieve every URLModel owned by a user.

        Soft-deleted records are included; filtering is left to the caller.

        Args:
            user_id (str):
                The owner's unique identifier.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            list[URLModel]: The user's records.

        Raises:
            ShortURLNotFoundError:
                If the user owns no records.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def delete_urls(self, *intents: DeletionIntent, **kwargs) -> None:
        """Soft-delete the records designated by the given intents.

        Intents whose short key is unknown or owned by another user are
        silently ignored.

        Args:
            *intents (DeletionIntent):
                (short key, user id) pairs to delete.

            **kwargs:
                Additional keyword arguments, used by data store.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def count_urls(self, **kwargs) -> int:
        """Return the number of stored records (soft-deleted included)."""
        pass

    @abstractmethod
    def count_users(self, **kwargs) -> int:
        """Return the number of distinct record owners."""
        pass

    @abstractmethod
    def ping(self, **kwargs) -> None:
        """Probe data store liveness.

        Raises:
            DatabaseNotConnectedError:
                If the data store is not backed by a database.

            DataStoreError:
                If the database is unreachable.
        """
        pass

    def close(self) -> None:  # noqa: B027
        """Release resources held by the data store."""
        pass
