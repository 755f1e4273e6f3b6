import uuid
from dataclasses import dataclass, field, replace, asdict

from shortener.types import URLRecordDict


@dataclass(frozen=True)
class URLModel:
    """Represent a shortened URL record.

    Attributes:
        short_url (str):
            Base58 short key; unique across the data store.
        original_url (str):
            The long URL the short key redirects to. Frozen at creation.
        user_id (str):
            UUID of the user who created the record.
        id (str):
            Opaque record identifier (UUID). Generated when omitted.
        is_deleted (bool):
            Soft-delete flag. Once set it never clears.

    Example:
        >>> url = URLModel(
        ...     short_url='YBbxJEcQ9vq',
        ...     original_url='https://go.dev/',
        ...     user_id='8f14e45f-ceea-467a-9575-6e0a4f1c3c11',
        ... )
        >>> url.is_deleted
        False
        >>> url.deleted().is_deleted
        True
    """

    short_url: str
    original_url: str
    user_id: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    is_deleted: bool = False

    def deleted(self) -> 'URLModel':
        """Return a soft-deleted copy of this record."""
        return replace(self, is_deleted=True)

    def to_dict(self) -> URLRecordDict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: URLRecordDict) -> 'URLModel':
        """Build a record from its JSON representation.

        Raises:
            KeyError: If a required field is missing.
        """
        return cls(
            id=str(data['id']),
            short_url=str(data['short_url']),
            original_url=str(data['original_url']),
            user_id=str(data.get('user_id') or ''),
            is_deleted=bool(data.get('is_deleted', False)),
        )


@dataclass(frozen=True)
class DeletionIntent:
    """Request from a user to soft-delete one of their short URLs.

    The data store applies the intent only when both the short key and the
    owner match a stored record.
    """

    short_url: str
    user_id: str
