"""Signed bearer tokens carrying the caller's user identity.

Tokens are HS256-signed JWTs with the claims {'user_id': <uuid4>, 'exp': <unix time>}
and are carried in the 'Authorization' cookie as 'Bearer <jwt>'.

Classes:
    TokenService:
        Issue and parse bearer tokens with a shared signing key.

Example:
    >>> from shortener.auth import TokenService
    >>> tokens = TokenService('a-signing-key-that-is-long-enough!', expiration=3600)
    >>> token = tokens.issue('9b2f6a8e-1c1d-4a8b-9a43-0c6f4a6f2b7e')
    >>> tokens.parse(token)
    '9b2f6a8e-1c1d-4a8b-9a43-0c6f4a6f2b7e'
"""

import uuid
import secrets
import logging
from datetime import datetime, timedelta, UTC

import jwt

from shortener.constants import BEARER_PREFIX, Defaults
from shortener.exceptions import InvalidTokenError


logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


class TokenService:
    """Issue and verify user identity tokens

    Attributes:
        expiration (timedelta): lifetime of issued tokens
    """

    def __init__(self, signing_key: str = '', expiration: float = Defaults.JWT_EXPIRATION):
        if not signing_key:
            # Tokens issued with a random key do not survive a restart
            logger.warning(
                'No JWT signing key configured, using a random key.',
                extra={'event': 'JWT_RANDOM_SIGNING_KEY'},
            )
            signing_key = secrets.token_urlsafe(32)
        self._signing_key = signing_key
        self.expiration = timedelta(seconds=expiration)

    def issue(self, user_id: str) -> str:
        """Create a 'Bearer <jwt>' token for the user, expiring `expiration` from now."""
        payload = {
            'user_id': user_id,
            'exp': datetime.now(UTC) + self.expiration,
        }
        return BEARER_PREFIX + jwt.encode(payload, self._signing_key, algorithm=ALGORITHM)

    def parse(self, token: str) -> str:
        """Verify a token and extract its user ID

        The 'Bearer ' prefix is optional.

        Args:
            token (str): token as stored in the Authorization cookie

        Returns:
            str: user ID (uuid4 string)

        Raises:
            InvalidTokenError: if the signature, algorithm, expiry or user ID claim is invalid
        """
        token = token.removeprefix(BEARER_PREFIX)
        try:
            claims = jwt.decode(token, self._signing_key, algorithms=[ALGORITHM], options={'require': ['exp']})
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f'Failed to parse token: {e}') from e

        user_id = claims.get('user_id')
        try:
            return str(uuid.UUID(str(user_id)))
        except ValueError:
            raise InvalidTokenError(f'Token carries an invalid user ID ({user_id!r}).') from None

    def expires_at(self) -> datetime:
        """Expiry of a token issued now (used for the cookie 'expires' attribute)."""
        return datetime.now(UTC) + self.expiration
