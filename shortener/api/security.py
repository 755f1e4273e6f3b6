"""Authentication and network access checks.

Functions:
    permissive_user(request, tokens) -> AuthenticatedUser
        Dependency: identify the caller from the Authorization cookie, minting a new user if absent.

    strict_user(request, tokens) -> str
        Dependency: identify the caller from the Authorization cookie, rejecting with 401 if absent or invalid.

    trusted_client(request, config) -> None
        Dependency: reject with 403 unless X-Real-IP lies in the trusted subnet.

    set_auth_cookie(response, tokens, user_id) -> None
        Attach a freshly issued token to the response.
"""

import uuid
import logging
import ipaddress
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, Response, status

from shortener.auth import TokenService
from shortener.constants import AUTH_COOKIE_NAME, REAL_IP_HEADER
from shortener.exceptions import InvalidTokenError
from shortener.utils.config import Config
from shortener.api.dependencies import get_config, get_tokens
from shortener.api.constants import INVALID_AUTH_TOKEN, UNAUTHORIZED, UNTRUSTED_CLIENT, USER_ISSUED


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    user_id: str
    is_new: bool = False


async def permissive_user(request: Request, tokens: TokenService = Depends(get_tokens)) -> AuthenticatedUser:
    token = request.cookies.get(AUTH_COOKIE_NAME)
    if token is None:
        user_id = str(uuid.uuid4())
        logger.debug('Issued identity to anonymous client.', extra={'user_id': user_id, 'event': USER_ISSUED})
        return AuthenticatedUser(user_id=user_id, is_new=True)

    try:
        return AuthenticatedUser(user_id=tokens.parse(token))
    except InvalidTokenError as e:
        logger.error(
            'Malformed auth token. Responding with 500.',
            extra={'cause': str(e), 'event': INVALID_AUTH_TOKEN},
        )
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f'failed to parse auth token: {e}') from e


async def strict_user(request: Request, tokens: TokenService = Depends(get_tokens)) -> str:
    token = request.cookies.get(AUTH_COOKIE_NAME)
    if token is None:
        logger.info('Missing auth cookie. Responding with 401.', extra={'path': request.url.path, 'event': UNAUTHORIZED})
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail='unauthorized: missing auth token')

    try:
        return tokens.parse(token)
    except InvalidTokenError as e:
        logger.info('Invalid auth token. Responding with 401.', extra={'cause': str(e), 'event': UNAUTHORIZED})
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail=f'unauthorized: {e}') from e


async def trusted_client(request: Request, config: Config = Depends(get_config)) -> None:
    real_ip = request.headers.get(REAL_IP_HEADER, '').strip()

    if config.trusted_subnet is None:
        logger.info('No trusted subnet configured. Responding with 403.', extra={'real_ip': real_ip, 'event': UNTRUSTED_CLIENT})
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail='forbidden: no trusted subnet configured')

    try:
        address = ipaddress.ip_address(real_ip)
    except ValueError:
        logger.info('Unparsable X-Real-IP header. Responding with 403.', extra={'real_ip': real_ip, 'event': UNTRUSTED_CLIENT})
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=f'forbidden: invalid client address {real_ip!r}') from None

    if address not in config.trusted_subnet:
        logger.info('Client outside trusted subnet. Responding with 403.', extra={'real_ip': real_ip, 'event': UNTRUSTED_CLIENT})
        raise HTTPException(status.HTTP_403_FORBIDDEN, detail=f'forbidden: {real_ip} is not trusted')


def set_auth_cookie(response: Response, tokens: TokenService, user_id: str) -> None:
    response.set_cookie(
        AUTH_COOKIE_NAME,
        tokens.issue(user_id),
        expires=tokens.expires_at(),
        httponly=True,
    )
