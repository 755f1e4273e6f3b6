"""gRPC twin of the HTTP API.

Classes:
    ShortenerService:
        Implements the `shortener.v1.Shortener` methods on top of the same data
        store, token service and deletion pipeline as the HTTP application.

Authentication:
    The caller's token travels in the `authorization` metadata entry as
    'Bearer <jwt>'. ShortenURL and ShortenBatch mint a new user when it is
    absent and always send a fresh token back in the initial metadata.
    GetURLs and DeleteURLs reject callers without a valid token.

Status codes:
    INVALID_ARGUMENT: empty or invalid URL, empty batch, malformed short key
    UNAUTHENTICATED: missing or invalid token
    PERMISSION_DENIED: GetStats from a peer outside the trusted subnet
    NOT_FOUND: unknown or deleted short key, user owns no URLs
    ALREADY_EXISTS: URL already shortened (details carry the short URL), key collision
    UNAVAILABLE: no database behind Ping, deletion pipeline shutting down
    INTERNAL: data store failure
"""

import uuid
import logging
import ipaddress
from typing import NoReturn
from urllib.parse import unquote

import grpc

from shortener.auth import TokenService
from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import (
    DAOError,
    DatabaseNotConnectedError,
    ShortURLAlreadyExistsError,
    ShortURLCollisionError,
    ShortURLNotFoundError,
)
from shortener.deletion import DeletionPipeline
from shortener.exceptions import InvalidTokenError
from shortener.models import DeletionIntent, URLModel
from shortener.utils import generate_shortcode, get_short_url, is_shortcode, is_valid_url
from shortener.utils.config import Config
from shortener.api.constants import (
    BATCH_CREATED,
    DATA_STORE_ERROR,
    DATABASE_NOT_CONNECTED,
    DELETION_ACCEPTED,
    DELETION_PIPELINE_STOPPED,
    INVALID_BODY,
    INVALID_SHORTCODE,
    INVALID_URL,
    REDIRECT_SUCCESS,
    SHORT_URL_CONFLICT,
    SHORT_URL_CREATED,
    SHORT_URL_GONE,
    SHORT_URL_NOT_FOUND,
    UNAUTHORIZED,
    UNTRUSTED_CLIENT,
    USER_ISSUED,
    USER_URLS_EMPTY,
    USER_URLS_LISTED,
)
from shortener.rpc import messages


logger = logging.getLogger(__name__)

AUTHORIZATION_METADATA = 'authorization'

_SERVER_ERRORS = {grpc.StatusCode.INTERNAL, grpc.StatusCode.UNAVAILABLE}


def abort(
    context: grpc.ServicerContext,
    code: grpc.StatusCode,
    message: str,
    cause: Exception | str | None = None,
    *,
    event: str,
    extra: dict | None = None,
) -> NoReturn:
    """Log the outcome and terminate the RPC with a status code

    Server-side codes (INTERNAL, UNAVAILABLE) log at ERROR with the exception
    attached, everything else at INFO.
    """
    fields = {'grpc_code': code.name, 'event': event, **(extra or {})}
    if cause is not None:
        fields['cause'] = str(cause)
    if code in _SERVER_ERRORS:
        exc_info = cause if isinstance(cause, BaseException) else None
        logger.error('%s. Responding with %s.', message, code.name, exc_info=exc_info, extra=fields)
    else:
        logger.info('%s. Responding with %s.', message, code.name, extra=fields)
    context.abort(code, message if cause is None else f'{message}: {cause}')


def peer_address(peer: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Extract the IP address of a gRPC peer string ('ipv4:10.0.0.1:5123', 'ipv6:[::1]:5123')."""
    kind, _, rest = peer.partition(':')
    if kind not in ('ipv4', 'ipv6'):
        return None
    host = unquote(rest).rpartition(':')[0].strip('[]')
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


class ShortenerService:
    """Handlers of the `shortener.v1.Shortener` service

    Every handler takes the decoded request message and the servicer context,
    and returns the response message or aborts the call.
    """

    def __init__(self, config: Config, dao: URLBaseDAO, tokens: TokenService, pipeline: DeletionPipeline):
        self.config = config
        self.dao = dao
        self.tokens = tokens
        self.pipeline = pipeline

    # -------------------------------
    # Identity
    # -------------------------------

    def _token(self, context: grpc.ServicerContext) -> str | None:
        for key, value in context.invocation_metadata() or ():
            if key == AUTHORIZATION_METADATA:
                return value
        return None

    def _strict_user(self, context: grpc.ServicerContext) -> str:
        token = self._token(context)
        if token is None:
            abort(context, grpc.StatusCode.UNAUTHENTICATED, 'unauthorized: missing auth token', event=UNAUTHORIZED)
        try:
            return self.tokens.parse(token)
        except InvalidTokenError as e:
            abort(context, grpc.StatusCode.UNAUTHENTICATED, 'unauthorized', e, event=UNAUTHORIZED)

    def _permissive_user(self, context: grpc.ServicerContext) -> str:
        if self._token(context) is None:
            user_id = str(uuid.uuid4())
            logger.debug('Issued identity to anonymous client.', extra={'user_id': user_id, 'event': USER_ISSUED})
        else:
            user_id = self._strict_user(context)
        context.send_initial_metadata(((AUTHORIZATION_METADATA, self.tokens.issue(user_id)),))
        return user_id

    # -------------------------------
    # Handlers
    # -------------------------------

    def shorten_url(self, request, context: grpc.ServicerContext):
        original_url = request.original_url.strip()
        if not original_url:
            abort(context, grpc.StatusCode.INVALID_ARGUMENT, 'url is not provided', event=INVALID_URL)
        if not is_valid_url(original_url):
            abort(context, grpc.StatusCode.INVALID_ARGUMENT, 'invalid url', event=INVALID_URL, extra={'original_url': original_url})

        user_id = self._permissive_user(context)
        shortcode = generate_shortcode(original_url)
        short_url = get_short_url(shortcode, self.config.return_address)
        try:
            self.dao.save(URLModel(short_url=shortcode, original_url=original_url, user_id=user_id))
        except ShortURLCollisionError as e:
            abort(context, grpc.StatusCode.ALREADY_EXISTS, 'short url collision', e, event=SHORT_URL_CONFLICT)
        except ShortURLAlreadyExistsError:
            abort(
                context,
                grpc.StatusCode.ALREADY_EXISTS,
                f'already exists: {short_url}',
                event=SHORT_URL_CONFLICT,
                extra={'shortcode': shortcode, 'original_url': original_url},
            )
        except DAOError as e:
            abort(context, grpc.StatusCode.INTERNAL, 'failed to save to database', e, event=DATA_STORE_ERROR)

        logger.info('Short URL created over RPC.', extra={'shortcode': shortcode, 'user_id': user_id, 'event': SHORT_URL_CREATED})
        return messages.ShortenURLResponse(short_url=short_url)

    def shorten_batch(self, request, context: grpc.ServicerContext):
        """Shorten a batch of URLs; one invalid entry rejects the whole batch before anything is stored."""
        if not request.items:
            abort(context, grpc.StatusCode.INVALID_ARGUMENT, 'empty batch', event=INVALID_BODY)

        user_id = self._permissive_user(context)
        urls: list[URLModel] = []
        response = messages.ShortenBatchResponse()
        for item in request.items:
            original_url = item.original_url.strip()
            if not original_url:
                abort(context, grpc.StatusCode.INVALID_ARGUMENT, 'url is not provided', event=INVALID_URL, extra={'correlation_id': item.correlation_id})
            if not is_valid_url(original_url):
                abort(context, grpc.StatusCode.INVALID_ARGUMENT, 'invalid url', event=INVALID_URL, extra={'correlation_id': item.correlation_id})
            shortcode = generate_shortcode(original_url)
            urls.append(URLModel(short_url=shortcode, original_url=original_url, user_id=user_id))
            response.items.add(correlation_id=item.correlation_id, short_url=get_short_url(shortcode, self.config.return_address))

        try:
            self.dao.save_all(urls)
        except ShortURLCollisionError as e:
            abort(context, grpc.StatusCode.ALREADY_EXISTS, 'short url collision', e, event=SHORT_URL_CONFLICT)
        except DAOError as e:
            abort(context, grpc.StatusCode.INTERNAL, 'failed to save to database', e, event=DATA_STORE_ERROR)

        logger.info('Batch of short URLs created over RPC.', extra={'count': len(urls), 'user_id': user_id, 'event': BATCH_CREATED})
        return response

    def delete_urls(self, request, context: grpc.ServicerContext):
        user_id = self._strict_user(context)
        for short_url in request.urls:
            if not self.pipeline.enqueue(DeletionIntent(short_url=short_url, user_id=user_id)):
                abort(context, grpc.StatusCode.UNAVAILABLE, 'service is shutting down', event=DELETION_PIPELINE_STOPPED)

        logger.info('Deletion accepted over RPC.', extra={'user_id': user_id, 'count': len(request.urls), 'event': DELETION_ACCEPTED})
        return messages.DeleteURLsResponse()

    def get_urls(self, request, context: grpc.ServicerContext):
        user_id = self._strict_user(context)
        try:
            urls = self.dao.get_all_by_user_id(user_id)
        except ShortURLNotFoundError:
            urls = []
        except DAOError as e:
            abort(context, grpc.StatusCode.INTERNAL, 'failed to get from database', e, event=DATA_STORE_ERROR, extra={'user_id': user_id})

        urls = [url for url in urls if not url.is_deleted]
        if not urls:
            abort(context, grpc.StatusCode.NOT_FOUND, 'nothing found', event=USER_URLS_EMPTY, extra={'user_id': user_id})

        response = messages.GetURLsResponse()
        for url in urls:
            response.items.add(short_url=get_short_url(url.short_url, self.config.return_address), original_url=url.original_url)
        logger.info('Listed user short URLs over RPC.', extra={'user_id': user_id, 'count': len(urls), 'event': USER_URLS_LISTED})
        return response

    def redirect(self, request, context: grpc.ServicerContext):
        short_key = request.short_url
        if not is_shortcode(short_key):
            abort(context, grpc.StatusCode.INVALID_ARGUMENT, f'invalid short url: {short_key!r}', event=INVALID_SHORTCODE)

        try:
            url = self.dao.get(short_key)
        except ShortURLNotFoundError as e:
            abort(context, grpc.StatusCode.NOT_FOUND, 'nothing found', e, event=SHORT_URL_NOT_FOUND)
        except DAOError as e:
            abort(context, grpc.StatusCode.INTERNAL, 'failed to retrieve url', e, event=DATA_STORE_ERROR)

        # No gRPC analogue of 410 Gone
        if url.is_deleted:
            abort(context, grpc.StatusCode.NOT_FOUND, 'nothing found', event=SHORT_URL_GONE, extra={'shortcode': short_key})

        logger.info('Resolved short URL over RPC.', extra={'shortcode': short_key, 'event': REDIRECT_SUCCESS})
        return messages.RedirectResponse(location=url.original_url)

    def ping(self, request, context: grpc.ServicerContext):
        try:
            self.dao.ping()
        except DatabaseNotConnectedError as e:
            abort(context, grpc.StatusCode.UNAVAILABLE, 'failed to ping database', e, event=DATABASE_NOT_CONNECTED)
        except DAOError as e:
            abort(context, grpc.StatusCode.INTERNAL, 'failed to ping database', e, event=DATA_STORE_ERROR)
        return messages.PingResponse()

    def get_stats(self, request, context: grpc.ServicerContext):
        """Count URLs and users, for peers inside the trusted subnet only

        The peer address of the connection is checked, not client metadata.
        """
        peer = context.peer()
        if self.config.trusted_subnet is None:
            abort(context, grpc.StatusCode.PERMISSION_DENIED, 'forbidden: no trusted subnet configured', event=UNTRUSTED_CLIENT, extra={'peer': peer})
        address = peer_address(peer)
        if address is None or address not in self.config.trusted_subnet:
            abort(context, grpc.StatusCode.PERMISSION_DENIED, f'forbidden: {peer} is not trusted', event=UNTRUSTED_CLIENT, extra={'peer': peer})

        try:
            urls = self.dao.count_urls()
            users = self.dao.count_users()
        except DAOError as e:
            abort(context, grpc.StatusCode.INTERNAL, 'failed to get stats', e, event=DATA_STORE_ERROR)
        return messages.GetStatsResponse(urls=urls, users=users)

    def method_handlers(self) -> dict[str, grpc.RpcMethodHandler]:
        """Map every RPC method name to a unary handler with its message codecs."""
        behaviors = {
            'ShortenURL': self.shorten_url,
            'ShortenBatch': self.shorten_batch,
            'DeleteURLs': self.delete_urls,
            'GetURLs': self.get_urls,
            'Redirect': self.redirect,
            'Ping': self.ping,
            'GetStats': self.get_stats,
        }
        handlers = {}
        for method, behavior in behaviors.items():
            request, response = messages.METHODS[method]
            handlers[method] = grpc.unary_unary_rpc_method_handler(
                behavior,
                request_deserializer=messages.CLASSES[request].FromString,
                response_serializer=messages.CLASSES[response].SerializeToString,
            )
        return handlers
