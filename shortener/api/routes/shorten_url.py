"""Shortening endpoints.

Routes:
    POST /                    text/plain original URL -> text/plain short URL
    POST /api/shorten         {"url": ...} -> {"result": ..., "success": ..., "message": ...}
    POST /api/shorten/batch   [{"correlation_id", "original_url"}] -> [{"correlation_id", "short_url"}]

HTTP responses:
    201: short URL(s) created
    400: bad content type, unparsable body, empty or invalid URL
    409: the URL is already shortened (body carries the existing short URL)
    500: data store failure or malformed auth cookie

All three endpoints identify the caller permissively (a new user is minted
when the Authorization cookie is absent) and always (re)issue the cookie.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from shortener.auth import TokenService
from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import DAOError, ShortURLAlreadyExistsError, ShortURLCollisionError
from shortener.models import URLModel
from shortener.utils import generate_shortcode, get_short_url, is_valid_url
from shortener.utils.config import Config
from shortener.api.dependencies import get_config, get_dao, get_tokens
from shortener.api.negotiation import BadRequestBodyError, GzipRoute, is_json, is_text_plain
from shortener.api.responses import shorten_json_error, text_error
from shortener.api.schemas import BatchRequest, BatchResponseItem, ShortenRequest, ShortenResponse
from shortener.api.security import AuthenticatedUser, permissive_user, set_auth_cookie
from shortener.api.constants import (
    BATCH_CREATED,
    DATA_STORE_ERROR,
    INVALID_BODY,
    INVALID_CONTENT_TYPE,
    INVALID_URL,
    SHORT_URL_CONFLICT,
    SHORT_URL_CREATED,
)


logger = logging.getLogger(__name__)

router = APIRouter(route_class=GzipRoute)


@router.post('/')
async def shorten_text(
    request: Request,
    user: AuthenticatedUser = Depends(permissive_user),
    dao: URLBaseDAO = Depends(get_dao),
    config: Config = Depends(get_config),
    tokens: TokenService = Depends(get_tokens),
) -> Response:
    # 1- Check content type (compressed bodies may carry the encoding's own type)
    content_type = request.headers.get('content-type', '')
    if 'content-encoding' not in request.headers and not is_text_plain(content_type):
        return text_error(400, f'bad content-type: {content_type}', 'only "text/plain" is allowed', event=INVALID_CONTENT_TYPE)

    # 2- Read original URL from body
    try:
        original_url = (await request.body()).decode('utf-8').strip()
    except (BadRequestBodyError, UnicodeDecodeError) as e:
        return text_error(400, 'failed to read request body', e, event=INVALID_BODY)

    if not original_url:
        return text_error(400, 'empty body, must contain URL', event=INVALID_URL)
    if not is_valid_url(original_url):
        return text_error(400, f'shorten url: {original_url}', 'not a valid URL', event=INVALID_URL)

    # 3- Store record
    shortcode = generate_shortcode(original_url)
    url = URLModel(short_url=shortcode, original_url=original_url, user_id=user.user_id)
    status_code = 201
    try:
        await run_in_threadpool(dao.save, url)
    except ShortURLCollisionError as e:
        return text_error(409, 'short url collision', e, event=SHORT_URL_CONFLICT, extra={'original_url': original_url})
    except ShortURLAlreadyExistsError:
        logger.info(
            'URL already shortened. Responding with 409.',
            extra={'shortcode': shortcode, 'original_url': original_url, 'event': SHORT_URL_CONFLICT},
        )
        status_code = 409
    except DAOError as e:
        return text_error(500, f'failed to save url: {original_url}', e, event=DATA_STORE_ERROR)
    else:
        logger.info(
            'Short URL created. Responding with 201.',
            extra={'shortcode': shortcode, 'user_id': user.user_id, 'event': SHORT_URL_CREATED},
        )

    # 4- Respond with short URL and (re)issue identity
    response = PlainTextResponse(get_short_url(shortcode, config.return_address), status_code=status_code)
    set_auth_cookie(response, tokens, user.user_id)
    return response


@router.post('/api/shorten')
async def shorten_json(
    request: Request,
    user: AuthenticatedUser = Depends(permissive_user),
    dao: URLBaseDAO = Depends(get_dao),
    config: Config = Depends(get_config),
    tokens: TokenService = Depends(get_tokens),
) -> Response:
    # 1- Check content type
    content_type = request.headers.get('content-type', '')
    if not is_json(content_type):
        return shorten_json_error(400, f'bad content-type: {content_type}', 'only "application/json" is allowed', event=INVALID_CONTENT_TYPE)

    # 2- Decode request body
    try:
        payload = ShortenRequest.model_validate_json(await request.body())
    except (BadRequestBodyError, ValidationError) as e:
        return shorten_json_error(400, 'failed to decode request', e, event=INVALID_BODY)

    original_url = payload.url.strip()
    if not original_url:
        return shorten_json_error(400, 'url field is empty', 'url is not provided', event=INVALID_URL)
    if not is_valid_url(original_url):
        return shorten_json_error(400, f'shorten url: {original_url}', 'not a valid URL', event=INVALID_URL)

    # 3- Store record
    shortcode = generate_shortcode(original_url)
    url = URLModel(short_url=shortcode, original_url=original_url, user_id=user.user_id)
    status_code = 201
    try:
        await run_in_threadpool(dao.save, url)
    except ShortURLCollisionError as e:
        return shorten_json_error(409, 'short url collision', e, event=SHORT_URL_CONFLICT, extra={'original_url': original_url})
    except ShortURLAlreadyExistsError:
        logger.info(
            'URL already shortened. Responding with 409.',
            extra={'shortcode': shortcode, 'original_url': original_url, 'event': SHORT_URL_CONFLICT},
        )
        status_code = 409
    except DAOError as e:
        return shorten_json_error(500, f'failed to save url: {original_url}', e, event=DATA_STORE_ERROR)
    else:
        logger.info(
            'Short URL created. Responding with 201.',
            extra={'shortcode': shortcode, 'user_id': user.user_id, 'event': SHORT_URL_CREATED},
        )

    # 4- Respond with short URL and (re)issue identity
    body = ShortenResponse(result=get_short_url(shortcode, config.return_address))
    response = JSONResponse(body.model_dump(), status_code=status_code)
    set_auth_cookie(response, tokens, user.user_id)
    return response


@router.post('/api/shorten/batch')
async def shorten_batch(
    request: Request,
    user: AuthenticatedUser = Depends(permissive_user),
    dao: URLBaseDAO = Depends(get_dao),
    config: Config = Depends(get_config),
    tokens: TokenService = Depends(get_tokens),
) -> Response:
    """Shorten a batch of URLs

    Output order follows input order. A single invalid entry rejects the whole
    batch before anything is stored; a valid batch is stored atomically.
    """
    # 1- Check content type
    content_type = request.headers.get('content-type', '')
    if not is_json(content_type):
        return text_error(400, f'bad content-type: {content_type}', 'only "application/json" is allowed', event=INVALID_CONTENT_TYPE)

    # 2- Decode request body
    try:
        items = BatchRequest.validate_json(await request.body())
    except (BadRequestBodyError, ValidationError) as e:
        return text_error(400, 'failed to decode request', e, event=INVALID_BODY)

    if not items:
        return text_error(400, 'empty batch', 'at least one URL is required', event=INVALID_BODY)

    # 3- Validate every entry before storing anything
    urls: list[URLModel] = []
    result: list[BatchResponseItem] = []
    for item in items:
        original_url = item.original_url.strip()
        if not original_url or not is_valid_url(original_url):
            return text_error(
                400,
                f'shorten url: {item.original_url!r}',
                'not a valid URL',
                event=INVALID_URL,
                extra={'correlation_id': item.correlation_id},
            )
        shortcode = generate_shortcode(original_url)
        urls.append(URLModel(short_url=shortcode, original_url=original_url, user_id=user.user_id))
        result.append(BatchResponseItem(correlation_id=item.correlation_id, short_url=get_short_url(shortcode, config.return_address)))

    # 4- Store records in one go
    try:
        await run_in_threadpool(dao.save_all, urls)
    except ShortURLCollisionError as e:
        return text_error(409, 'short url collision', e, event=SHORT_URL_CONFLICT)
    except DAOError as e:
        return text_error(500, 'failed to save records', e, event=DATA_STORE_ERROR)

    logger.info(
        'Batch of short URLs created. Responding with 201.',
        extra={'count': len(urls), 'user_id': user.user_id, 'event': BATCH_CREATED},
    )
    response = JSONResponse([item.model_dump() for item in result], status_code=201)
    set_auth_cookie(response, tokens, user.user_id)
    return response
