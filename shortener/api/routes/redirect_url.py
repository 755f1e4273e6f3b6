"""Short URL resolution.

Routes:
    GET /{short_key}

HTTP responses:
    307: redirect, Location holds the original URL
    400: the key is not Base58
    404: unknown key
    410: the key was deleted by its owner
    500: data store failure

IMPORTANT: include this router last, `/{short_key}` would otherwise shadow
single-segment routes such as `/ping`.
"""

import logging

from fastapi import APIRouter, Depends, Response
from fastapi.responses import RedirectResponse
from starlette.concurrency import run_in_threadpool

from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import DAOError, ShortURLNotFoundError
from shortener.utils import is_shortcode
from shortener.api.dependencies import get_dao
from shortener.api.responses import text_error
from shortener.api.constants import (
    DATA_STORE_ERROR,
    INVALID_SHORTCODE,
    REDIRECT_SUCCESS,
    SHORT_URL_GONE,
    SHORT_URL_NOT_FOUND,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get('/{short_key}')
async def redirect_url(short_key: str, dao: URLBaseDAO = Depends(get_dao)) -> Response:
    # 1- Validate shortcode
    if not is_shortcode(short_key):
        return text_error(400, f'invalid short url: {short_key!r}', event=INVALID_SHORTCODE)

    # 2- Look up record
    try:
        url = await run_in_threadpool(dao.get, short_key)
    except ShortURLNotFoundError as e:
        return text_error(404, f'no such url: {short_key}', e, event=SHORT_URL_NOT_FOUND)
    except DAOError as e:
        return text_error(500, f'failed to get url: {short_key}', e, event=DATA_STORE_ERROR)

    if url.is_deleted:
        return text_error(410, f'url {short_key} has been deleted', event=SHORT_URL_GONE)

    # 3- Redirect client to the original URL
    logger.info('Redirecting client. Responding with 307.', extra={'shortcode': short_key, 'event': REDIRECT_SUCCESS})
    return RedirectResponse(url.original_url, status_code=307)
