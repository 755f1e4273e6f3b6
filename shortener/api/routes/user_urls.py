"""Per-user URL endpoints (Authorization cookie required).

Routes:
    GET    /api/user/urls   -> 200 [{"short_url", "original_url"}] | 204 if the user owns none
    DELETE /api/user/urls   ["<short key>", ...] -> 202, deletion happens asynchronously

Soft-deleted records are not listed.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import DAOError, ShortURLNotFoundError
from shortener.deletion import DeletionPipeline
from shortener.models import DeletionIntent
from shortener.utils import get_short_url
from shortener.utils.config import Config
from shortener.api.dependencies import get_config, get_dao, get_pipeline
from shortener.api.negotiation import BadRequestBodyError, GzipRoute, is_json
from shortener.api.responses import text_error
from shortener.api.schemas import DeleteRequest, UserURL
from shortener.api.security import strict_user
from shortener.api.constants import (
    DATA_STORE_ERROR,
    DELETION_ACCEPTED,
    DELETION_PIPELINE_STOPPED,
    INVALID_BODY,
    INVALID_CONTENT_TYPE,
    USER_URLS_EMPTY,
    USER_URLS_LISTED,
)


logger = logging.getLogger(__name__)

router = APIRouter(route_class=GzipRoute)


@router.get('/api/user/urls')
async def get_user_urls(
    user_id: str = Depends(strict_user),
    dao: URLBaseDAO = Depends(get_dao),
    config: Config = Depends(get_config),
) -> Response:
    try:
        urls = await run_in_threadpool(dao.get_all_by_user_id, user_id)
    except ShortURLNotFoundError:
        urls = []
    except DAOError as e:
        return text_error(500, 'failed to get URLs', e, event=DATA_STORE_ERROR, extra={'user_id': user_id})

    urls = [url for url in urls if not url.is_deleted]
    if not urls:
        logger.info('User owns no short URLs. Responding with 204.', extra={'user_id': user_id, 'event': USER_URLS_EMPTY})
        return Response(status_code=204)

    body = [UserURL(short_url=get_short_url(url.short_url, config.return_address), original_url=url.original_url).model_dump() for url in urls]
    logger.info(
        'Listed user short URLs. Responding with 200.',
        extra={'user_id': user_id, 'count': len(body), 'event': USER_URLS_LISTED},
    )
    return JSONResponse(body, status_code=200)


@router.delete('/api/user/urls')
async def delete_user_urls(
    request: Request,
    user_id: str = Depends(strict_user),
    pipeline: DeletionPipeline = Depends(get_pipeline),
) -> Response:
    # 1- Check content type
    content_type = request.headers.get('content-type', '')
    if not is_json(content_type):
        return text_error(400, f'bad content-type: {content_type}', 'only "application/json" is allowed', event=INVALID_CONTENT_TYPE)

    # 2- Decode short keys
    try:
        short_urls = DeleteRequest.validate_json(await request.body())
    except (BadRequestBodyError, ValidationError) as e:
        return text_error(400, 'failed to decode request', e, event=INVALID_BODY)

    # 3- Hand intents over to the deletion pipeline (ownership is checked by the store)
    for short_url in short_urls:
        if not pipeline.enqueue(DeletionIntent(short_url=short_url, user_id=user_id)):
            return text_error(500, 'failed to schedule deletion', 'service is shutting down', event=DELETION_PIPELINE_STOPPED)

    logger.info(
        'Deletion accepted. Responding with 202.',
        extra={'user_id': user_id, 'count': len(short_urls), 'event': DELETION_ACCEPTED},
    )
    return Response(status_code=202)
