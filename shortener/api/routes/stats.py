"""Service statistics for trusted clients.

Routes:
    GET /api/internal/stats -> 200 {"urls": <int>, "users": <int>} | 403 if X-Real-IP is not trusted
"""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import DAOError
from shortener.api.dependencies import get_dao
from shortener.api.responses import text_error
from shortener.api.schemas import Stats
from shortener.api.security import trusted_client
from shortener.api.constants import DATA_STORE_ERROR


router = APIRouter()


@router.get('/api/internal/stats', dependencies=[Depends(trusted_client)])
async def get_stats(dao: URLBaseDAO = Depends(get_dao)) -> Response:
    try:
        urls = await run_in_threadpool(dao.count_urls)
        users = await run_in_threadpool(dao.count_users)
    except DAOError as e:
        return text_error(500, 'failed to get stats', e, event=DATA_STORE_ERROR)
    return JSONResponse(Stats(urls=urls, users=users).model_dump())
