"""Liveness of the data store.

Routes:
    GET /ping -> 200 (empty body) | 500 '<reason>'

The memory and file backends have no database and always answer 500 with
'database not connected'.
"""

import logging

from fastapi import APIRouter, Depends, Response
from starlette.concurrency import run_in_threadpool

from shortener.dao.base import URLBaseDAO
from shortener.dao.exceptions import DAOError, DatabaseNotConnectedError
from shortener.api.dependencies import get_dao
from shortener.api.responses import text_error
from shortener.api.constants import DATA_STORE_ERROR, DATABASE_NOT_CONNECTED


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get('/ping')
async def ping(dao: URLBaseDAO = Depends(get_dao)) -> Response:
    try:
        await run_in_threadpool(dao.ping)
    except DatabaseNotConnectedError as e:
        return text_error(500, 'failed to ping database', e, event=DATABASE_NOT_CONNECTED)
    except DAOError as e:
        return text_error(500, 'failed to ping database', e, event=DATA_STORE_ERROR)

    logger.debug('Database is reachable.')
    return Response(status_code=200)
