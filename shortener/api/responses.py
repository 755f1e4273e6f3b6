"""Response helpers shared by the HTTP handlers.

Error bodies follow two shapes:
    - text/plain '<message>: <cause>' for text and generic JSON routes;
    - {"result": "", "success": false, "message": "<message>: <cause>"} for POST /api/shorten.

Every error helper logs the outcome: 4xx at INFO with the failing input,
5xx at ERROR with the exception attached.
"""

import logging

from fastapi.responses import JSONResponse, PlainTextResponse


logger = logging.getLogger(__name__)


def _error_message(message: str, cause: Exception | str | None) -> str:
    return message if cause is None else f'{message}: {cause}'


def _log_error(status_code: int, message: str, cause: Exception | str | None, event: str, extra: dict | None) -> None:
    fields = {'status_code': status_code, 'event': event, **(extra or {})}
    if cause is not None:
        fields['cause'] = str(cause)
    if status_code >= 500:
        exc_info = cause if isinstance(cause, BaseException) else None
        logger.error('%s. Responding with %s.', message, status_code, exc_info=exc_info, extra=fields)
    else:
        logger.info('%s. Responding with %s.', message, status_code, extra=fields)


def text_error(
    status_code: int,
    message: str,
    cause: Exception | str | None = None,
    *,
    event: str,
    extra: dict | None = None,
) -> PlainTextResponse:
    _log_error(status_code, message, cause, event, extra)
    return PlainTextResponse(_error_message(message, cause), status_code=status_code)


def shorten_json_error(
    status_code: int,
    message: str,
    cause: Exception | str | None = None,
    *,
    event: str,
    extra: dict | None = None,
) -> JSONResponse:
    _log_error(status_code, message, cause, event, extra)
    body = {'result': '', 'success': False, 'message': _error_message(message, cause)}
    return JSONResponse(body, status_code=status_code)
