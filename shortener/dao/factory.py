import logging

from shortener.dao.base import URLBaseDAO
from shortener.dao.memory import URLMemoryDAO
from shortener.dao.file import URLFileDAO
from shortener.dao.sql import URLSqlDAO


logger = logging.getLogger(__name__)


def url_dao_from_config(dsn: str = '', file_storage_path: str = '') -> URLBaseDAO:
    """Pick and build the URL data store

    A non-empty DSN selects the relational backend; otherwise a non-empty file
    path selects the file backend; otherwise records live in memory only.

    Raises:
        DataStoreError:
            If the selected backend can't be initialized.
    """
    if dsn:
        logger.info('Using relational database URL storage.')
        return URLSqlDAO(dsn, create_schema=True)
    if file_storage_path:
        logger.info('Using file URL storage.', extra={'path': file_storage_path})
        return URLFileDAO(file_storage_path)
    logger.info('Using in-memory URL storage.')
    return URLMemoryDAO()
