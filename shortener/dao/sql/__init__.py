from shortener.dao.sql.schema import metadata, url_table
from shortener.dao.sql.url_sql_dao import URLSqlDAO, normalize_dsn


__all__ = [
    'metadata',
    'url_table',
    'URLSqlDAO',
    'normalize_dsn',
]
