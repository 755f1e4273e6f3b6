from shortener.dao.base import URLBaseDAO
from shortener.dao.memory import URLMemoryDAO
from shortener.dao.file import URLFileDAO
from shortener.dao.sql import URLSqlDAO
from shortener.dao.factory import url_dao_from_config


__all__ = [
    'URLBaseDAO',
    'URLMemoryDAO',
    'URLFileDAO',
    'URLSqlDAO',
    'url_dao_from_config',
]
