from shortener.dao.memory.rwlock import ReadWriteLock
from shortener.dao.memory.url_memory_dao import URLMemoryDAO


__all__ = [
    'ReadWriteLock',
    'URLMemoryDAO',
]
