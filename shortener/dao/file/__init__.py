from shortener.dao.file.url_file_dao import URLFileDAO, read_records


__all__ = [
    'URLFileDAO',
    'read_records',
]
