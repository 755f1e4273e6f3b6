from shortener.models.url_model import URLModel, DeletionIntent


__all__ = [
    'URLModel',
    'DeletionIntent',
]
