import functools
from typing import TypeVar, Any
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError

from shortener.dao.exceptions import DataStoreError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])


def handle_sqlalchemy_error[F](method: F) -> F:
    """Wrap SQL-interacting DAO methods to handle database errors

    Args:
        method (Callable[..., Any]):
            DAO method performing SQL operations which may raise sqlalchemy.exc.SQLAlchemyError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on database failures.

    Example:
        >>> @handle_sqlalchemy_error
        ... def count_urls(self):
        ...     with self.engine.connect() as conn:
        ...         return conn.execute(select(func.count()).select_from(url_table)).scalar_one()
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            url = self.engine.url.render_as_string(hide_password=True)
            raise DataStoreError(f'Database operation {method.__name__}() failed at {url}.') from e

    return wrapper
